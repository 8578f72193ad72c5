"""Per-provider endpoint facades over :class:`ApiPlatformClient`."""

from .cegid import CegidClient
from .econfiance import EconfianceClient
from .emonsite import EmonsiteClient
from .ems_stock import EmsStockClient

__all__ = [
    "CegidClient",
    "EconfianceClient",
    "EmonsiteClient",
    "EmsStockClient",
]
