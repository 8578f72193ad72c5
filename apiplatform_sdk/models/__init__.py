"""Value types shared across the SDK."""

from .provider import AuthMethod, ProviderConfig
from .request import QueryString
from .response import ApiResponse, parse_max_page, parse_total_items
from .token import ApiToken

__all__ = [
    "ApiResponse",
    "ApiToken",
    "AuthMethod",
    "ProviderConfig",
    "QueryString",
    "parse_max_page",
    "parse_total_items",
]
