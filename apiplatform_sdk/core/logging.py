"""
Logging setup for applications embedding the SDK.
"""

import logging
import sys

# httpx logs every request at INFO; httpcore traces connections at DEBUG.
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", *, quiet_transport: bool = True) -> None:
    """Configure root logging with the SDK's format.

    ``quiet_transport`` caps the HTTP transport loggers at WARNING.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    if quiet_transport:
        for name in _TRANSPORT_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure_logging"]
