"""Service layer exports."""

from .token_cipher import ApiTokenCipher
from .tokens import TokenService

__all__ = [
    "ApiTokenCipher",
    "TokenService",
]
