"""
Encryption of cached bearer tokens before they reach the token table.

Only the ``token`` field of an ``ApiToken`` is sealed; user, domain and
timestamps stay readable so the store can still look up and sweep rows.
"""

from __future__ import annotations

import base64

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from apiplatform_sdk.models import ApiToken

_KEY_INFO = b"apiplatform-sdk/api-tokens"


def _derive_key(secret: str) -> bytes:
    hkdf = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=_KEY_INFO)
    return base64.urlsafe_b64encode(hkdf.derive(secret.encode("utf-8")))


class ApiTokenCipher:
    """Seal and unseal ``ApiToken`` records with a key derived from a secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("SDK_TOKEN_ENCRYPTION_SECRET is empty; cannot encrypt tokens.")
        self._fernet = Fernet(_derive_key(secret))

    def seal(self, record: ApiToken) -> ApiToken:
        ciphertext = self._fernet.encrypt(record.token.encode("utf-8"))
        return record.model_copy(update={"token": ciphertext.decode("ascii")})

    def unseal(self, record: ApiToken) -> ApiToken:
        try:
            plaintext = self._fernet.decrypt(record.token.encode("ascii"))
        except (InvalidToken, UnicodeEncodeError) as exc:
            raise ValueError(
                f"Cannot decrypt the cached token of {record.user} for {record.domain}; "
                "the encryption secret changed or the row is corrupted."
            ) from exc
        return record.model_copy(update={"token": plaintext.decode("utf-8")})


__all__ = ["ApiTokenCipher"]
