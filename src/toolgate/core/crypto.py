"""
Symmetric encryption for credentials at rest (API keys, app ids, tokens).

Uses Fernet (AES-128-CBC + HMAC-SHA256) with a key derived from
TOOLGATE_CREDS_SECRET via PBKDF2. Deterministic derivation means we
don't need to store key material separately — just the secret.

Usage:
    cipher = SecretCipher.from_secret(config.store.secret)

    ciphertext = cipher.encrypt("sk-abc123...")
    plaintext  = cipher.decrypt(ciphertext)
"""

from __future__ import annotations

import base64
import logging

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

log = logging.getLogger("toolgate.crypto")

# Fixed salt so the same key is derived on every startup.
_SALT = b"toolgate-credential-encryption-v1"


class DecryptionError(ValueError):
    """Stored ciphertext could not be decrypted with the configured key."""


def derive_fernet_key(secret: str) -> bytes:
    """Derive a 32-byte Fernet key from the app secret via PBKDF2."""
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_SALT,
        iterations=480_000,
    )
    return base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))


class SecretCipher:
    """Encrypts and decrypts credential values.

    Without a secret it is an identity transform (dev convenience).
    """

    def __init__(self, fernet: Fernet | None = None):
        self._fernet = fernet

    @classmethod
    def from_secret(cls, secret: str) -> SecretCipher:
        if not secret:
            log.warning(
                "TOOLGATE_CREDS_SECRET not set — credentials will be stored in PLAINTEXT"
            )
            return cls(None)
        return cls(Fernet(derive_fernet_key(secret)))

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def encrypt(self, plaintext: str) -> str:
        if not self._fernet:
            return plaintext
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored value.

        Raises DecryptionError when the value was written with another key
        or is not Fernet ciphertext at all.
        """
        if not self._fernet:
            return ciphertext
        try:
            return self._fernet.decrypt(ciphertext.encode("utf-8")).decode("utf-8")
        except InvalidToken as e:
            raise DecryptionError("stored credential could not be decrypted") from e
