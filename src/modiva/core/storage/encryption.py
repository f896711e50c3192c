"""Fernet encryption for persisted state values.

The store hands the storage layer an already-serialized JSON string; the
cipher wraps that string so auth tokens and profile data are not readable
in the SQLite file.
"""

from __future__ import annotations

import logging

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class ValueCipher:
    """Encrypts and decrypts text values with Fernet symmetric encryption.

    Usage::

        cipher = ValueCipher(key=ValueCipher.generate_key())
        token = cipher.encrypt('{"theme": "dark"}')
        cipher.decrypt(token)  # '{"theme": "dark"}'
    """

    def __init__(self, key: str) -> None:
        """Initialize with a Fernet key.

        Raises:
            EncryptionError: If the key is empty or invalid.
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.encode("utf-8"))
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, value: str) -> str:
        """Encrypt a text value to a Fernet token string."""
        try:
            return self._fernet.encrypt(value.encode("utf-8")).decode("utf-8")
        except (AttributeError, TypeError) as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc

    def decrypt(self, token: str) -> str:
        """Decrypt a Fernet token string back to the original text.

        Raises:
            EncryptionError: If the token is invalid or was made with another key.
        """
        try:
            return self._fernet.decrypt(token.encode("utf-8")).decode("utf-8")
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        except (AttributeError, TypeError, UnicodeDecodeError) as exc:
            raise EncryptionError(f"Decryption failed: {exc}") from exc

    @staticmethod
    def generate_key() -> str:
        """Generate a new URL-safe base64-encoded Fernet key."""
        return Fernet.generate_key().decode("utf-8")
