"""Symmetric encryption of monitored URLs.

URLs in sites.json may be stored encrypted so that a public repository or
dashboard does not reveal what is being watched. The payload format is
``base64(iv || AES-256-CBC(PKCS7(url)))`` with a fresh 16-byte IV per call and
the key derived as SHA-256 of the operator secret. Payloads produced by the
older command-line tool (which wrapped base64 output every 60 characters) are
accepted as well.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os
from typing import TYPE_CHECKING

import structlog
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from sitewatch.config import INSECURE_DEFAULT_KEY
from sitewatch.errors import CryptoError

if TYPE_CHECKING:
    from sitewatch.config import CryptoSettings

log = structlog.get_logger()

IV_SIZE = 16
_BLOCK_BITS = algorithms.AES.block_size


def derive_key(secret: str) -> bytes:
    """Derive the 32-byte AES key from an operator secret."""
    return hashlib.sha256(secret.encode("utf-8")).digest()


class URLCipher:
    """Encrypts and decrypts URL strings under one passphrase-derived key."""

    def __init__(self, secret: str, *, insecure: bool = False) -> None:
        self._key = derive_key(secret)
        self.insecure = insecure

    @classmethod
    def from_settings(cls, settings: CryptoSettings) -> URLCipher:
        """Build a cipher from configuration.

        Raises CryptoError when no secret is configured and the insecure
        fallback key has not been explicitly allowed.
        """
        if settings.secret is not None and settings.secret.get_secret_value():
            return cls(settings.secret.get_secret_value())

        if not settings.allow_insecure_default_key:
            raise CryptoError(
                "No encryption secret configured. Set SITEWATCH__CRYPTO__SECRET, or set "
                "crypto.allow_insecure_default_key to use the public fallback key."
            )

        log.warning(
            "crypto_insecure_default_key",
            message=(
                "Using the well-known fallback key. Encrypted URLs are only "
                "obfuscated and can be decrypted by anyone."
            ),
        )
        return cls(INSECURE_DEFAULT_KEY, insecure=True)

    def encrypt(self, url: str) -> str:
        """Encrypt ``url``. Every call uses a new IV, so output differs per call."""
        iv = os.urandom(IV_SIZE)
        padder = padding.PKCS7(_BLOCK_BITS).padder()
        padded = padder.update(url.encode("utf-8")) + padder.finalize()

        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return base64.b64encode(iv + ciphertext).decode("ascii")

    def decrypt(self, data: str) -> str:
        """Decrypt a payload produced by :meth:`encrypt`.

        Raises CryptoError on malformed base64, truncated payloads, padding
        mismatches (typically a wrong key) and non-UTF-8 plaintext.
        """
        try:
            raw = base64.b64decode("".join(data.split()), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CryptoError(f"Malformed encrypted URL: {exc}") from exc

        iv, ciphertext = raw[:IV_SIZE], raw[IV_SIZE:]
        if len(iv) < IV_SIZE or not ciphertext or len(ciphertext) % IV_SIZE:
            raise CryptoError("Malformed encrypted URL: payload has an invalid length")

        decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        try:
            unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return plaintext.decode("utf-8")
        except ValueError as exc:
            # UnicodeDecodeError is a ValueError too.
            raise CryptoError("Could not decrypt URL: wrong key or corrupted data") from exc
