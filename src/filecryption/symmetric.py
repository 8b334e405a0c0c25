# -*- coding: utf-8 -*-
"""
AES-256-GCM AEAD cipher used for the container body.

- Key is 32 bytes, nonce 12 bytes (supplied by the caller, random per
  container), tag 16 bytes appended to the ciphertext. No AAD.
- Every tag failure, whether from a wrong key, a tampered ciphertext or a
  truncated body, is reported as one AuthenticationError with one message.
- No keys, nonces, tags or plaintext fragments are logged.

Thread-safety:
- No shared state; a single SymmetricCipher may be used from many threads.
"""

from __future__ import annotations

import logging
from typing import Final

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from filecryption.exceptions import (
    AuthenticationError,
    DecryptionError,
    EncryptionError,
)
from filecryption.protocols import BytesLike
from filecryption.utils import generate_random_bytes, zero_memory

_LOGGER: Final = logging.getLogger(__name__)

KEY_LEN: Final[int] = 32
NONCE_LEN: Final[int] = 12
TAG_LEN: Final[int] = 16


def generate_nonce() -> bytes:
    """Fresh random 96-bit GCM nonce."""
    return generate_random_bytes(NONCE_LEN)


class SymmetricCipher:
    """
    AES-256-GCM encryption/decryption with ciphertext||tag framing.

    Examples:
        >>> cipher = SymmetricCipher()
        >>> nonce = generate_nonce()
        >>> combined = cipher.encrypt(b"0" * 32, nonce, b"hello")
        >>> cipher.decrypt(b"0" * 32, nonce, combined)
        b'hello'
    """

    __slots__ = ()

    @staticmethod
    def _valid_key(key: bytes) -> bool:
        return isinstance(key, (bytes, bytearray)) and len(key) == KEY_LEN

    @staticmethod
    def _valid_nonce(nonce: bytes) -> bool:
        return isinstance(nonce, (bytes, bytearray)) and len(nonce) == NONCE_LEN

    def encrypt(self, key: bytes, nonce: bytes, plaintext: BytesLike) -> bytes:
        """
        Encrypt with AES-256-GCM.

        Args:
            key: 32-byte AES key.
            nonce: 12-byte nonce, never reused with the same key.
            plaintext: data to encrypt; a bytearray is wiped after use.

        Returns:
            ciphertext||tag.

        Raises:
            EncryptionError: on invalid key/nonce or provider failure.
        """
        if not self._valid_key(key):
            raise EncryptionError("AES-256-GCM key must be 32 bytes")
        if not self._valid_nonce(nonce):
            raise EncryptionError("GCM nonce must be 12 bytes")

        try:
            encryptor = Cipher(algorithms.AES(bytes(key)), modes.GCM(bytes(nonce))).encryptor()
            ciphertext = encryptor.update(bytes(plaintext)) + encryptor.finalize()
            tag = encryptor.tag
        except Exception as exc:
            _LOGGER.error("AES-GCM encryption failed: %s", exc.__class__.__name__)
            raise EncryptionError("AES-GCM encryption failed") from exc
        finally:
            if isinstance(plaintext, bytearray):
                zero_memory(plaintext)

        return ciphertext + tag

    def decrypt(self, key: bytes, nonce: bytes, data: bytes) -> bytes:
        """
        Decrypt ciphertext||tag.

        Raises:
            DecryptionError: on a malformed key or nonce (caller bug).
            AuthenticationError: if the tag does not verify, for any reason.
        """
        if not self._valid_key(key):
            raise DecryptionError("AES-256-GCM key must be 32 bytes")
        if not self._valid_nonce(nonce):
            raise DecryptionError("GCM nonce must be 12 bytes")
        if len(data) < TAG_LEN:
            _LOGGER.warning("AES-GCM tag verification failed")
            raise AuthenticationError()

        ct = bytes(data[:-TAG_LEN])
        tg = bytes(data[-TAG_LEN:])
        try:
            decryptor = Cipher(algorithms.AES(bytes(key)), modes.GCM(bytes(nonce), tg)).decryptor()
            return decryptor.update(ct) + decryptor.finalize()
        except InvalidTag as exc:
            _LOGGER.warning("AES-GCM tag verification failed")
            raise AuthenticationError() from exc


__all__ = [
    "KEY_LEN",
    "NONCE_LEN",
    "TAG_LEN",
    "SymmetricCipher",
    "generate_nonce",
]
