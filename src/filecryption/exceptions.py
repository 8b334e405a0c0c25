# -*- coding: utf-8 -*-
"""
Exception hierarchy for the container codec and its primitives.

Guidelines:
- Never put secrets (passwords, keys, plaintext, metadata) into messages.
- Authentication failures are reported uniformly; callers must not be able to
  tell a wrong password from a tampered ciphertext.
- Format and integrity failures are distinct classes but carry no byte offsets
  or field values.
"""

from __future__ import annotations

from typing import Optional

AUTHENTICATION_FAILED_MESSAGE = "Wrong password or corrupted file"


class CryptoError(Exception):
    """Base exception for all filecryption failures."""

    def __init__(
        self, message: str = "", *, cause: Optional[BaseException] = None
    ) -> None:
        super().__init__(message)
        self.__cause__ = cause


# AEAD primitive
class EncryptionError(CryptoError):
    """Raised on encryption failures (invalid key/nonce, provider errors)."""


class DecryptionError(CryptoError):
    """Raised on decryption failures."""


class AuthenticationError(DecryptionError):
    """Raised when the authentication tag does not verify."""

    def __init__(
        self,
        message: str = AUTHENTICATION_FAILED_MESSAGE,
        *,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, cause=cause)


# KDF
class KdfError(CryptoError):
    """Base class for key-derivation failures."""


class KDFParameterError(KdfError):
    """Raised on invalid KDF parameters (salt length, iterations, output size)."""


class KDFAlgorithmError(KdfError):
    """Raised when the KDF backend fails internally."""


# Container framing
class ContainerError(CryptoError):
    """Base class for container structure failures."""


class FormatError(ContainerError):
    """Container too short, or an inner length field points past the data."""


class IntegrityError(ContainerError):
    """Decompression failed after the container authenticated."""


class InputValidationError(CryptoError, ValueError):
    """Raised when caller-supplied arguments are rejected before any crypto runs."""


__all__ = [
    "AUTHENTICATION_FAILED_MESSAGE",
    "CryptoError",
    "EncryptionError",
    "DecryptionError",
    "AuthenticationError",
    "KdfError",
    "KDFParameterError",
    "KDFAlgorithmError",
    "ContainerError",
    "FormatError",
    "IntegrityError",
    "InputValidationError",
]
