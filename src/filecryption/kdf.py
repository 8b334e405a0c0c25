# -*- coding: utf-8 -*-
"""
Password-based key derivation: PBKDF2-HMAC-SHA256 with strict parameter
validation and best-effort wiping of bytearray passwords.

The container format does not record KDF parameters, so the defaults here
(100_000 iterations, 16-byte salt, 32-byte key) are part of the wire format.
"""
from __future__ import annotations

import hashlib
import logging
from typing import Final, Optional, cast

from filecryption.exceptions import KDFAlgorithmError, KDFParameterError
from filecryption.protocols import PBKDF2Params, Password
from filecryption.utils import generate_salt as _utils_generate_salt
from filecryption.utils import zero_memory

_LOGGER: Final = logging.getLogger(__name__)

PBKDF2_ITERATIONS: Final[int] = 100_000
SALT_LEN: Final[int] = 16
KEY_LEN: Final[int] = 32

_MIN_SALT_LEN: Final[int] = 8
_MAX_SALT_LEN: Final[int] = 64
_MIN_OUT_LEN: Final[int] = 16
_MAX_OUT_LEN: Final[int] = 64
_MIN_PBKDF2_ITERS: Final[int] = 100_000
_ALLOWED_HASH: Final[str] = "sha256"


def generate_salt(length: int = SALT_LEN) -> bytes:
    """
    Generate a fresh random salt.

    Raises:
        KDFParameterError: if length is outside 8..64.
    """
    if length < _MIN_SALT_LEN or length > _MAX_SALT_LEN:
        raise KDFParameterError("Salt length must be between 8 and 64 bytes")
    try:
        return _utils_generate_salt(length)
    except ValueError as e:
        raise KDFParameterError(str(e)) from e


class DefaultKdfProvider:
    """
    PBKDF2-HMAC-SHA256 provider implementing KdfProtocol.

    Examples:
        >>> kdf = DefaultKdfProvider()
        >>> key = kdf.derive_key("password", b"salt1234", 32, params=make_pbkdf2_params())
        >>> len(key)
        32
    """

    __slots__ = ()

    def derive_key(
        self,
        password: Password,
        salt: bytes,
        length: int,
        *,
        params: PBKDF2Params,
    ) -> bytes:
        """
        Derive key from password and salt.

        Args:
            password: str (UTF-8 encoded), bytes or bytearray. A bytearray is
                wiped after use.
            salt: 8..64 random bytes.
            length: output key length (16..64 bytes).
            params: PBKDF2 parameters.

        Returns:
            Derived key bytes.

        Raises:
            KDFParameterError: on invalid parameters.
            KDFAlgorithmError: on backend failure.
        """
        if not isinstance(salt, (bytes, bytearray)):
            raise KDFParameterError("Salt must be bytes")
        if len(salt) < _MIN_SALT_LEN or len(salt) > _MAX_SALT_LEN:
            raise KDFParameterError("Salt length must be between 8 and 64 bytes")
        if length < _MIN_OUT_LEN or length > _MAX_OUT_LEN:
            raise KDFParameterError("Output length must be between 16 and 64 bytes")

        try:
            if isinstance(password, str):
                try:
                    pw_bytes = password.encode("utf-8")
                except UnicodeEncodeError as exc:
                    raise KDFParameterError("Password is not encodable as UTF-8") from exc
            elif isinstance(password, (bytes, bytearray)):
                pw_bytes = bytes(password)
            else:
                raise KDFParameterError("Password must be str, bytes or bytearray")

            if not isinstance(params, dict) or params.get("version") != "pbkdf2":
                raise KDFAlgorithmError("Unsupported KDF version")
            return self._derive_pbkdf2(pw_bytes, bytes(salt), length, params)
        finally:
            if isinstance(password, bytearray):
                zero_memory(password)

    def _derive_pbkdf2(
        self, pw: bytes, salt: bytes, length: int, params: PBKDF2Params
    ) -> bytes:
        iterations = params.get("iterations", 0)
        hash_name = params.get("hash_name", "")
        if hash_name != _ALLOWED_HASH:
            raise KDFParameterError("PBKDF2 hash_name must be 'sha256'")
        if not isinstance(iterations, int) or iterations < _MIN_PBKDF2_ITERS:
            raise KDFParameterError(f"PBKDF2 iterations must be >= {_MIN_PBKDF2_ITERS}")
        try:
            dk: bytes = hashlib.pbkdf2_hmac(
                _ALLOWED_HASH, pw, salt, iterations, dklen=length
            )
        except Exception as exc:
            _LOGGER.error("PBKDF2 derivation failed: %s", exc.__class__.__name__)
            raise KDFAlgorithmError("PBKDF2 failed") from exc
        _LOGGER.debug("PBKDF2 derivation completed (iters=%d)", iterations)
        return dk


def make_pbkdf2_params(
    *,
    iterations: int = PBKDF2_ITERATIONS,
    hash_name: str = _ALLOWED_HASH,
) -> PBKDF2Params:
    """Construct a PBKDF2Params dict."""
    return cast(
        PBKDF2Params,
        {
            "version": "pbkdf2",
            "iterations": iterations,
            "hash_name": hash_name,
            "salt_len": SALT_LEN,
        },
    )


def derive_key(
    password: Password,
    salt: bytes,
    length: int = KEY_LEN,
    *,
    params: Optional[PBKDF2Params] = None,
    provider: Optional[DefaultKdfProvider] = None,
) -> bytes:
    """
    High-level KDF entry point with the container's default parameters.

    Identical (password, salt) always yields the identical key.
    """
    if provider is None:
        provider = DefaultKdfProvider()
    if params is None:
        params = make_pbkdf2_params()
    return provider.derive_key(password, salt, length, params=params)


__all__ = [
    "PBKDF2_ITERATIONS",
    "SALT_LEN",
    "KEY_LEN",
    "DefaultKdfProvider",
    "generate_salt",
    "make_pbkdf2_params",
    "derive_key",
]
