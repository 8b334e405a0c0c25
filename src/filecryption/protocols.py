# -*- coding: utf-8 -*-
"""
Dependency-injection Protocols for the container codec: key derivation,
AEAD cipher and compressor. ContainerCodec depends only on these contracts,
so tests and callers can substitute implementations.

Design notes:
- Protocols are @runtime_checkable to allow isinstance checks in tests.
- Minimal method sets; no global state.
"""

from __future__ import annotations

from typing import Literal, Protocol, Tuple, TypedDict, Union, runtime_checkable

BytesLike = Union[bytes, bytearray]
Password = Union[str, bytes, bytearray]


class PBKDF2Params(TypedDict):
    """PBKDF2-HMAC-SHA256 parameters."""

    version: Literal["pbkdf2"]
    iterations: int
    hash_name: Literal["sha256"]
    salt_len: int


@runtime_checkable
class KdfProtocol(Protocol):
    """Password + salt -> fixed-length key."""

    def derive_key(
        self,
        password: Password,
        salt: bytes,
        length: int,
        *,
        params: PBKDF2Params,
    ) -> bytes:
        """
        Derive a key.

        Raises:
            KDFParameterError: on invalid parameters.
            KDFAlgorithmError: on backend failure.
        """
        ...


@runtime_checkable
class AeadCipherProtocol(Protocol):
    """AEAD with caller-supplied nonce and tag appended to the ciphertext."""

    def encrypt(self, key: bytes, nonce: bytes, plaintext: BytesLike) -> bytes:
        """Return ciphertext||tag."""
        ...

    def decrypt(self, key: bytes, nonce: bytes, data: bytes) -> bytes:
        """
        Return plaintext.

        Raises:
            AuthenticationError: on any tag mismatch.
        """
        ...


@runtime_checkable
class CompressorProtocol(Protocol):
    """Optional compression pass gated by a one-byte flag."""

    def compress(self, payload: bytes, requested: bool) -> Tuple[bytes, int]:
        """Return (body, flag actually applied)."""
        ...

    def decompress(self, body: bytes, flag: int) -> bytes:
        """
        Undo compress() according to the stored flag.

        Raises:
            IntegrityError: if a flagged body cannot be decompressed.
        """
        ...


__all__ = [
    "BytesLike",
    "Password",
    "PBKDF2Params",
    "KdfProtocol",
    "AeadCipherProtocol",
    "CompressorProtocol",
]
