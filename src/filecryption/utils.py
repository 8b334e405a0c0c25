# -*- coding: utf-8 -*-
"""
Randomness and buffer helpers shared by the KDF, cipher and container layers:
a single CSPRNG entry point (OS RNG mixed through HKDF) with sanity checks,
and best-effort zeroization of mutable buffers.
"""
from __future__ import annotations

import logging
import math
import os
import secrets
from collections import Counter
from typing import Final, Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

_LOGGER: Final = logging.getLogger(__name__)

_MAX_RANDOM_BYTES: Final[int] = 1024 * 1024
_MIN_SALT: Final[int] = 8
_MAX_SALT: Final[int] = 64
_ENTROPY_SAMPLE_THRESHOLD: Final[int] = 256
_MIN_SHANNON_PER_BYTE: Final[float] = 7.20
_SMALL_APT_MIN_N: Final[int] = 32
_RNG_INFO: Final[bytes] = b"FILECRYPTION-RNG-v1"


def generate_random_bytes(n: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Two independent OS sources (os.urandom, secrets.token_bytes) are XORed and
    mixed via HKDF-SHA256, then checked for degenerate output.

    Args:
        n: number of bytes to generate (1..1MiB).

    Returns:
        Random bytes of requested length.

    Raises:
        ValueError: if n is out of range or the sanity checks fail.
    """
    if not isinstance(n, int) or n <= 0 or n > _MAX_RANDOM_BYTES:
        raise ValueError("Requested random size must be in 1..1MiB")

    src1 = os.urandom(n)
    src2 = secrets.token_bytes(n)
    ikm = bytes(a ^ b for a, b in zip(src1, src2))
    salt = src2[:16]
    out = HKDF(algorithm=hashes.SHA256(), length=n, salt=salt, info=_RNG_INFO).derive(
        ikm
    )

    _rct_apt_checks(out)
    if n >= _ENTROPY_SAMPLE_THRESHOLD:
        h = _shannon_entropy(out)
        if h < _MIN_SHANNON_PER_BYTE:
            _LOGGER.warning(
                "Entropy check low (%.2f bits/byte) on %d-byte sample; continuing", h, n
            )

    _LOGGER.debug("Generated %d random bytes", n)
    return out


def _rct_apt_checks(data: bytes) -> None:
    """Repetition count and adaptive proportion sanity checks."""
    if not data:
        raise ValueError("Empty data for entropy checks")
    if len(data) > 1 and all(b == data[0] for b in data):
        raise ValueError("Degenerate RNG output (all bytes equal)")
    if len(data) >= _SMALL_APT_MIN_N:
        freq: Counter[int] = Counter(data)
        max_prop = max(freq.values()) / float(len(data))
        if max_prop > 0.80:
            raise ValueError("RNG output fails adaptive proportion sanity check")


def _shannon_entropy(data: bytes) -> float:
    """Shannon entropy in bits per byte (0.0 .. 8.0)."""
    if not data:
        return 0.0
    freq: Counter[int] = Counter(data)
    n = len(data)
    ent: float = 0.0
    for c in freq.values():
        p = c / n
        ent -= p * math.log2(p)
    return ent


def generate_salt(length: int) -> bytes:
    """
    Generate a random salt.

    Raises:
        ValueError: if length is outside 8..64.
    """
    if not isinstance(length, int) or length < _MIN_SALT or length > _MAX_SALT:
        raise ValueError("Salt length must be between 8 and 64 bytes")
    return generate_random_bytes(length)


def zero_memory(buf: Optional[bytearray]) -> None:
    """
    Best-effort zeroization of a mutable buffer.

    Only bytearray can be wiped; immutable bytes and str copies made by the
    interpreter stay in memory until collected.
    """
    if buf is None:
        return
    try:
        for i in range(len(buf)):
            buf[i] = 0
    except (TypeError, AttributeError) as e:
        _LOGGER.debug("zero_memory skip (immutable): %s", e.__class__.__name__)


__all__ = [
    "generate_random_bytes",
    "generate_salt",
    "zero_memory",
]
