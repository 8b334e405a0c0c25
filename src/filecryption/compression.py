# -*- coding: utf-8 -*-
"""
Optional gzip pass over the plaintext payload.

Compression is applied only when requested and when the interpreter ships
gzip/zlib support. When it does not, the payload passes through untouched
and flag 0 is recorded; that fallback is not an error. On decode the flag
stored in the container alone decides whether to decompress.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Tuple

from filecryption.exceptions import IntegrityError

_LOGGER: Final = logging.getLogger(__name__)

FLAG_RAW: Final[int] = 0
FLAG_GZIP: Final[int] = 1

try:
    import gzip

    GZIP_AVAILABLE = True
except ImportError:
    GZIP_AVAILABLE = False
    _LOGGER.debug("gzip not available; containers will be written uncompressed")


class GzipCompressor:
    """
    CompressorProtocol implementation backed by the gzip module.

    Args:
        available: override runtime detection (None = use GZIP_AVAILABLE).
        level: gzip compression level 1..9.
    """

    __slots__ = ("_available", "_level")

    def __init__(self, available: Optional[bool] = None, level: int = 6) -> None:
        if not 1 <= level <= 9:
            raise ValueError("gzip level must be between 1 and 9")
        self._available = GZIP_AVAILABLE if available is None else available
        self._level = level

    @property
    def available(self) -> bool:
        return self._available

    def compress(self, payload: bytes, requested: bool) -> Tuple[bytes, int]:
        if not requested:
            return payload, FLAG_RAW
        if not self._available:
            _LOGGER.debug("Compression requested but unavailable; storing raw payload")
            return payload, FLAG_RAW
        body = gzip.compress(payload, compresslevel=self._level, mtime=0)
        _LOGGER.debug("Compressed payload %d -> %d bytes", len(payload), len(body))
        return body, FLAG_GZIP

    def decompress(self, body: bytes, flag: int) -> bytes:
        """
        Raises:
            IntegrityError: flag says gzip but the body cannot be inflated here.
        """
        if flag != FLAG_GZIP:
            return body
        if not self._available:
            _LOGGER.error("Container is compressed but gzip is not available")
            raise IntegrityError("Container is compressed but decompression is unavailable")
        try:
            return gzip.decompress(body)
        except Exception as exc:
            _LOGGER.error("Decompression failed: %s", exc.__class__.__name__)
            raise IntegrityError("Decompression failed") from exc


__all__ = [
    "FLAG_RAW",
    "FLAG_GZIP",
    "GZIP_AVAILABLE",
    "GzipCompressor",
]
