# -*- coding: utf-8 -*-
"""
High-level entry point around ContainerCodec.

ContainerService adds what callers of the bare codec usually need:
- async wrappers that run the CPU-bound work on a thread pool so an event
  loop is not stalled (each call resolves exactly once; work already started
  is not cancellable),
- file-level helpers that read a source file and write the container or the
  recovered file next to it.

No state is shared between calls; the executor is the only resource held.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import TracebackType
from typing import Final, Optional, Tuple, Type

from filecryption.config import CodecConfig
from filecryption.container import (
    ContainerBytes,
    ContainerCodec,
    DecodedFile,
    container_filename,
)
from filecryption.files import PathLike, SourceFile, read_source, write_output
from filecryption.protocols import Password

_LOGGER: Final = logging.getLogger(__name__)


class ContainerService:
    """
    Sync and async encode/decode plus file helpers.

    Example:
        >>> with ContainerService() as service:
        ...     blob = service.encode(SourceFile(b"x", "x.txt", "text/plain"), "pw")
        ...     service.decode(blob, "pw").name
        'x.txt'
    """

    def __init__(
        self,
        codec: Optional[ContainerCodec] = None,
        config: Optional[CodecConfig] = None,
    ) -> None:
        if codec is None:
            codec = ContainerCodec(config=config)
        self._codec = codec
        self._config = codec.config
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def codec(self) -> ContainerCodec:
        return self._codec

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._config.max_workers,
                thread_name_prefix="filecryption",
            )
        return self._executor

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "ContainerService":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    # --- in-memory ---

    def encode(
        self, source: SourceFile, password: Password, compress: Optional[bool] = None
    ) -> bytes:
        return self._codec.encode(
            source.data, source.name, source.mime_type, password, compress
        )

    def decode(
        self,
        container: ContainerBytes,
        password: Password,
        container_name: Optional[str] = None,
    ) -> DecodedFile:
        return self._codec.decode(container, password, container_name)

    async def encode_async(
        self, source: SourceFile, password: Password, compress: Optional[bool] = None
    ) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._get_executor(), self.encode, source, password, compress
        )

    async def decode_async(
        self,
        container: ContainerBytes,
        password: Password,
        container_name: Optional[str] = None,
    ) -> DecodedFile:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._get_executor(), self.decode, container, password, container_name
        )

    # --- on disk ---

    def encrypt_file(
        self,
        path: PathLike,
        password: Password,
        *,
        out_dir: Optional[PathLike] = None,
        compress: Optional[bool] = None,
        hide_name: bool = False,
    ) -> Path:
        """
        Encrypt a file into "<name>.enc" (or the hidden name) in out_dir,
        defaulting to the source file's directory.
        """
        src_path = Path(path)
        source = read_source(src_path)
        blob = self.encode(source, password, compress)
        target_dir = Path(out_dir) if out_dir is not None else src_path.parent
        name = container_filename(source.name, hide_name, self._config)
        return write_output(target_dir, name, blob)

    def decrypt_file(
        self,
        path: PathLike,
        password: Password,
        *,
        out_dir: Optional[PathLike] = None,
    ) -> Tuple[Path, DecodedFile]:
        """
        Decrypt a container file and write the recovered file under its
        original name (owner-only permissions) in out_dir, defaulting to the
        container's directory.
        """
        src_path = Path(path)
        if not src_path.is_file():
            raise FileNotFoundError(f"Input file not found: {src_path}")
        result = self.decode(src_path.read_bytes(), password, src_path.name)
        target_dir = Path(out_dir) if out_dir is not None else src_path.parent
        written = write_output(target_dir, result.name, result.data, private=True)
        return written, result


__all__ = ["ContainerService"]
