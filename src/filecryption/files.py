# -*- coding: utf-8 -*-
"""
Byte source/sink for files on disk: read a file as (bytes, name, media type)
and write recovered files or containers back without clobbering existing ones.
"""
from __future__ import annotations

import logging
import mimetypes
import os
import stat
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Final, Union

_LOGGER: Final = logging.getLogger(__name__)

DEFAULT_MIME_TYPE: Final[str] = "application/octet-stream"
_MAX_NAME_ATTEMPTS: Final[int] = 10_000

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class SourceFile:
    """A file's content together with its declared name and media type."""

    data: bytes
    name: str
    mime_type: str = DEFAULT_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.data)


def guess_mime_type(name: str) -> str:
    mime_type, _ = mimetypes.guess_type(name, strict=False)
    return mime_type or DEFAULT_MIME_TYPE


def read_source(path: PathLike) -> SourceFile:
    """
    Read a file into memory.

    Raises:
        FileNotFoundError: if path does not exist or is not a regular file.
        OSError: on read failure.
    """
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Input file not found: {p}")
    data = p.read_bytes()
    _LOGGER.debug("Read %d bytes from %s", len(data), p.name)
    return SourceFile(data=data, name=p.name, mime_type=guess_mime_type(p.name))


def safe_basename(name: str, default: str = "decrypted_file") -> str:
    """
    Reduce an untrusted name (e.g. from container metadata) to a bare file name.

        >>> safe_basename("../../etc/passwd")
        'passwd'
    """
    base = PurePath(name.replace("\\", "/")).name
    if base in ("", ".", ".."):
        return default
    return base


def _unique_path(directory: Path, name: str) -> Path:
    candidate = directory / name
    if not candidate.exists():
        return candidate
    stem, suffix = os.path.splitext(name)
    for i in range(1, _MAX_NAME_ATTEMPTS):
        candidate = directory / f"{stem} ({i}){suffix}"
        if not candidate.exists():
            return candidate
    raise FileExistsError(f"No free file name for {name} in {directory}")


def set_secure_file_permissions(filepath: PathLike) -> None:
    """chmod 0600 on POSIX; failure is logged and ignored."""
    try:
        os.chmod(filepath, stat.S_IRUSR | stat.S_IWUSR)
    except OSError as e:
        _LOGGER.warning("Could not set strict permissions for %s: %s", filepath, e)


def write_output(
    directory: PathLike, name: str, data: bytes, *, private: bool = False
) -> Path:
    """
    Write data under directory using the basename of name.

    An existing file is never overwritten; "name (1).ext", "name (2).ext", ...
    are tried instead.

    Args:
        directory: target directory (created if missing).
        name: desired file name; path components are stripped.
        data: content.
        private: restrict permissions to the owner.

    Returns:
        Path actually written.
    """
    d = Path(directory)
    d.mkdir(parents=True, exist_ok=True)
    target = _unique_path(d, safe_basename(name))
    with open(target, "xb") as fh:
        fh.write(data)
    if private:
        set_secure_file_permissions(target)
    _LOGGER.info("Wrote %d bytes to %s", len(data), target)
    return target


__all__ = [
    "DEFAULT_MIME_TYPE",
    "SourceFile",
    "guess_mime_type",
    "read_source",
    "safe_basename",
    "set_secure_file_permissions",
    "write_output",
]
