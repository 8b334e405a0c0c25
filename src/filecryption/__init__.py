"""
filecryption
============

Turn any file into a self-contained, password-protected container and recover
the exact original bytes, name and media type from it.

    >>> from filecryption import encode, decode
    >>> blob = encode(b"HELLOWORLD", "hello.txt", "text/plain", "correcthorse")
    >>> data, name, mime_type = decode(blob, "correcthorse")
    >>> (data, name, mime_type)
    (b'HELLOWORLD', 'hello.txt', 'text/plain')

Container: salt[16] || nonce[12] || flag[1] || AES-256-GCM(ciphertext||tag),
key = PBKDF2-HMAC-SHA256(password, salt, 100_000).

Logging:
    Importing the package adds no handlers. Applications (and the CLI) call
    setup_logging(); the level comes from the argument or from the
    FILECRYPTION_LOG_LEVEL environment variable (default WARNING).
"""

import logging
import os
import sys
from typing import Optional

from filecryption.config import CodecConfig, load_config
from filecryption.container import (
    HEADER_LEN,
    ContainerCodec,
    DecodedFile,
    container_filename,
    decode,
    encode,
)
from filecryption.exceptions import (
    AuthenticationError,
    ContainerError,
    CryptoError,
    FormatError,
    InputValidationError,
    IntegrityError,
)
from filecryption.files import SourceFile
from filecryption.service import ContainerService

__version__ = "1.0.0"

LOG_LEVEL_ENV = "FILECRYPTION_LOG_LEVEL"
_ROOT_LOGGER_NAME = "filecryption"

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logging(level: Optional[int] = None) -> logging.Logger:
    """
    Configure the package logger once: stderr handler, structured format.

    Idempotent: if handlers are already attached only the level is updated.
    Log records never contain passwords, keys or file content.
    """
    if level is None:
        level = _LOG_LEVELS.get(
            os.environ.get(LOG_LEVEL_ENV, "WARNING").upper(), logging.WARNING
        )

    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    if root_logger.handlers:
        return root_logger

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.propagate = False
    return root_logger


def get_logger(module_name: str) -> logging.Logger:
    """Logger namespaced under 'filecryption.'."""
    if module_name.startswith(_ROOT_LOGGER_NAME):
        return logging.getLogger(module_name)
    if module_name == "__main__":
        return logging.getLogger(f"{_ROOT_LOGGER_NAME}.main")
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{module_name.lstrip('.')}")


__all__ = [
    "__version__",
    "setup_logging",
    "get_logger",
    "encode",
    "decode",
    "container_filename",
    "HEADER_LEN",
    "ContainerCodec",
    "ContainerService",
    "DecodedFile",
    "SourceFile",
    "CodecConfig",
    "load_config",
    "CryptoError",
    "ContainerError",
    "FormatError",
    "AuthenticationError",
    "IntegrityError",
    "InputValidationError",
]
