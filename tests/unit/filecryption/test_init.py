from __future__ import annotations

import logging
from typing import Iterator

import pytest

import filecryption


@pytest.fixture
def pkg_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("filecryption")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    for h in saved[0]:
        logger.removeHandler(h)
    yield logger
    for h in list(logger.handlers):
        logger.removeHandler(h)
    for h in saved[0]:
        logger.addHandler(h)
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def test_public_api_roundtrip() -> None:
    blob = filecryption.encode(b"HELLOWORLD", "hello.txt", "text/plain", "correcthorse")
    assert len(blob) == filecryption.HEADER_LEN + 4 + 40 + 10 + 16
    data, name, mime_type = filecryption.decode(blob, "correcthorse")
    assert (data, name, mime_type) == (b"HELLOWORLD", "hello.txt", "text/plain")


def test_error_hierarchy_exported() -> None:
    assert issubclass(filecryption.FormatError, filecryption.ContainerError)
    assert issubclass(filecryption.IntegrityError, filecryption.ContainerError)
    assert issubclass(filecryption.AuthenticationError, filecryption.CryptoError)
    assert not issubclass(filecryption.AuthenticationError, filecryption.ContainerError)


def test_version() -> None:
    assert filecryption.__version__ == "1.0.0"


def test_setup_logging_is_idempotent(pkg_logger: logging.Logger) -> None:
    filecryption.setup_logging(logging.INFO)
    filecryption.setup_logging(logging.DEBUG)
    assert len(pkg_logger.handlers) == 1
    assert pkg_logger.level == logging.DEBUG
    assert pkg_logger.propagate is False


def test_setup_logging_level_from_env(
    pkg_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv(filecryption.LOG_LEVEL_ENV, "error")
    filecryption.setup_logging()
    assert pkg_logger.level == logging.ERROR
    monkeypatch.setenv(filecryption.LOG_LEVEL_ENV, "bogus")
    filecryption.setup_logging()
    assert pkg_logger.level == logging.WARNING


@pytest.mark.parametrize(
    "name,expected",
    [
        ("filecryption.container", "filecryption.container"),
        ("__main__", "filecryption.main"),
        ("plugins.x", "filecryption.plugins.x"),
        (".relative", "filecryption.relative"),
    ],
)
def test_get_logger_namespacing(name: str, expected: str) -> None:
    assert filecryption.get_logger(name).name == expected
