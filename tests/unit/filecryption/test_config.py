from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from filecryption.config import CodecConfig, load_config


def test_defaults() -> None:
    cfg = CodecConfig()
    assert cfg.compress_default is False
    assert cfg.allow_empty_password is False
    assert cfg.container_suffix == ".enc"
    assert cfg.hidden_container_name == "secure_vault_data.enc"
    assert cfg.fallback_name == "decrypted_file"
    assert cfg.fallback_prefix == "decrypted_"
    assert cfg.default_mime_type == "application/octet-stream"
    assert cfg.to_dict()["max_workers"] == 4


@pytest.mark.parametrize(
    "kwargs",
    [
        {"container_suffix": "enc"},
        {"container_suffix": "."},
        {"hidden_container_name": ""},
        {"fallback_name": ""},
        {"default_mime_type": "binary"},
        {"max_workers": 0},
    ],
)
def test_invalid_values_rejected(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        CodecConfig(**kwargs)


def test_frozen() -> None:
    cfg = CodecConfig()
    with pytest.raises(Exception):
        cfg.max_workers = 8  # type: ignore[misc]


def test_load_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path / "nope.json") == CodecConfig()


def test_load_overrides(tmp_path: Path) -> None:
    path = tmp_path / "filecryption.json"
    path.write_text(
        json.dumps({"compress_default": True, "container_suffix": ".vault"}),
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.compress_default is True
    assert cfg.container_suffix == ".vault"
    assert cfg.fallback_name == "decrypted_file"


def test_load_default_path_in_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "filecryption.json").write_text('{"max_workers": 2}', encoding="utf-8")
    assert load_config().max_workers == 2


@pytest.mark.parametrize(
    "content",
    ["{not json", "[1, 2, 3]", '{"max_workers": 0}', '{"container_suffix": 5}'],
)
def test_load_bad_content_gives_defaults(
    tmp_path: Path, content: str, caplog: pytest.LogCaptureFixture
) -> None:
    caplog.set_level(logging.WARNING, logger="filecryption")
    path = tmp_path / "cfg.json"
    path.write_text(content, encoding="utf-8")
    assert load_config(path) == CodecConfig()
    assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_load_ignores_unknown_keys(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING, logger="filecryption")
    path = tmp_path / "cfg.json"
    path.write_text('{"iterations": 1, "compress_default": true}', encoding="utf-8")
    cfg = load_config(path)
    assert cfg.compress_default is True
    assert any("iterations" in r.getMessage() for r in caplog.records)
