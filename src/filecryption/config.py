# -*- coding: utf-8 -*-
"""
Codec and application configuration.

Wire-format constants (salt/nonce/tag sizes, KDF iterations, header layout)
are deliberately absent: changing them would make containers unreadable by
other producers.
"""
from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Final, Optional

_LOGGER: Final = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME: Final[str] = "filecryption.json"


@dataclass(frozen=True)
class CodecConfig:
    """
    Tunables for encode/decode and the file helpers around them.

    Attributes:
        compress_default: compress when the caller does not say otherwise.
        allow_empty_password: accept "" as a password on encode/decode.
        container_suffix: suffix appended to a file name for its container.
        hidden_container_name: container name used when the original name is hidden.
        fallback_name: file name when none can be recovered.
        fallback_prefix: prefix for names synthesized from the container's name.
        default_mime_type: media type when none can be recovered.
        max_workers: thread pool size for the async service wrappers.

    Examples:
        >>> CodecConfig().container_suffix
        '.enc'
        >>> CodecConfig(max_workers=0)
        Traceback (most recent call last):
        ...
        ValueError: max_workers must be >= 1
    """

    compress_default: bool = False
    allow_empty_password: bool = False
    container_suffix: str = ".enc"
    hidden_container_name: str = "secure_vault_data.enc"
    fallback_name: str = "decrypted_file"
    fallback_prefix: str = "decrypted_"
    default_mime_type: str = "application/octet-stream"
    max_workers: int = 4

    def __post_init__(self) -> None:
        if not self.container_suffix.startswith(".") or len(self.container_suffix) < 2:
            raise ValueError("container_suffix must look like '.ext'")
        if not self.hidden_container_name:
            raise ValueError("hidden_container_name must not be empty")
        if not self.fallback_name:
            raise ValueError("fallback_name must not be empty")
        if "/" not in self.default_mime_type:
            raise ValueError("default_mime_type must be a type/subtype string")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def load_config(config_path: Optional[Path] = None) -> CodecConfig:
    """
    Load CodecConfig from a JSON file, falling back to defaults.

    A missing file, unreadable file, invalid JSON, a non-object document or
    values rejected by CodecConfig all log a warning and yield the defaults.
    Unknown keys are ignored with a warning.
    """
    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_FILENAME)

    if not config_path.exists():
        _LOGGER.info("Config file %s not found; using defaults", config_path)
        return CodecConfig()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = json.load(f)
    except json.JSONDecodeError as e:
        _LOGGER.warning(
            "Could not parse %s: invalid JSON at line %d, column %d; using defaults",
            config_path,
            e.lineno,
            e.colno,
        )
        return CodecConfig()
    except OSError as e:
        _LOGGER.warning("Could not read %s: %s; using defaults", config_path, e)
        return CodecConfig()

    if not isinstance(user_config, dict):
        _LOGGER.warning(
            "Config %s must contain a JSON object, got %s; using defaults",
            config_path,
            type(user_config).__name__,
        )
        return CodecConfig()

    known = {f.name for f in dataclasses.fields(CodecConfig)}
    unknown = sorted(set(user_config) - known)
    if unknown:
        _LOGGER.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    try:
        config = CodecConfig(**{k: v for k, v in user_config.items() if k in known})
    except (AttributeError, TypeError, ValueError) as e:
        _LOGGER.warning("Invalid configuration in %s: %s; using defaults", config_path, e)
        return CodecConfig()

    _LOGGER.info("Configuration loaded from %s", config_path)
    return config


__all__ = [
    "DEFAULT_CONFIG_FILENAME",
    "CodecConfig",
    "load_config",
]
