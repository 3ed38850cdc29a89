"""Configuration loading helpers for the ESI processor."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .models import ProcessorConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def load_config(path: str | Path | None = None, **overrides: Any) -> ProcessorConfig:
    """Build a :class:`ProcessorConfig` from a file plus keyword overrides.

    Overrides that are ``None`` are ignored so CLI options can be passed
    straight through.
    """

    payload: dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        if path.suffix not in CONFIG_EXTENSIONS:
            raise ValueError(f"Unsupported configuration format: {path.suffix}")
        payload = _read_file(path)
    payload.update({key: value for key, value in overrides.items() if value is not None})
    return ProcessorConfig.model_validate(payload)


__all__ = ["CONFIG_EXTENSIONS", "load_config"]
