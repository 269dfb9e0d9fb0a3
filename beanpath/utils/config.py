# beanpath/utils/config.py
"""
Settings loader (typed YAML config)

Intent
- Load and validate the resolver settings from a YAML file into a pydantic v2 model.
- Return defaults when no file is given, so BeanUtil() works out of the box.

Settings
- this_ref:     path token that addresses the root bean itself (default "*this")
- array_growth: "double" grows arrays to max(index + 1, 2 * len or 1);
                "exact" grows to index + 1
- log_level / log_file: consumed by beanpath.utils.logging.configure_logging

Hardening
- NBSP/BOM/narrow NBSP are normalized to plain spaces BEFORE YAML parse.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from beanpath.utils.logging import get_logger

ArrayGrowth = Literal["double", "exact"]


class BeanPathSettings(BaseModel):
    """Top-level typed view of the settings YAML."""
    this_ref: str = "*this"
    array_growth: ArrayGrowth = "double"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("this_ref")
    @classmethod
    def _validate_this_ref(cls, v: str) -> str:
        if not v or any(ch in v for ch in ".[]"):
            raise ValueError("this_ref must be non-empty and must not contain '.', '[' or ']'")
        return v

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        lv = v.upper()
        if lv not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return lv


_BAD_WHITESPACE = ["\u00A0", "\u2007", "\u202F", "\uFEFF"]


def _load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"YAML file not found: {str(path)}")

    raw = p.read_text(encoding="utf-8")

    for ch in _BAD_WHITESPACE:
        raw = raw.replace(ch, " ")

    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML root must be a mapping/object: {str(path)}")
    return data


def load_settings(path: str | Path | None = None) -> BeanPathSettings:
    """Load a settings YAML and return a validated BeanPathSettings (defaults if path is None)."""
    if path is None:
        return BeanPathSettings()
    logger = get_logger(__name__)
    raw = _load_yaml(path)
    try:
        return BeanPathSettings.model_validate(raw)
    except ValidationError as e:
        logger.error("Invalid settings file %s: %s", path, e)
        raise


__all__ = ["BeanPathSettings", "load_settings"]
