"""
Configuration Loader (``ar_config.loader``).

Responsibility
--------------
Loads a YAML file and parses it into the typed ``ar_config.schema``
dataclasses.  The single public entry point for runtime config is
``ar_config.get_active_config()``; this module is its implementation.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Missing optional sections fall back to the schema defaults; present but
  invalid values raise ``ConfigurationError`` naming the offending key.
* ``weeks_per_month`` is a single positive constant; trailing windows and the
  history range both read it from here.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Out-of-range or mistyped values -> ``ConfigurationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ar_config.schema import (
    ArMetricsConfig,
    HistoryConfig,
    InsightThresholds,
    UploadConfig,
    WindowConfig,
)
from ar_kernel.exceptions import ConfigurationError

_WINDOW_KEYS = ("threeMonth", "sixMonth", "twelveMonth")
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _positive_int(data: dict[str, Any], key: str, default: int, prefix: str) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"{prefix}{key}", f"expected a positive integer, got {value!r}")
    return value


def _number(data: dict[str, Any], key: str, default: float, prefix: str = "") -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{prefix}{key}", f"expected a number, got {value!r}")
    return float(value)


def parse_windows(data: dict[str, Any]) -> WindowConfig:
    """Parse ``trailing_windows``; all three window names are required when present."""
    if not data:
        return WindowConfig()
    missing = [k for k in _WINDOW_KEYS if k not in data]
    if missing:
        raise ConfigurationError("trailing_windows", f"missing windows {missing}")
    return WindowConfig(
        months=tuple(
            (k, _positive_int(data, k, 0, "trailing_windows.")) for k in _WINDOW_KEYS
        )
    )


def parse_history(data: dict[str, Any]) -> HistoryConfig:
    defaults = HistoryConfig()
    history = HistoryConfig(
        min_months=_positive_int(data, "min_months", defaults.min_months, "history."),
        max_months=_positive_int(data, "max_months", defaults.max_months, "history."),
        default_months=_positive_int(data, "default_months", defaults.default_months, "history."),
    )
    if not history.min_months <= history.default_months <= history.max_months:
        raise ConfigurationError(
            "history",
            f"need min_months <= default_months <= max_months, got "
            f"{history.min_months}/{history.default_months}/{history.max_months}",
        )
    return history


def parse_upload(data: dict[str, Any]) -> UploadConfig:
    defaults = UploadConfig()
    sentinels = data.get("sentinels")
    if sentinels is None:
        sentinel_set = defaults.sentinels
    elif isinstance(sentinels, list) and all(isinstance(s, str) for s in sentinels):
        sentinel_set = frozenset(s.strip().upper() for s in sentinels)
    else:
        raise ConfigurationError("upload.sentinels", "expected a list of strings")
    return UploadConfig(
        max_bytes=_positive_int(data, "max_bytes", defaults.max_bytes, "upload."),
        sentinels=sentinel_set,
    )


def parse_insights(data: dict[str, Any]) -> InsightThresholds:
    defaults = InsightThresholds()
    return InsightThresholds(
        **{
            name: _number(data, name, getattr(defaults, name), "insights.")
            for name in defaults.__dataclass_fields__
        }
    )


def parse_config(data: dict[str, Any], source: str | None = None) -> ArMetricsConfig:
    """Build an ``ArMetricsConfig`` from a parsed YAML dict."""
    defaults = ArMetricsConfig()

    database_url = data.get("database_url", defaults.database_url)
    if not isinstance(database_url, str) or not database_url:
        raise ConfigurationError("database_url", "expected a non-empty string")

    weeks_per_month = _number(data, "weeks_per_month", defaults.weeks_per_month)
    if not 4.0 <= weeks_per_month <= 5.0:
        raise ConfigurationError(
            "weeks_per_month", f"expected a value between 4 and 5, got {weeks_per_month}"
        )

    log_level = str((data.get("logging") or {}).get("level", defaults.log_level)).upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigurationError("logging.level", f"unknown level {log_level!r}")

    return ArMetricsConfig(
        database_url=database_url,
        weeks_per_month=weeks_per_month,
        trailing_windows=parse_windows(data.get("trailing_windows") or {}),
        history=parse_history(data.get("history") or {}),
        upload=parse_upload(data.get("upload") or {}),
        insights=parse_insights(data.get("insights") or {}),
        log_level=log_level,
        source=source,
    )


def load_config(path: Path) -> ArMetricsConfig:
    """Load and parse a YAML configuration file."""
    return parse_config(load_yaml_file(path), source=str(path))
