"""
ar_config -- single public entrypoint for AR metrics configuration.

Responsibility:
    ``get_active_config()`` is the only way to obtain configuration at
    runtime.  It reads the YAML file named by ``AR_METRICS_CONFIG`` (or the
    packaged ``defaults.yaml``), applies the ``AR_METRICS_DATABASE_URL``
    override, and returns a frozen ``ArMetricsConfig``.

Architecture position:
    Configuration sits above ``ar_kernel`` and below ``ar_services`` /
    ``ar_api``.  The kernel and the engines never import from here; services
    pass the values they need down as arguments.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path

from ar_config.loader import load_config, parse_config
from ar_config.schema import (
    ArMetricsConfig,
    HistoryConfig,
    InsightThresholds,
    UploadConfig,
    WindowConfig,
)

_logger = logging.getLogger("ar_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

CONFIG_PATH_ENV = "AR_METRICS_CONFIG"
DATABASE_URL_ENV = "AR_METRICS_DATABASE_URL"


def get_active_config(path: Path | None = None) -> ArMetricsConfig:
    """Load the active configuration.

    Resolution order for the file: explicit ``path``, then the
    ``AR_METRICS_CONFIG`` environment variable, then the packaged defaults.
    ``AR_METRICS_DATABASE_URL`` overrides ``database_url`` when set.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

    config = load_config(path)

    db_url = os.environ.get(DATABASE_URL_ENV)
    if db_url:
        config = replace(config, database_url=db_url)

    _logger.info(
        "AR_CONFIG_LOADED",
        extra={
            "source": config.source,
            "weeks_per_month": config.weeks_per_month,
            "history_max_months": config.history.max_months,
        },
    )
    return config


__all__ = [
    "ArMetricsConfig",
    "HistoryConfig",
    "InsightThresholds",
    "UploadConfig",
    "WindowConfig",
    "get_active_config",
    "load_config",
    "parse_config",
]
