"""
Tests for ar_config: YAML loading, validation and get_active_config().
"""

from pathlib import Path

import pytest
import yaml

from ar_config import DEFAULT_CONFIG_PATH, get_active_config, load_config, parse_config
from ar_config.schema import ArMetricsConfig
from ar_kernel.exceptions import ConfigurationError


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "ar_metrics.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


class TestPackagedDefaults:

    def test_defaults_file_matches_dataclass_defaults(self):
        loaded = load_config(DEFAULT_CONFIG_PATH)
        defaults = ArMetricsConfig()

        assert loaded.weeks_per_month == 4.33
        assert loaded.trailing_windows.as_dict() == {"threeMonth": 3, "sixMonth": 6, "twelveMonth": 12}
        assert loaded.history == defaults.history
        assert loaded.upload == defaults.upload
        assert loaded.insights == defaults.insights
        assert loaded.source == str(DEFAULT_CONFIG_PATH)

    def test_upload_limit_is_five_megabytes(self):
        assert load_config(DEFAULT_CONFIG_PATH).upload.max_bytes == 5 * 1024 * 1024


class TestParseConfig:

    def test_empty_document_gives_defaults(self):
        config = parse_config({})
        assert config == ArMetricsConfig()

    def test_sentinels_are_uppercased(self):
        config = parse_config({"upload": {"sentinels": ["n/a", " #ref! "]}})
        assert config.upload.sentinels == frozenset({"N/A", "#REF!"})

    def test_log_level_normalized(self):
        assert parse_config({"logging": {"level": "debug"}}).log_level == "DEBUG"

    @pytest.mark.parametrize(
        "data, key",
        [
            ({"weeks_per_month": 7}, "weeks_per_month"),
            ({"weeks_per_month": "4.33"}, "weeks_per_month"),
            ({"database_url": ""}, "database_url"),
            ({"trailing_windows": {"threeMonth": 3}}, "trailing_windows"),
            ({"trailing_windows": {"threeMonth": 0, "sixMonth": 6, "twelveMonth": 12}}, "trailing_windows.threeMonth"),
            ({"history": {"min_months": 6, "default_months": 3}}, "history"),
            ({"history": {"max_months": True}}, "history.max_months"),
            ({"upload": {"sentinels": "N/A"}}, "upload.sentinels"),
            ({"insights": {"dso_alert": "high"}}, "insights.dso_alert"),
            ({"logging": {"level": "LOUD"}}, "logging.level"),
        ],
    )
    def test_invalid_values_raise(self, data, key):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config(data)
        assert exc_info.value.key == key
        assert exc_info.value.code == "CONFIGURATION_ERROR"


class TestGetActiveConfig:

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path, {"weeks_per_month": 4.345})
        assert get_active_config(path).weeks_per_month == 4.345

    def test_env_path(self, tmp_path, monkeypatch):
        path = _write(tmp_path, {"history": {"max_months": 24, "default_months": 6}})
        monkeypatch.setenv("AR_METRICS_CONFIG", str(path))

        config = get_active_config()
        assert config.history.max_months == 24
        assert config.source == str(path)

    def test_database_url_env_override(self, monkeypatch):
        monkeypatch.delenv("AR_METRICS_CONFIG", raising=False)
        monkeypatch.setenv("AR_METRICS_DATABASE_URL", "sqlite:///override.db")

        assert get_active_config().database_url == "sqlite:///override.db"

    def test_logs_config_loaded(self, captured_logs, monkeypatch):
        monkeypatch.delenv("AR_METRICS_CONFIG", raising=False)
        get_active_config()

        assert any(r["message"] == "AR_CONFIG_LOADED" for r in captured_logs())
