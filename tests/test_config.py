"""
Tests for configuration loading.
"""

import pytest

from clinicslots.config import AppConfig, WorkingHoursConfig


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()
        working_hours = config.build_working_hours()

        assert config.log_level == "WARNING"
        assert working_hours.start_minutes == 480
        assert working_hours.end_minutes == 1020
        assert working_hours.granularity == 20
        assert config.working_hours.default_duration_minutes == 20

    def test_load_from_yaml(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "database_url: sqlite:///test.db\n"
            "log_level: info\n"
            "working_hours:\n"
            "  start: '09:00'\n"
            "  end: '12:00'\n"
            "  granularity_minutes: 30\n",
            encoding="utf-8",
        )

        config = AppConfig.load_from_yaml(config_path)

        assert config.database_url == "sqlite:///test.db"
        assert config.log_level == "INFO"
        assert config.build_working_hours().start_minutes == 540
        assert config.build_working_hours().granularity == 30

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AppConfig.load_from_yaml(tmp_path / "missing.yaml")

    def test_load_or_default_without_file(self, tmp_path):
        assert AppConfig.load_or_default(tmp_path / "missing.yaml") == AppConfig()

    def test_invalid_yaml_raises(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("working_hours: [unclosed", encoding="utf-8")

        with pytest.raises(ValueError):
            AppConfig.load_from_yaml(config_path)

    def test_non_mapping_raises(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            AppConfig.load_from_yaml(config_path)

    def test_unknown_log_level_raises(self):
        with pytest.raises(ValueError):
            AppConfig(log_level="chatty")


class TestWorkingHoursConfig:
    """Tests for WorkingHoursConfig validation."""

    def test_malformed_time_raises(self):
        with pytest.raises(ValueError):
            WorkingHoursConfig(start="8h00")

    def test_window_order(self):
        with pytest.raises(ValueError, match="end must be later than start"):
            WorkingHoursConfig(start="17:00", end="08:00")

    @pytest.mark.parametrize("field", ["granularity_minutes", "default_duration_minutes"])
    def test_non_positive_minutes_raise(self, field):
        with pytest.raises(ValueError):
            WorkingHoursConfig(**{field: 0})
