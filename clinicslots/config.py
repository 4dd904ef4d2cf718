"""
Configuration management using Pydantic models loaded from YAML.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import InvalidTimeFormat
from .domain.models import (
    DEFAULT_DURATION_MINUTES,
    SLOT_GRANULARITY_MINUTES,
    WorkingHours,
    parse_time,
)


class WorkingHoursConfig(BaseModel):
    """Daily booking window and slot grid."""
    start: str = "08:00"
    end: str = "17:00"
    granularity_minutes: int = SLOT_GRANULARITY_MINUTES
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Ensure times are valid HH:mm strings."""
        try:
            parse_time(value)
        except InvalidTimeFormat as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("granularity_minutes", "default_duration_minutes")
    @classmethod
    def validate_minutes(cls, value: int) -> int:
        """Ensure durations are positive."""
        if value <= 0:
            raise ValueError("minute values must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_window_order(self) -> "WorkingHoursConfig":
        """Ensure the configured window opens before it closes."""
        if parse_time(self.end) <= parse_time(self.start):
            raise ValueError("end must be later than start")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    database_url: str = "sqlite:///clinicslots.db"
    log_level: str = "WARNING"
    working_hours: WorkingHoursConfig = Field(default_factory=WorkingHoursConfig)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names, case-insensitively."""
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def build_working_hours(self) -> WorkingHours:
        """Get the domain working-hours policy."""
        return WorkingHours.from_times(
            start=self.working_hours.start,
            end=self.working_hours.end,
            granularity=self.working_hours.granularity_minutes,
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def load_or_default(cls, config_path: Path) -> "AppConfig":
        """Load the YAML file when present, otherwise fall back to defaults."""
        if config_path.exists():
            return cls.load_from_yaml(config_path)
        return cls()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of clinicslots/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
