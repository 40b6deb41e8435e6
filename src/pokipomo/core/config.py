"""Configuration management with Pydantic and YAML support."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimerConfig(BaseModel):
    """Focus timer configuration."""

    duration_options: list[int] = Field(
        default_factory=lambda: [15, 25, 45],
        description="Selectable session lengths in minutes, in display order",
    )
    default_minutes: int = Field(default=25, ge=1, description="Initial session length")
    urge_surf_seconds: int = Field(default=10, ge=1, description="Hold before leaving a session")
    care_cue_delay_seconds: int = Field(
        default=300, ge=1, description="Inactivity before the care cue fires"
    )
    toast_seconds: float = Field(default=3.0, gt=0, description="Care cue message lifetime")
    care_cue_message: str = Field(default="Deep breath. You've got this.")

    @model_validator(mode="after")
    def _check_options(self) -> TimerConfig:
        if not self.duration_options:
            raise ValueError("duration_options must not be empty")
        if any(minutes <= 0 for minutes in self.duration_options):
            raise ValueError("duration_options must be positive minute values")
        if len(set(self.duration_options)) != len(self.duration_options):
            raise ValueError("duration_options must not repeat a minute value")
        return self


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="POKIPOMO_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/pokipomo")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".local/state/pokipomo")
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config/pokipomo")

    # Log level
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    timer: TimerConfig = Field(default_factory=TimerConfig)

    @property
    def db_path(self) -> Path:
        """Path to SQLite database."""
        return self.data_dir / "pokipomo.db"

    @property
    def control_file(self) -> Path:
        """Path to the control file read by a running focus session."""
        return self.data_dir / "focus_control.json"

    @property
    def config_file(self) -> Path:
        """Path to YAML config file."""
        return self.config_dir / "config.yaml"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        os.chmod(self.data_dir, 0o700)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from YAML file, environment variables, and defaults.

        Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values
        """
        config_path = config_path or Path.home() / ".config/pokipomo/config.yaml"

        yaml_config: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}

        # Init kwargs outrank env vars in pydantic-settings, so merge the
        # fields the environment sets over the YAML values.
        env_config = cls().model_dump(exclude_unset=True)
        return cls(**_deep_merge(yaml_config, env_config))

    def save(self, config_path: Path | None = None) -> None:
        """Save current configuration to YAML file."""
        config_path = config_path or self.config_file
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)

        for key in ["data_dir", "log_dir", "config_dir"]:
            if key in data:
                data[key] = str(data[key])

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        os.chmod(config_path, 0o600)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.load()
