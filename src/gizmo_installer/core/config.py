"""
Gizmo Installer configuration management.

Provides centralized configuration with validation using Pydantic.
Every field has a default, so the installer runs without a config file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path.home() / ".gizmo-installer" / "config.json"


class LoggingConfig(BaseModel):
    """Configuration for structured logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_enabled: bool = True
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(
        default_factory=lambda: Path.home() / ".gizmo-installer" / "logs"
    )

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()


class GithubConfig(BaseModel):
    """Configuration for release listing and asset downloads."""

    api_url: str = "https://api.github.com"
    owner: str = "gizmo-platform"
    user_agent: str = "gizmo-installer"
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    download_timeout_seconds: float = Field(default=120.0, gt=0)
    chunk_size_bytes: int = Field(default=64 * 1024, ge=1024)

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class TaskConfig(BaseModel):
    """Configuration for the background task bridge."""

    receive_timeout_seconds: float = Field(default=1.0, gt=0, le=10)


class UIConfig(BaseModel):
    """Configuration for the GUI."""

    tick_interval_ms: int = Field(default=33, ge=10, le=1000)
    starter_code_enabled: bool = False


class InstallerConfig(BaseModel):
    """Main installer configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    github: GithubConfig = Field(default_factory=GithubConfig)
    tasks: TaskConfig = Field(default_factory=TaskConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    cache_prefix: str = "best-gizmo-setup-wizard"

    @classmethod
    def load(cls, config_path: Path | None = None) -> InstallerConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    def ensure_directories(self) -> None:
        """Create all required directories."""
        if self.logging.file_enabled:
            self.logging.log_directory.mkdir(parents=True, exist_ok=True)


def load_config(config_path: Path | None = None) -> InstallerConfig:
    """Load or create configuration."""
    config = InstallerConfig.load(config_path)
    config.ensure_directories()
    return config
