"""
DirSync configuration management.

Provides centralized configuration with validation using Pydantic.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_HOME = Path.home() / ".dirsync"


class LoggingConfig(BaseModel):
    """Configuration for diagnostic logging and run log placement."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    console_enabled: bool = True
    json_format: bool = False
    log_directory: Path = Field(default_factory=lambda: DEFAULT_HOME / "logs")

    @field_validator("log_directory", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser().resolve()


class SyncConfig(BaseModel):
    """Configuration for synchronization behavior."""

    force: bool = False
    dry_run: bool = False
    compare_content: bool = False
    continue_on_copy_error: bool = False
    exclude_patterns: list[str] = Field(default_factory=list)


class DirSyncConfig(BaseModel):
    """Main DirSync configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> DirSyncConfig:
        """Load configuration from file or create default."""
        if config_path is None:
            config_path = DEFAULT_HOME / "config.json"

        if config_path.exists():
            with open(config_path) as f:
                data = json.load(f)
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path | None = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = DEFAULT_HOME / "config.json"

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2, default=str)

    def ensure_directories(self) -> None:
        """Create all required directories."""
        self.logging.log_directory.mkdir(parents=True, exist_ok=True)

    def get_log_file(self) -> Path:
        """Get path for a new run log file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.logging.log_directory / f"dirsync_{timestamp}.log"


def get_default_config() -> DirSyncConfig:
    """Get the default configuration."""
    return DirSyncConfig()


def load_config(config_path: Path | None = None) -> DirSyncConfig:
    """Load or create configuration."""
    return DirSyncConfig.load(config_path)
