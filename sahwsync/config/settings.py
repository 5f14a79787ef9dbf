"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ENV_PREFIX = "SAHWSYNC_"


class LoggingSettings(BaseModel):
    """Logging configuration settings."""

    # Console Logging
    console_enabled: bool = Field(default=True, description="Enable console logging")
    console_level: str = Field(
        default="INFO",
        description="Console log level: DEBUG, VERBOSE, INFO, WARNING, ERROR, CRITICAL",
    )
    console_colors: bool = Field(
        default=True, description="Enable colored console output (auto-detected)"
    )

    # File Logging
    file_enabled: bool = Field(default=False, description="Enable file logging")
    file_level: str = Field(default="DEBUG", description="File log level")
    file_directory: Optional[str] = Field(
        default=None, description="Custom log directory (defaults to data_dir/logs)"
    )
    file_prefix: str = Field(default="sahwsync", description="Log file prefix")
    max_log_files: int = Field(default=5, description="Maximum number of log files to keep")

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )


class SahwSyncSettings(BaseSettings):
    """Application settings with environment variable and YAML support."""

    _explicit_args: set = PrivateAttr(default_factory=set)
    _env_vars_set: set = PrivateAttr(default_factory=set)

    app_name: str = Field(default="SahwSync", description="Application name")

    # File Paths
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "sahwsync")
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local" / "share" / "sahwsync")
    database_file: Optional[Path] = Field(
        default=None, description="SQLite store path (defaults to data_dir/offline_store.db)"
    )
    store_backend: str = Field(default="sqlite", description="Store backend: sqlite or memory")

    # Connectivity
    probe_url: str = Field(
        default="https://www.google.com/favicon.ico",
        description="URL probed with a HEAD request to confirm real connectivity",
    )
    probe_timeout: float = Field(default=5.0, description="Connectivity probe timeout in seconds")
    online_debounce: float = Field(
        default=1.0, description="Delay before probing after an online signal, in seconds"
    )

    # Refresh prompts
    refresh_check_interval: int = Field(
        default=1800, description="Periodic refresh-prompt re-check interval in seconds"
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs: Any) -> None:
        load_yaml = kwargs.pop("_load_yaml", True)

        env_vars_set = {
            key[len(ENV_PREFIX) :].lower() for key in os.environ if key.startswith(ENV_PREFIX)
        }

        super().__init__(**kwargs)

        self._explicit_args = set(kwargs.keys())
        self._env_vars_set = env_vars_set

        if load_yaml:
            self._load_yaml_config()

    @property
    def resolved_database_file(self) -> Path:
        """Return the SQLite store path, falling back to the data directory."""
        return self.database_file or self.data_dir / "offline_store.db"

    def _find_config_file(self) -> Optional[Path]:
        """Find config file, checking the working directory first, then user config dir."""
        project_config = Path.cwd() / "config" / "config.yaml"
        if project_config.exists():
            return project_config

        user_config = self.config_dir / "config.yaml"
        if user_config.exists():
            return user_config

        return None

    def _is_overridden(self, setting: str) -> bool:
        return setting in self._explicit_args or setting in self._env_vars_set

    def _load_basic_settings(self, config_data: dict) -> None:
        """Load top-level settings from YAML data."""
        basic_settings = [
            "app_name",
            "data_dir",
            "database_file",
            "store_backend",
            "probe_url",
            "probe_timeout",
            "online_debounce",
            "refresh_check_interval",
        ]

        for setting in basic_settings:
            if setting in config_data and not self._is_overridden(setting):
                value = config_data[setting]
                if setting in ("data_dir", "database_file") and value is not None:
                    value = Path(value).expanduser()
                setattr(self, setting, value)

    def _load_logging_config(self, config_data: dict) -> None:
        """Load logging configuration from YAML data."""
        if "logging" not in config_data or self._is_overridden("logging"):
            return

        logging_config = config_data["logging"] or {}
        for setting in LoggingSettings.model_fields:
            if setting in logging_config and f"logging__{setting}" not in self._env_vars_set:
                setattr(self.logging, setting, logging_config[setting])

    def _load_yaml_config(self) -> None:
        """Overlay values from config.yaml where not set explicitly or via environment."""
        config_file = self._find_config_file()
        if config_file is None:
            return

        try:
            with config_file.open(encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file {config_file}: {e}")
            return

        if not isinstance(config_data, dict):
            logger.warning(f"Ignoring config file {config_file}: top level must be a mapping")
            return

        self._load_basic_settings(config_data)
        self._load_logging_config(config_data)
        logger.debug(f"Loaded configuration overlay from {config_file}")
