"""Settings management using Pydantic for type validation and configuration."""

import logging
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


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
    file_prefix: str = Field(default="shiftprint", description="Log file prefix")
    max_log_files: int = Field(default=5, description="Number of rotated log files to keep")

    # Third-party Libraries
    third_party_level: str = Field(
        default="WARNING", description="Log level for third-party libraries"
    )


class DisplaySettings(BaseModel):
    """Display preferences consumed by the layout pipeline and its collaborators."""

    view: Literal["monthly", "weekly"] = Field(default="monthly", description="Calendar view")
    paper_size: Literal["letter", "legal", "tabloid", "a4"] = Field(
        default="letter", description="Paper size for printing"
    )
    orientation: Literal["portrait", "landscape"] = Field(
        default="portrait", description="Page orientation"
    )
    timezone: str = Field(
        default="America/Los_Angeles", description="IANA timezone used for display and day grouping"
    )
    time_format: Literal["12h", "24h"] = Field(default="24h", description="Clock format")
    color_assignments: dict[str, str] = Field(
        default_factory=dict, description="Person name -> hex color overrides"
    )

    # Week grid fallbacks
    default_start_hour: int = Field(
        default=6, ge=0, le=23, description="First hour shown when a week has no shifts"
    )
    default_end_hour: int = Field(
        default=23, ge=1, le=24, description="Last hour shown when a week has no shifts"
    )
    combine_concurrent_shifts: bool = Field(
        default=False,
        description="Collapse week-grid shifts sharing the same start and end into one block",
    )


class ExpansionSettings(BaseModel):
    """Recurrence expansion configuration."""

    horizon_years: int = Field(
        default=2, ge=1, description="Expand recurring events this many years past today"
    )
    max_occurrences: int = Field(
        default=5000, ge=1, description="Upper bound on occurrences generated per master event"
    )
    default_timezone: Optional[str] = Field(
        default=None,
        description="Timezone for floating times (defaults to the calendar or display timezone)",
    )


class FetchSettings(BaseModel):
    """Remote calendar download configuration."""

    app_name: str = Field(default="ShiftPrint", description="User-Agent product name")
    request_timeout: int = Field(default=30, description="HTTP request timeout in seconds")
    max_retries: int = Field(default=3, description="Maximum retry attempts")
    retry_backoff_factor: float = Field(default=1.5, description="Exponential backoff factor")


class ShiftPrintSettings(BaseSettings):
    """Application settings with environment variable and YAML support."""

    _explicit_args: set = PrivateAttr(default_factory=set)

    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config" / "shiftprint")
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local" / "share" / "shiftprint")
    config_path: Optional[Path] = Field(default=None, description="Explicit YAML config file")

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    expansion: ExpansionSettings = Field(default_factory=ExpansionSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)

    model_config = SettingsConfigDict(
        env_prefix="SHIFTPRINT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._explicit_args = set(kwargs.keys())
        self._load_yaml_config()

    def _find_config_file(self) -> Optional[Path]:
        """Find config file: explicit path, then project directory, then user home."""
        if self.config_path is not None:
            return self.config_path if self.config_path.exists() else None

        project_config = Path(__file__).parent.parent.parent / "config" / "config.yaml"
        if project_config.exists():
            return project_config

        user_config = self.config_dir / "config.yaml"
        if user_config.exists():
            return user_config

        return None

    def _load_section(self, config_data: dict, section: str) -> None:
        """Apply one YAML section onto its nested settings model."""
        if section not in config_data or section in self._explicit_args:
            return

        values = config_data[section] or {}
        target = getattr(self, section)
        merged = target.model_dump()
        merged.update(values)
        setattr(self, section, type(target).model_validate(merged))

    def _load_yaml_config(self) -> None:
        """Load configuration from YAML file if it exists."""
        config_file = self._find_config_file()
        if not config_file:
            return

        try:
            with config_file.open(encoding="utf-8") as f:
                config_data = yaml.safe_load(f)

            if not config_data:
                return

            for section in ("logging", "display", "expansion", "fetch"):
                self._load_section(config_data, section)

        except Exception as e:
            # Don't fail if YAML loading fails, just continue with defaults/env vars
            logger.warning(f"Could not load YAML config from {config_file}: {e}")

    @property
    def log_directory(self) -> Path:
        """Directory for log files."""
        if self.logging.file_directory:
            return Path(self.logging.file_directory)
        return self.data_dir / "logs"


_settings_instance: Optional[ShiftPrintSettings] = None


def get_settings() -> ShiftPrintSettings:
    """Get the global settings instance, creating it lazily if needed."""
    if globals()["_settings_instance"] is None:
        globals()["_settings_instance"] = ShiftPrintSettings()
    return globals()["_settings_instance"]


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None
