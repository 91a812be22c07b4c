"""Configuration management for DevLog."""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from .core.models import DEFAULT_SPRINT_DAYS, SPRINT_DURATIONS

logger = logging.getLogger(__name__)

APP_IDENTIFIER = "com.ahmadsaptan.devlogdesk"
DB_FILE_NAME = "daily-updates.sqlite"
LEGACY_FILE_NAME = "daily-updates-data.json"
CONFIG_FILE_NAME = "devlog.conf"
REPORTS_DIR_NAME = "reports"


def _env_path(name: str) -> Path | None:
    value = os.environ.get(name, "").strip()
    return Path(value).expanduser() if value else None


def app_data_root() -> Path:
    """Resolve the platform data directory, honouring DEVLOG_DATA_DIR."""
    explicit = _env_path("DEVLOG_DATA_DIR")
    if explicit:
        return explicit

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_IDENTIFIER

    if sys.platform.startswith("win"):
        appdata = _env_path("APPDATA")
        return (appdata or Path.home() / "AppData" / "Roaming") / APP_IDENTIFIER

    xdg = _env_path("XDG_DATA_HOME")
    if xdg:
        return xdg / APP_IDENTIFIER
    return Path.home() / ".local" / "share" / APP_IDENTIFIER


@dataclass
class Config:
    """DevLog configuration."""

    data_dir: Path
    db_path: Path
    default_sprint_days: int = DEFAULT_SPRINT_DAYS
    log_level: str = "WARNING"

    @property
    def legacy_path(self) -> Path:
        return self.data_dir / LEGACY_FILE_NAME

    @property
    def reports_dir(self) -> Path:
        return self.data_dir / REPORTS_DIR_NAME

    @property
    def config_file(self) -> Path:
        return self.data_dir / CONFIG_FILE_NAME

    @classmethod
    def for_data_dir(cls, data_dir: Path | str) -> "Config":
        """Build a config rooted at data_dir, honouring DEVLOG_DB_PATH."""
        root = Path(data_dir).expanduser()
        return cls(data_dir=root, db_path=_env_path("DEVLOG_DB_PATH") or root / DB_FILE_NAME)


def _unquote(value: str) -> str:
    """Strip matching quotes, or an inline comment from an unquoted value."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(data_dir: Path | str | None = None) -> Config:
    """Load configuration from devlog.conf under the data root."""
    config = Config.for_data_dir(data_dir if data_dir is not None else app_data_root())

    if not config.config_file.exists():
        return config

    for line in config.config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "db_path":
                # DEVLOG_DB_PATH wins over the file
                if value and not _env_path("DEVLOG_DB_PATH"):
                    config.db_path = Path(value).expanduser()
            case "default_sprint_days":
                try:
                    days = int(value)
                except ValueError:
                    days = 0
                if days in SPRINT_DURATIONS:
                    config.default_sprint_days = days
                else:
                    logger.warning(f"Ignoring DEFAULT_SPRINT_DAYS={value!r}: must be 7 or 14")
            case "log_level":
                level = value.upper()
                if level in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
                    config.log_level = level
                else:
                    logger.warning(f"Ignoring unknown LOG_LEVEL={value!r}")
            case _:
                logger.debug(f"Unknown config key: {key}")

    return config
