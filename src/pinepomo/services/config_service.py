"""Configuration service for Pinepomo.

Loads and saves ``config.json`` in the platform config directory and hands
out the pieces of :class:`AppConfig` the rest of the app needs.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from platformdirs import user_config_dir, user_data_dir
from pydantic import ValidationError

from pinepomo.exceptions import ConfigError
from pinepomo.models.config_models import AppConfig, TodoistConfig
from pinepomo.models.timer import TimerConfig
from pinepomo.utils.logger import get_logger

logger = get_logger(__name__)


class ConfigService:
    """Single source of truth for persisted configuration."""

    def __init__(self, config_dir: Path | None = None, data_dir: Path | None = None):
        self.config_dir = Path(config_dir or user_config_dir("pinepomo"))
        self.config_path = self.config_dir / "config.json"
        self.data_dir = Path(data_dir or user_data_dir("pinepomo"))

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.data_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, creating defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            logger.info("No config at %s, writing defaults", self.config_path)
            self._config = AppConfig()
            self.save_config()
        except (OSError, ValidationError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        return self._config

    def save_config(self) -> None:
        """Write the current configuration to disk."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))
            # May hold a Todoist token
            self.config_path.chmod(0o600)
        except OSError as e:
            raise ConfigError(f"Failed to save config: {e}") from e

    def reset_config(self) -> AppConfig:
        """Discard the saved configuration and restore defaults."""
        if self.config_path.exists():
            self.config_path.unlink()
        self._config = AppConfig()
        self.save_config()
        return self._config

    def update_timer(self, **changes: int | None) -> TimerConfig:
        """Merge timer fields into the saved config (unspecified fields kept)."""
        try:
            timer = self.config.timer.merged(**changes)
        except (ValueError, ValidationError) as e:
            raise ConfigError(f"Invalid timer settings: {e}") from e
        self.config.timer = timer
        self.save_config()
        return timer

    def set_todoist_api_key(self, api_key: str | None) -> None:
        self.config.todoist = TodoistConfig(
            api_key=api_key, post_comments=self.config.todoist.post_comments
        )
        self.save_config()

    @property
    def db_path(self) -> Path:
        if self.config.storage.db_path:
            return Path(self.config.storage.db_path).expanduser()
        return self.data_dir / "sessions.db"


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Process-wide ConfigService."""
    return ConfigService()
