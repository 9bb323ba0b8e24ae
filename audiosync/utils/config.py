"""
Configuration loader for the read-along sync engine.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = "AUDIOSYNC_CONFIG"


class Config:
    """Configuration manager for read-along playback."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._config: Dict[str, Any] = {}
        self.source: Optional[Path] = None
        self.reload(path)

    def _get_project_root(self) -> Path:
        """Get the project root directory."""
        # Navigate up from audiosync/utils to project root
        current = Path(__file__).resolve()
        return current.parent.parent.parent

    def _find_config(self) -> Optional[Path]:
        """Locate settings.yaml: env var, working directory, then project root."""
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)

        for candidate in (
            Path.cwd() / "config" / "settings.yaml",
            self._get_project_root() / "config" / "settings.yaml",
        ):
            if candidate.exists():
                return candidate
        return None

    def reload(self, path: Optional[Path] = None) -> None:
        """Load configuration from YAML, layered over the defaults."""
        self._config = self._get_defaults()
        config_path = Path(path) if path else self._find_config()
        self.source = None

        if config_path and config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
            _merge(self._config, loaded)
            self.source = config_path

    def _get_defaults(self) -> Dict[str, Any]:
        """Return default configuration."""
        return {
            "sync": {
                "snap_threshold": 0.3,
                "seek_lead_in": 0.05,
                "tick_interval": 1 / 60,
                "validation": "warn",
            },
            "logging": {
                "verbose": False,
            },
        }

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example:
            config.get("sync", "snap_threshold") -> 0.3
        """
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
            if value is None:
                return default
        return value

    @property
    def snap_threshold(self) -> float:
        """Maximum gap distance (seconds) snapped to the nearest word."""
        return float(self.get("sync", "snap_threshold", default=0.3))

    @property
    def seek_lead_in(self) -> float:
        """Seconds subtracted from a word's start when seeking to it."""
        return float(self.get("sync", "seek_lead_in", default=0.05))

    @property
    def tick_interval(self) -> float:
        """Scheduler frame interval in seconds."""
        return float(self.get("sync", "tick_interval", default=1 / 60))

    @property
    def validation(self) -> str:
        """TimeIndex validation mode: off, warn or strict."""
        return str(self.get("sync", "validation", default="warn")).lower()

    @property
    def verbose(self) -> bool:
        """Check if debug logging is enabled."""
        return bool(self.get("logging", "verbose", default=False))


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


# Singleton instance
config = Config()
