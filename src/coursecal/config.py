"""
Configuration management for the coursecal engine and CLI.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .const import (
    CONFIG_DIR_ENV,
    DEFAULT_DURATION_MINUTES,
    DEFAULT_TASK_DUE_TIME,
    FIRESTORE_DEFAULT_DATABASE,
    ID_TOKEN_ENV,
    PROJECT_ID_ENV,
)
from .recurrence import OverlapPolicy


class Config:
    """YAML-backed configuration with dot-notation access."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory holding config.yaml. If None, uses
                     $COURSECAL_CONFIG_DIR or ~/.config/coursecal.
        """
        if config_dir is None:
            env_dir = os.environ.get(CONFIG_DIR_ENV)
            self.config_dir = Path(env_dir) if env_dir else Path.home() / ".config" / "coursecal"
        else:
            self.config_dir = Path(config_dir)

        self.config_file = self.config_dir / "config.yaml"
        self._config: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, encoding='utf-8') as f:
                    self._config = yaml.safe_load(f) or {}
            except (yaml.YAMLError, OSError):
                # If there's an error loading the config, start with an empty one
                self._config = {}
        else:
            self._config = {}

    def save(self) -> None:
        """Save configuration to file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                yaml.dump(self._config, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise RuntimeError(f"Failed to save configuration to {self.config_file}: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'engine.overlap_policy')
            default: Default value if key is not found
        """
        value = self._config

        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-notation key and persist it."""
        keys = key.split('.')
        current = self._config

        # Navigate to the parent dict, creating nested dicts as needed
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value
        self.save()


@dataclass
class EngineSettings:
    """Tunables for expansion and normalization."""

    default_duration_minutes: int = DEFAULT_DURATION_MINUTES
    overlap_policy: OverlapPolicy = OverlapPolicy.ALLOW
    lecturer_cache_ttl: Optional[float] = None
    task_due_time: str = DEFAULT_TASK_DUE_TIME

    def __post_init__(self) -> None:
        self.overlap_policy = OverlapPolicy.parse(self.overlap_policy, key="engine.overlap_policy")

    @classmethod
    def from_config(cls, config: Config) -> "EngineSettings":
        """Build settings from the engine section of the config.

        Raises:
            ValidationError: If engine.overlap_policy names no policy.
        """
        ttl = config.get('engine.lecturer_cache_ttl')
        return cls(
            default_duration_minutes=int(config.get('engine.default_duration_minutes', DEFAULT_DURATION_MINUTES)),
            overlap_policy=config.get('engine.overlap_policy', OverlapPolicy.ALLOW),
            lecturer_cache_ttl=float(ttl) if ttl is not None else None,
            task_due_time=str(config.get('engine.task_due_time', DEFAULT_TASK_DUE_TIME)),
        )


@dataclass
class StoreSettings:
    """Where the hosted document store lives; environment wins over the file."""

    project_id: Optional[str] = None
    database: str = FIRESTORE_DEFAULT_DATABASE
    id_token: Optional[str] = None

    @classmethod
    def from_config(cls, config: Config) -> "StoreSettings":
        return cls(
            project_id=os.environ.get(PROJECT_ID_ENV) or config.get('store.project_id'),
            database=config.get('store.database', FIRESTORE_DEFAULT_DATABASE),
            id_token=os.environ.get(ID_TOKEN_ENV) or config.get('store.id_token'),
        )
