"""Configuration for trace-ledger, stored as YAML."""

import os
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".trace-ledger"
DEFAULT_LEDGER_FILE = "links.yaml"
DEFAULT_CATALOG_FILE = "catalog.yaml"
ACTOR_ENV_VAR = "TRACE_LEDGER_ACTOR"
KNOWN_KEYS = frozenset({"ledger.path", "catalog.path", "actor"})


class Config:
    """Configuration manager with a local file and a global fallback.

    Local config lives in ``.trace-ledger/config.yaml`` under the current
    directory, global config in ``~/.trace-ledger/config.yaml``. Reads check
    local first, then global.

    Only ``KNOWN_KEYS`` can be set.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = Path.home() / CONFIG_DIR_NAME
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self._config: dict[str, Any] = self._load(self.config_file)

        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_config_file = Path.home() / CONFIG_DIR_NAME / "config.yaml"
            if global_config_file != self.config_file and global_config_file.exists():
                try:
                    self._global_config = self._load(global_config_file)
                except ValueError as e:
                    logger.warning("Failed to load global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    @staticmethod
    def _load(config_file: Path) -> dict[str, Any]:
        """Load a configuration dictionary from a YAML file."""
        if not config_file.exists():
            logger.debug("Config file does not exist, initializing empty config", config_file=str(config_file))
            return {}

        try:
            with open(config_file, "r") as f:
                config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", error=str(e))
            raise ValueError(f"Failed to load config from {config_file}: {e}") from e
        logger.debug("Config loaded successfully", keys=list(config.keys()))
        return config

    def _save(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            logger.error("Failed to save config", error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e
        logger.debug("Config saved successfully")

    def _layers(self) -> list[dict[str, Any]]:
        """Settings dictionaries in lookup order, nearest first."""
        return [self._config] if self.is_global else [self._config, self._global_config]

    def get(self, key: str, default: str | None = None) -> str | None:
        """Get a configuration value, falling back to global config for local reads."""
        return next((layer[key] for layer in self._layers() if key in layer), default)

    def set(self, key: str, value: str) -> None:
        """Store a known key in this config file.

        Raises:
            ValueError: If ``key`` is not one of ``KNOWN_KEYS``
        """
        if key not in KNOWN_KEYS:
            raise ValueError(f"Unknown config key {key!r}; expected one of {', '.join(sorted(KNOWN_KEYS))}")
        self._config[key] = value
        self._save()
        logger.info("Config value set", key=key, config_file=str(self.config_file))

    def unset(self, key: str) -> bool:
        """Remove a key from this config file. Returns whether it was present."""
        if key not in self._config:
            return False
        del self._config[key]
        self._save()
        logger.info("Config value unset", key=key, config_file=str(self.config_file))
        return True

    def list(self) -> dict[str, str]:
        """All settings, nearer layers overriding farther ones."""
        merged: dict[str, str] = {}
        for layer in reversed(self._layers()):
            merged.update(layer)
        return merged

    def ledger_path(self) -> Path:
        """Path of the links snapshot file."""
        return Path(self.get("ledger.path") or self.config_dir / DEFAULT_LEDGER_FILE)

    def catalog_path(self) -> Path:
        """Path of the entity catalog snapshot file."""
        return Path(self.get("catalog.path") or self.config_dir / DEFAULT_CATALOG_FILE)

    def actor(self) -> str:
        """Identity recorded in link metadata.

        Resolution order: the ``actor`` key, ``TRACE_LEDGER_ACTOR``, ``USER``,
        then ``"unknown"``.
        """
        return self.get("actor") or os.environ.get(ACTOR_ENV_VAR) or os.environ.get("USER") or "unknown"


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.

    Returns:
        Config instance
    """
    return Config(use_global=use_global)
