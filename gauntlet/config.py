"""Configuration management for gauntlet.

Loads settings.yaml and .env from a config directory into a Config
object with typed property accessors for plugin discovery and logging.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Accessor for the global Config instance.
    build_runtime: Create a Runtime and load the configured plugins.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional

import structlog
import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .registry import PluginRegistry
from .runtime import Runtime

logger = structlog.get_logger("gauntlet.config")

PLUGIN_DIRS_ENV = "GAUNTLET_PLUGIN_DIRS"


class Config:
    """Central configuration manager for gauntlet.

    Args:
        config_dir: Directory holding settings.yaml and .env. Defaults
            to ``./config`` under the current working directory.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path.cwd() / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if not filepath.exists():
            return {}
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Cannot parse {filename}: {e}", path=str(filepath)
            ) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"{filename} must be a mapping",
                path=str(filepath),
                type=type(data).__name__,
            )
        return data

    def validate(self) -> None:
        """Check settings at startup.

        Logs warnings/errors but does not raise.
        """
        for path in self.plugin_dirs:
            if not path.is_dir():
                logger.warning("plugin_dir_missing", path=str(path))

        raw = self.settings.get("plugin_dirs")
        if raw is not None and not isinstance(raw, list):
            logger.error("plugin_dirs_invalid_type", type=type(raw).__name__)

        raw_logging = self.settings.get("logging")
        if raw_logging is not None and not isinstance(raw_logging, dict):
            logger.error(
                "config_invalid_value",
                key="logging",
                type=type(raw_logging).__name__,
                valid="mapping",
            )

        level = str(self.logging_level).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logger.error("config_invalid_value", key="logging.level", value=level)

    @property
    def plugin_dirs(self) -> List[Path]:
        """Plugin directories, in load order.

        GAUNTLET_PLUGIN_DIRS (os.pathsep-separated) takes precedence.
        Relative paths in settings.yaml resolve against the config dir.
        """
        env_value = os.environ.get(PLUGIN_DIRS_ENV)
        if env_value:
            return [Path(p).expanduser() for p in env_value.split(os.pathsep) if p]

        configured = self.settings.get("plugin_dirs", [])
        if not isinstance(configured, list):
            return []
        dirs = []
        for entry in configured:
            path = Path(str(entry)).expanduser()
            if not path.is_absolute():
                path = self.config_dir / path
            dirs.append(path)
        return dirs

    @property
    def strict_namespaces(self) -> bool:
        """Reject plugins that reuse a registered namespace (default False)."""
        return bool(self.settings.get("strict_namespaces", False))

    @property
    def log_dir(self) -> Optional[Path]:
        """Log file directory. None means console-only logging."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return None

    def _logging_section(self) -> dict:
        """The logging mapping, or {} when absent or not a mapping."""
        log_config = self.settings.get("logging")
        if not isinstance(log_config, dict):
            return {}
        return log_config

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO)."""
        log_config = self._logging_section()
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> Dict[str, str]:
        """Per-subsystem overrides, e.g. {"plugins": "DEBUG"}."""
        log_config = self._logging_section()
        levels = log_config.get("subsystem_levels", {})
        if not isinstance(levels, dict):
            return {}
        return levels

    @property
    def logging_max_file_size_mb(self) -> int:
        return self._logging_int("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        return self._logging_int("backup_count", 5)

    def _logging_int(self, key: str, default: int) -> int:
        value = self._logging_section().get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                "Expected an integer", setting_name=f"logging.{key}", value=value
            ) from e


def build_runtime(config: Config) -> Runtime:
    """Create a Runtime and load every configured plugin directory.

    Raises:
        PluginLoadError: A configured plugin directory failed to load.
        PluginConflictError: Two plugins share a namespace and
            strict_namespaces is on.
    """
    runtime = Runtime(PluginRegistry(strict_namespaces=config.strict_namespaces))
    for directory in config.plugin_dirs:
        runtime.add_plugin_from_directory(directory)
    logger.info("runtime_ready", plugins=len(runtime.plugins))
    return runtime


_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
