from __future__ import annotations

"""Configuration loading and access helpers.

This module centralises the declarative settings of the toolkit (logging
setup, transform defaults, history/log capacities, enhancement model). It
loads YAML files packaged with *otzaria_toolkit* and optionally merges them
with user overrides.

On Windows: ``%LOCALAPPDATA%\\OtzariaToolkit\\config\\*.yml``
On Unix: ``~/.otzaria_toolkit/*.yml``
Anywhere: ``$OTZARIA_CONFIG_DIR/*.yml`` when the variable is set.
"""

import importlib.resources as pkg_resources
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

__all__ = ["ConfigManager"]


def _get_user_config_dir() -> Path:
    """Get the user configuration directory."""
    override = os.environ.get("OTZARIA_CONFIG_DIR")
    if override:
        return Path(override)
    if os.name == 'nt':  # Windows
        local_appdata = os.environ.get('LOCALAPPDATA')
        if local_appdata:
            return Path(local_appdata) / "OtzariaToolkit" / "config"
        return Path.home() / "AppData" / "Local" / "OtzariaToolkit" / "config"
    return Path.home() / ".otzaria_toolkit"


def _ensure_user_configs_exist(user_config_dir: Path, default_filenames: Dict[str, str]) -> None:
    """Copy default config files to user directory if they don't exist."""
    try:
        user_config_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Could not create user config directory %s: %s", user_config_dir, e)
        return

    for filename in default_filenames.values():
        user_config_path = user_config_dir / filename
        if user_config_path.exists():
            continue
        try:
            with pkg_resources.open_text(__package__, filename) as fh:
                default_content = fh.read()
            user_config_path.write_text(default_content, encoding='utf-8')
            logger.info("Created user config: %s", user_config_path)
        except (FileNotFoundError, OSError) as e:
            logger.warning("Could not copy default config %s: %s", filename, e)


def _deep_update(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge *overrides* into *base* one section deep."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = {**base[key], **value}
        else:
            base[key] = value
    return base


class _Singleton(type):
    _instance: "ConfigManager" | None = None

    def __call__(cls, *args, **kwargs):  # type: ignore[no-self-use]
        if cls._instance is None:
            cls._instance = super().__call__(*args, **kwargs)
        return cls._instance


class ConfigManager(metaclass=_Singleton):
    """Lazy-loads and exposes configuration sections as dictionaries."""

    _DEFAULT_FILENAMES = {
        "logging": "logging.yml",
        "transforms": "transforms.yml",
    }

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}
        self._ensure_loaded()

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def get_logging_config(self) -> Dict[str, Any]:
        return self._data.get("logging", {})

    def get_transform_defaults(self) -> Dict[str, Any]:
        return self._data.get("transforms", {})

    def get_section(self, name: str) -> Dict[str, Any]:
        """Return one top-level section of ``transforms.yml`` (empty if absent)."""
        section = self.get_transform_defaults().get(name)
        return section if isinstance(section, dict) else {}

    def get_value(self, section: str, key: str, default: Any = None) -> Any:
        return self.get_section(section).get(key, default)

    @classmethod
    def reset(cls) -> None:
        """Drop the cached instance so the next call reloads from disk."""
        cls._instance = None

    # ------------------------------------------------------------------
    # Internal loading logic
    # ------------------------------------------------------------------
    def _ensure_loaded(self) -> None:
        if self._data:
            return  # already loaded

        startup_summary = []

        user_config_dir = _get_user_config_dir()
        _ensure_user_configs_exist(user_config_dir, self._DEFAULT_FILENAMES)

        for key, filename in self._DEFAULT_FILENAMES.items():
            merged_cfg: Dict[str, Any] = {}
            status = "missing"

            # 1. load packaged default
            try:
                with pkg_resources.open_text(__package__, filename) as fh:
                    packaged_data = yaml.safe_load(fh) or {}
                    merged_cfg.update(packaged_data)
                    status = "loaded"
            except (FileNotFoundError, OSError):
                logger.error("Missing packaged config for %s (%s)", key, filename)
                merged_cfg.update(self._builtin_defaults()[key])
            except yaml.YAMLError as exc:
                logger.error("Invalid packaged config for %s (%s): %s", key, filename, exc)
                merged_cfg.update(self._builtin_defaults()[key])
                status = "invalid"

            # 2. load user overrides
            user_path = user_config_dir / filename
            if user_path.exists():
                try:
                    user_data = yaml.safe_load(user_path.read_text(encoding="utf-8")) or {}
                    _deep_update(merged_cfg, user_data)
                    if status == "loaded":
                        status = "loaded+overrides"
                except (OSError, yaml.YAMLError) as exc:
                    logger.error("Could not parse user config %s: %s", user_path, exc)

            self._data[key] = merged_cfg
            startup_summary.append(f"{key}: {status}")

        logger.info("Config startup: %s", " | ".join(startup_summary))

    @staticmethod
    def _builtin_defaults() -> Dict[str, Dict[str, Any]]:
        """Return the defaults used when packaged YAML cannot be read."""
        return {
            "logging": {},
            "transforms": {
                "history": {"capacity": 20},
                "session_log": {"capacity": 50},
                "naming": {"max_length": 80},
                "merge": {"source_tag": "h4", "target_tag": "h5"},
                "split": {"method": "tag", "tag": "h2", "context_chars": 20},
                "export": {"archive_prefix": "Otzaria_Output", "extension": ".txt"},
                "enhancement": {
                    "model": "gemini-2.5-flash",
                    "excerpt_chars": 5000,
                    "api_key_env": "GEMINI_API_KEY",
                },
            },
        }
