"""Configuration files (YAML) and the :class:`ConfigManager` that reads them.

Packaged defaults live next to this module; user overrides are merged on top.
"""

from .manager import ConfigManager

__all__ = [
    "ConfigManager",
]
