# -*- coding: utf-8 -*-
"""Application version detection utilities.

Provides a single public function, ``get_app_version()``, which reports the
installed distribution version, or ``vdev`` when running from a checkout.
"""

from __future__ import annotations

from importlib import metadata
from typing import Optional

_CACHED_VERSION: Optional[str] = None

_DISTRIBUTION = "otzaria-toolkit"


def get_app_version() -> str:
    """Return the application version string (e.g., ``v1.2.3``)."""
    global _CACHED_VERSION
    if _CACHED_VERSION:
        return _CACHED_VERSION

    try:
        text = metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        text = ""

    _CACHED_VERSION = (text if text.startswith("v") else f"v{text}") if text else "vdev"
    return _CACHED_VERSION
