"""
Version helpers for sad.

Resolution order:
    1) SAD_VERSION env var (authoritative override)
    2) installed distribution metadata (`sad-core`)
    3) DEFAULT_VERSION
"""

from __future__ import annotations

import os
from importlib import metadata

DIST_NAME = "sad-core"
DEFAULT_VERSION = "0.1.0"


def detect_version() -> str:
    env = os.environ.get("SAD_VERSION", "").strip()
    if env:
        return env
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return DEFAULT_VERSION


__version__ = detect_version()

__all__ = ["__version__", "detect_version", "DEFAULT_VERSION", "DIST_NAME"]
