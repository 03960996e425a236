"""Locate ``micropress.toml``.

Lookup order: ``MICROPRESS_CONFIG`` (an explicit file; no fallback if it is
missing), then the start directory and each of its parents.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "micropress.toml"
CONFIG_ENV_VAR = "MICROPRESS_CONFIG"


def config_from_env() -> Path | None:
    """The file named by ``MICROPRESS_CONFIG``, if set and present."""
    value = os.environ.get(CONFIG_ENV_VAR)
    if not value:
        return None
    path = Path(value).expanduser()
    return path if path.is_file() else None


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None."""
    if os.environ.get(CONFIG_ENV_VAR):
        return config_from_env()
    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
