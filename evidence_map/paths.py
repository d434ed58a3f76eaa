"""
Path utilities for the evidence map.

Handles path resolution for both development mode and frozen (PyInstaller) executables.
- In development: paths are relative to the project root
- When frozen: paths are relative to the executable location

Map data (data/) and config.json live next to the executable, not bundled inside.
"""

import sys
from pathlib import Path

DEFAULT_MAP_FILE = "system-map.json"


def get_app_dir() -> Path:
    """
    Get the application directory.

    - In development: the project root (parent of evidence_map/)
    - When frozen: the directory containing the executable
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent


def get_data_dir() -> Path:
    """Get the directory holding map exports (data/)."""
    return get_app_dir() / "data"


def get_config_path() -> Path:
    return get_app_dir() / "config.json"


def get_default_map_path() -> Path:
    return get_data_dir() / DEFAULT_MAP_FILE
