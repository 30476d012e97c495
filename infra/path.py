# infra/path.py
from __future__ import annotations
import os
import sys
from pathlib import Path

APP_NAME = "SiteLedger"
COMPANY_NAME = "AlFatini"


def user_data_dir() -> Path:
    """
    Returns a per-user data directory, e.g.:

    Windows:
        C:\\Users\\<User>\\AppData\\Roaming\\AlFatini\\SiteLedger

    macOS:
        ~/Library/Application Support/AlFatini/SiteLedger

    Linux:
        ~/.local/share/AlFatini/SiteLedger
    """
    try:
        if sys.platform.startswith("win"):
            base = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share"))

        path = base / COMPANY_NAME / APP_NAME
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        # Last-resort fallback: use home directory
        fallback = Path.home() / f".{APP_NAME}"
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def default_export_dir() -> Path:
    """
    Folder that receives rendered statements when the caller does not pass one.
    """
    return user_data_dir() / "exports"
