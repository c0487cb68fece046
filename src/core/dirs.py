from __future__ import annotations

import os
import sys
from pathlib import Path

from src.config import settings
from src.core.errors import DirectoryResolutionError


def _home() -> Path:
    try:
        return Path.home()
    except RuntimeError as e:
        raise DirectoryResolutionError("No home directory for the current user.") from e


def _platform_data_dir(name: str) -> Path:
    if sys.platform.startswith("win"):
        appdata = os.getenv("APPDATA")
        base = Path(appdata) if appdata else _home() / "AppData" / "Roaming"
        return base / name / "data"
    if sys.platform == "darwin":
        return _home() / "Library" / "Application Support" / name
    # XDG: nom de dossier en minuscules, sans espaces
    xdg = os.getenv("XDG_DATA_HOME", "")
    base = Path(xdg) if xdg and Path(xdg).is_absolute() else _home() / ".local" / "share"
    return base / "".join(name.lower().split())


def resolve_data_dir(app_name: str) -> Path:
    """
    Map an application name to its per-user data directory.
    Nothing is created here; SERDER_DATA_DIR, when set, replaces the
    platform root and the name is used as-is below it.
    """
    name = (app_name or "").strip()
    if not name:
        raise DirectoryResolutionError("Error finding data_dir: empty application name.")
    if any(sep in name for sep in ("/", "\\")) or name in (".", ".."):
        raise DirectoryResolutionError(f"Error finding data_dir: unusable application name {app_name!r}.")

    if settings.SERDER_DATA_DIR:
        return (Path(settings.SERDER_DATA_DIR).expanduser() / name).resolve()
    return _platform_data_dir(name).resolve()
