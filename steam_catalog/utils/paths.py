"""Path normalization and Steam URL/artwork templating.

Pure string helpers; nothing here touches the filesystem.
"""

from __future__ import annotations

import ntpath
import os
import platform as _platform
import posixpath
from pathlib import Path

__all__ = ["format_image_path", "format_steam_cmd", "is_windows", "normalize_path"]


def is_windows(system: str | None = None) -> bool:
    """Return True for the Windows platform (current host when system is None)."""
    return (system or _platform.system()) == "Windows"


def normalize_path(file_path: str | Path, system: str | None = None) -> str:
    """Expand a leading ``~`` and collapse separators for the target platform.

    Args:
        file_path: Path to normalize.
        system: ``platform.system()`` value to normalize for; defaults to
            the current host.

    Returns:
        Normalized path string.
    """
    path_str = str(file_path)
    if path_str.startswith("~"):
        path_str = os.path.expanduser("~") + path_str[1:]
    if is_windows(system):
        return ntpath.normpath(path_str)
    return posixpath.normpath(path_str)


def format_image_path(steam_path: str | Path, app_id: str, system: str | None = None) -> str:
    """Build the 600x900 library artwork path for a Steam app.

    Windows keeps artwork in a per-app subfolder; macOS and Linux use a flat
    ``<appid>_library_600x900.jpg`` file in librarycache.
    """
    join = ntpath.join if is_windows(system) else posixpath.join
    if is_windows(system):
        image_path = join(str(steam_path), "appcache", "librarycache", app_id, "library_600x900.jpg")
    else:
        image_path = join(str(steam_path), "appcache", "librarycache", f"{app_id}_library_600x900.jpg")
    return normalize_path(image_path, system)


def format_steam_cmd(app_id: str, system: str | None = None) -> str:
    """Return the steam:// URL that launches ``app_id``.

    Windows uses ``steam://run/<appid>``, macOS and Linux
    ``steam://rungameid/<appid>``.
    """
    if is_windows(system):
        return f"steam://run/{app_id}"
    return f"steam://rungameid/{app_id}"
