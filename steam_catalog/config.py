"""
Configuration - Windows, macOS & Linux auto-detection of the Steam folder.

Settings come from the environment (optionally a ``.env`` file). A Config
instance is built by the entry point and its values are passed explicitly
to the scanner; nothing in the core reads it.
"""

from __future__ import annotations

import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger("steamcatalog.config")


__all__ = ["Config"]

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class Config:
    """
    Runtime settings for a catalog scan.

    Attributes:
        STEAM_PATH: Steam installation directory.
        STEAM_USER_ID: Account id (userdata folder name) whose localconfig
            and shortcuts are read.
        VERBOSE: Per-record trace logging.
        LOG_FILE: Optional log file in addition to the console.
    """

    STEAM_PATH: Path | None = None
    STEAM_USER_ID: str | None = None
    VERBOSE: bool = False
    LOG_FILE: Path | None = None

    @classmethod
    def from_env(cls, dotenv_path: Path | None = None) -> Config:
        """Build a Config from environment variables.

        Reads ``STEAM_PATH``, ``STEAM_USER_ID``, ``DEBUG`` and
        ``STEAM_CATALOG_LOG_FILE``. A missing Steam path is auto-detected.
        """
        load_dotenv(dotenv_path)

        steam_path = os.getenv("STEAM_PATH")
        log_file = os.getenv("STEAM_CATALOG_LOG_FILE")
        cfg = cls(
            STEAM_PATH=Path(steam_path).expanduser() if steam_path else None,
            STEAM_USER_ID=os.getenv("STEAM_USER_ID") or None,
            VERBOSE=os.getenv("DEBUG", "").strip().lower() in _TRUE_VALUES,
            LOG_FILE=Path(log_file) if log_file else None,
        )

        if not cfg.STEAM_PATH:
            cfg.STEAM_PATH = cls._find_steam_path()
            if cfg.STEAM_PATH:
                logger.debug("Auto-detected Steam at %s", cfg.STEAM_PATH)

        return cfg

    @staticmethod
    def _find_steam_path() -> Path | None:
        """Auto-detect Steam path on Linux, macOS and Windows."""
        system = platform.system()

        if system == "Windows":
            try:
                import winreg

                key = winreg.OpenKey(winreg.HKEY_CURRENT_USER, r"Software\Valve\Steam")
                path_str, _ = winreg.QueryValueEx(key, "SteamPath")
                path = Path(path_str)
                if path.exists():
                    return path
            except OSError:
                # Fallback to standard paths if registry fails
                common_paths = [Path(r"C:\Program Files (x86)\Steam"), Path(r"C:\Program Files\Steam")]
                for p in common_paths:
                    if p.exists():
                        return p

        elif system == "Darwin":
            p = Path.home() / "Library" / "Application Support" / "Steam"
            if p.exists():
                return p

        else:
            paths = [
                Path.home() / ".steam" / "steam",
                Path.home() / ".local" / "share" / "Steam",
            ]
            for p in paths:
                if p.exists():
                    return p.resolve() if p.is_symlink() else p

        return None

    def get_detected_user(self) -> str | None:
        """Return the first userdata account id that has a localconfig.vdf."""
        if not self.STEAM_PATH:
            return None
        userdata = self.STEAM_PATH / "userdata"
        if not userdata.exists():
            return None

        for item in sorted(userdata.iterdir()):
            if item.is_dir() and item.name.isdigit():
                if (item / "config" / "localconfig.vdf").exists():
                    return item.name
        return None
