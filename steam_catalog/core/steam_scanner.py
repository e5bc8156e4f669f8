# steam_catalog/core/steam_scanner.py

"""
Scans a Steam installation and builds the application catalog.

This module is the filesystem side of the catalog: it enumerates library
folders, reads appmanifest_*.acf, localconfig.vdf and shortcuts.vdf, hands
the parsed trees to ``build_catalog`` and collects a diagnostic for every
file that could not be read or decoded. A bad file never aborts the scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from steam_catalog.core.catalog_builder import build_catalog
from steam_catalog.core.catalog_record import CatalogRecord
from steam_catalog.core.value_tree import MapNode
from steam_catalog.core.vdf_parser import VDFDecodeError, parse_binary_vdf
from steam_catalog.utils.acf import TextKVSyntaxError, parse_text_kv, parse_text_kv_nested
from steam_catalog.utils.paths import format_image_path, format_steam_cmd, normalize_path

logger = logging.getLogger("steamcatalog.scanner")

__all__ = [
    "Diagnostic",
    "ScanResult",
    "SteamLibraryScanner",
    "list_directory",
    "read_binary_file",
    "read_text_file",
]

MANIFEST_PREFIX = "appmanifest_"
MANIFEST_SUFFIX = ".acf"


def read_text_file(path: Path) -> str:
    """Read a text file as UTF-8, replacing undecodable bytes.

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: On any other I/O failure.
    """
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def read_binary_file(path: Path) -> bytes:
    """Read a file as raw bytes.

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: On any other I/O failure.
    """
    return Path(path).read_bytes()


def list_directory(path: Path) -> list[str]:
    """Return entry names of a directory, sorted for stable enumeration order.

    Raises:
        FileNotFoundError: If the directory does not exist.
        OSError: On any other I/O failure.
    """
    return sorted(entry.name for entry in Path(path).iterdir())


@dataclass(frozen=True)
class Diagnostic:
    """A file that contributed nothing to the catalog, and why."""

    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class ScanResult:
    """Outcome of a full scan.

    Attributes:
        steam_games: Records built from appmanifest files.
        non_steam_games: Records built from shortcuts.vdf.
        diagnostics: Files that were skipped.
    """

    steam_games: list[CatalogRecord] = field(default_factory=list)
    non_steam_games: list[CatalogRecord] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def all(self) -> list[CatalogRecord]:
        return [*self.steam_games, *self.non_steam_games]


class SteamLibraryScanner:
    """
    Reads a local Steam installation without requiring API access.

    Library folders are discovered through libraryfolders.vdf; per-user
    files are looked up under ``userdata/<account id>/config``.
    """

    def __init__(self, steam_path: str | Path, *, verbose: bool = False, system: str | None = None):
        """
        Initializes the scanner.

        Args:
            steam_path: Path to the Steam installation directory.
            verbose: Forwarded to ``build_catalog`` and used for per-file
                trace logging.
            system: ``platform.system()`` value used for URL and artwork
                templating; defaults to the current host.
        """
        self.steam_path = Path(normalize_path(steam_path))
        self.steamapps_path = self.steam_path / "steamapps"
        self.verbose = verbose
        self.system = system
        self.diagnostics: list[Diagnostic] = []
        self._trace = logger.info if verbose else logger.debug

    # -- paths --

    def user_config_dir(self, user_id: str) -> Path:
        return self.steam_path / "userdata" / user_id / "config"

    def get_library_folders(self) -> list[Path]:
        """
        Finds all Steam library folders based on libraryfolders.vdf.

        The installation itself always comes first; further libraries
        follow in file order. Paths that do not exist are skipped, and a
        folder reached through a symlink counts as the folder it points to.

        Returns:
            list[Path]: Library root folders without duplicates.
        """
        folders = [self.steam_path]
        seen = {self.steam_path.resolve()}

        possible_vdfs = [self.steamapps_path / "libraryfolders.vdf", self.steam_path / "config" / "libraryfolders.vdf"]
        libraryfolders_vdf = next((p for p in possible_vdfs if p.exists()), None)

        if libraryfolders_vdf is None:
            logger.debug("No libraryfolders.vdf found under %s", self.steam_path)
            return folders

        try:
            tree = parse_text_kv_nested(read_text_file(libraryfolders_vdf))
        except (OSError, TextKVSyntaxError) as e:
            self._report(libraryfolders_vdf, e)
            return folders

        library_data = tree.get_casefold("libraryfolders")
        if not isinstance(library_data, MapNode):
            library_data = tree

        for _, value in library_data.items():
            if not isinstance(value, MapNode):
                continue
            path_str = value.get_text("path")
            if not path_str:
                continue

            path_obj = Path(path_str.replace("\\\\", "\\"))
            if not path_obj.exists():
                logger.info("Library path does not exist: %s", path_str)
                continue
            resolved = path_obj.resolve()
            if resolved not in seen:
                seen.add(resolved)
                folders.append(path_obj)

        return folders

    # -- file readers --

    def read_manifests(self) -> list[MapNode]:
        """
        Parses every appmanifest_*.acf across all library folders.

        Returns:
            Flat manifest trees in library order, then file name order.
        """
        manifests: list[MapNode] = []

        for lib_path in self.get_library_folders():
            steamapps = lib_path / "steamapps"
            try:
                names = list_directory(steamapps)
            except FileNotFoundError:
                logger.warning("SteamApps folder does not exist: %s", steamapps)
                continue
            except OSError as e:
                self._report(steamapps, e)
                continue

            manifest_names = [n for n in names if n.startswith(MANIFEST_PREFIX) and n.endswith(MANIFEST_SUFFIX)]
            self._trace("Found %d manifest files in %s", len(manifest_names), steamapps)

            for name in manifest_names:
                path = steamapps / name
                try:
                    manifests.append(parse_text_kv(read_text_file(path)))
                except OSError as e:
                    self._report(path, e)

        return manifests

    def read_local_config(self, user_id: str) -> MapNode | None:
        """Parse the user's localconfig.vdf, or return None if unavailable."""
        path = self.user_config_dir(user_id) / "localconfig.vdf"
        if not path.exists():
            logger.warning("localconfig.vdf not found: %s", path)
            return None
        try:
            return parse_text_kv_nested(read_text_file(path))
        except (OSError, TextKVSyntaxError) as e:
            self._report(path, e)
            return None

    def read_shortcuts(self, user_id: str) -> MapNode | None:
        """Parse the user's shortcuts.vdf, or return None if unavailable."""
        path = self.user_config_dir(user_id) / "shortcuts.vdf"
        if not path.exists():
            logger.warning("shortcuts.vdf not found: %s", path)
            return None
        try:
            return parse_binary_vdf(read_binary_file(path))
        except (OSError, VDFDecodeError) as e:
            self._report(path, e)
            return None

    # -- catalog --

    def get_installed_games(self, user_id: str | None = None) -> list[CatalogRecord]:
        """
        Builds records for installed Steam games.

        ``diagnostics`` is reset and then holds the files skipped by this call.

        Args:
            user_id: Account id whose localconfig.vdf overrides launch
                options and last-played times; None skips overrides.
        """
        self.diagnostics = []
        return self._installed_games(user_id)

    def get_non_steam_games(self, user_id: str) -> list[CatalogRecord]:
        """Builds records for the user's non-Steam shortcuts.

        ``diagnostics`` is reset and then holds the files skipped by this call.
        """
        self.diagnostics = []
        return self._non_steam_games(user_id)

    def get_all_games(self, user_id: str) -> ScanResult:
        """
        Scans manifests and shortcuts for one user.

        Returns:
            ScanResult with both record lists and the diagnostics collected
            during this call.
        """
        self.diagnostics = []
        result = ScanResult(
            steam_games=self._installed_games(user_id),
            non_steam_games=self._non_steam_games(user_id),
        )
        result.diagnostics = list(self.diagnostics)
        logger.info("Total games found: %d", len(result.all))
        return result

    def _installed_games(self, user_id: str | None) -> list[CatalogRecord]:
        override = self.read_local_config(user_id) if user_id else None
        games = build_catalog(
            self.read_manifests(),
            override,
            verbose=self.verbose,
            command_formatter=partial(format_steam_cmd, system=self.system),
            image_formatter=partial(format_image_path, str(self.steam_path), system=self.system),
        )
        logger.info("Total Steam games found: %d", len(games))
        return games

    def _non_steam_games(self, user_id: str) -> list[CatalogRecord]:
        shortcuts = self.read_shortcuts(user_id)
        if shortcuts is None:
            return []
        return build_catalog([], shortcuts_tree=shortcuts, verbose=self.verbose)

    def _report(self, path: Path, error: Exception) -> None:
        logger.error("Error reading or parsing %s: %s", path, error)
        self.diagnostics.append(Diagnostic(path=path, message=str(error)))
