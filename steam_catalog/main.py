#!/usr/bin/env python3
"""steam-catalog - command line entry point.

Usage:
    steam-catalog [--steam-path PATH] [--user ID] [--output FILE] [--verbose]
    steam-catalog --users [--steam-path PATH]
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from steam_catalog.config import Config
from steam_catalog.core.logging import logger, setup_logging
from steam_catalog.core.steam_account_scanner import get_steam_users
from steam_catalog.core.steam_scanner import SteamLibraryScanner
from steam_catalog.utils.json_exporter import JSONExporter
from steam_catalog.version import __app_name__, __version__

__all__ = ["main"]


def _option_value(argv: list[str], name: str) -> str | None:
    """Return the value following ``name`` in argv, if given."""
    if name not in argv:
        return None
    index = argv.index(name)
    if index + 1 >= len(argv):
        raise ValueError(f"{name} requires a value")
    return argv[index + 1]


def _print_users(steam_path: Path, verbose: bool) -> int:
    accounts = get_steam_users(steam_path, verbose=verbose)
    if not accounts:
        print("No Steam users found.")
        return 1
    for account in accounts:
        print(f"{account.id}\t{account.steam_id_64}\t{account.name}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main execution flow.

    Returns:
        Exit code (0 = success, 1 = nothing to scan, 2 = usage error).
    """
    argv = list(sys.argv[1:] if argv is None else argv)

    if "--help" in argv or "-h" in argv:
        print(__doc__)
        return 0
    if "--version" in argv:
        print(f"{__app_name__} {__version__}")
        return 0

    cfg = Config.from_env()
    try:
        steam_path = _option_value(argv, "--steam-path")
        user_id = _option_value(argv, "--user")
        output = _option_value(argv, "--output")
    except ValueError as e:
        print(e, file=sys.stderr)
        return 2

    if steam_path:
        cfg.STEAM_PATH = Path(steam_path).expanduser()
    if user_id:
        cfg.STEAM_USER_ID = user_id
    if "--verbose" in argv:
        cfg.VERBOSE = True

    setup_logging(logging.DEBUG if cfg.VERBOSE else logging.WARNING, cfg.LOG_FILE)

    if not cfg.STEAM_PATH:
        logger.error("Steam installation not found; pass --steam-path or set STEAM_PATH")
        return 1

    if "--users" in argv:
        return _print_users(cfg.STEAM_PATH, cfg.VERBOSE)

    if not cfg.STEAM_USER_ID:
        cfg.STEAM_USER_ID = cfg.get_detected_user()

    scanner = SteamLibraryScanner(cfg.STEAM_PATH, verbose=cfg.VERBOSE)
    if cfg.STEAM_USER_ID:
        result = scanner.get_all_games(cfg.STEAM_USER_ID)
        records, diagnostics = result.all, result.diagnostics
    else:
        logger.warning("No Steam user found; shortcuts and localconfig overrides are skipped")
        records, diagnostics = scanner.get_installed_games(), scanner.diagnostics

    for diagnostic in diagnostics:
        logger.warning("Skipped %s", diagnostic)

    if output:
        try:
            JSONExporter.export(records, Path(output))
        except OSError as e:
            logger.error("Could not write %s: %s", output, e)
            return 1
    else:
        print(JSONExporter.to_json(records))

    return 0


if __name__ == "__main__":
    sys.exit(main())
