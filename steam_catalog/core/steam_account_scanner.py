"""
Steam Account Scanner.

This module scans the Steam userdata directory to find all local Steam accounts
and resolves their names from config/loginusers.vdf.
"""

from __future__ import annotations

import logging
from pathlib import Path

from steam_catalog.core.steam_account import UNKNOWN_ACCOUNT_NAME, SteamAccount
from steam_catalog.core.steam_id import InvalidIdentifierError, UserIdentity
from steam_catalog.core.steam_scanner import list_directory, read_text_file
from steam_catalog.core.value_tree import MapNode
from steam_catalog.utils.acf import TextKVSyntaxError, parse_text_kv_nested

logger = logging.getLogger("steamcatalog.account_scanner")

__all__ = ["get_steam_users", "load_login_users"]


def load_login_users(steam_path: Path) -> MapNode:
    """Parse config/loginusers.vdf and return its ``users`` map.

    Returns:
        Map keyed by SteamID64; empty if the file is missing or unreadable.
    """
    login_users_path = steam_path / "config" / "loginusers.vdf"
    if not login_users_path.exists():
        logger.warning("loginusers.vdf not found: %s", login_users_path)
        return MapNode()

    try:
        tree = parse_text_kv_nested(read_text_file(login_users_path))
    except (OSError, TextKVSyntaxError) as e:
        logger.error("Error parsing loginusers.vdf: %s", e)
        return MapNode()

    users = tree.get_casefold("users")
    return users if isinstance(users, MapNode) else MapNode()


def get_steam_users(steam_path: str | Path, *, verbose: bool = False) -> list[SteamAccount]:
    """Scan the Steam userdata directory for all local accounts.

    This function:
    1. Lists the numeric folders under userdata/
    2. Converts each account id to SteamID64
    3. Looks the SteamID64 up in loginusers.vdf for a display name

    Args:
        steam_path: Path to the Steam installation directory.
        verbose: Log each account found at INFO instead of DEBUG.

    Returns:
        Accounts in folder name order.
    """
    trace = logger.info if verbose else logger.debug
    steam_path = Path(steam_path)
    userdata_path = steam_path / "userdata"

    try:
        folder_names = list_directory(userdata_path)
    except FileNotFoundError:
        logger.warning("No userdata folder at %s", userdata_path)
        return []
    except OSError as e:
        logger.error("Error listing %s: %s", userdata_path, e)
        return []

    login_users = load_login_users(steam_path)
    accounts: list[SteamAccount] = []

    for name in folder_names:
        if not (userdata_path / name).is_dir():
            continue
        try:
            identity = UserIdentity.from_short_id(name)
        except InvalidIdentifierError:
            logger.warning("Skipping userdata folder with invalid account id: %s", name)
            continue

        user_info = login_users.get(identity.long_id)
        display_name = UNKNOWN_ACCOUNT_NAME
        if isinstance(user_info, MapNode):
            display_name = user_info.get_text("AccountName") or user_info.get_text("PersonaName") or display_name

        trace("Found account %s (SteamID64 %s): %s", identity.short_id, identity.long_id, display_name)
        accounts.append(SteamAccount(identity=identity, name=display_name))

    logger.info("Found %d Steam accounts", len(accounts))
    return accounts
