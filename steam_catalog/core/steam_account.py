"""
Steam Account data structure.

This module defines the SteamAccount dataclass which represents a local Steam
user account with both of its IDs and the name recorded in loginusers.vdf.
"""

from __future__ import annotations

from dataclasses import dataclass

from steam_catalog.core.steam_id import UserIdentity

__all__ = ["SteamAccount", "UNKNOWN_ACCOUNT_NAME"]

UNKNOWN_ACCOUNT_NAME = "Unknown"


@dataclass(frozen=True)
class SteamAccount:
    """Represents a Steam user account.

    Attributes:
        identity: Short account id (userdata folder name) and SteamID64.
        name: AccountName or PersonaName from loginusers.vdf.
    """

    identity: UserIdentity
    name: str = UNKNOWN_ACCOUNT_NAME

    @property
    def id(self) -> str:
        """The short account id, as used for userdata/<id>/ paths."""
        return self.identity.short_id

    @property
    def steam_id_64(self) -> str:
        return self.identity.long_id

    def __str__(self) -> str:
        """String representation showing account ID and name."""
        return f"{self.id} ({self.name})"
