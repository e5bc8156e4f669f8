"""
Steam user identifier conversion.

userdata/ folder names carry the short account id (SteamID3 account
number); loginusers.vdf is keyed by the 64-bit SteamID64. The two differ by
a fixed public offset.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "InvalidIdentifierError",
    "STEAM_ID_BASE",
    "UserIdentity",
    "to_long_id",
    "to_short_id",
]

# Steam ID conversion constant
STEAM_ID_BASE = 76561197960265728

_UINT64_MAX = 2**64 - 1
_DIGITS_RE = re.compile(r"[0-9]+")


class InvalidIdentifierError(ValueError):
    """Raised when a Steam identifier is not a non-negative decimal integer."""


def _parse_unsigned(value: str) -> int:
    if not isinstance(value, str) or not _DIGITS_RE.fullmatch(value):
        raise InvalidIdentifierError(f"Not a non-negative integer identifier: {value!r}")
    return int(value)


def to_long_id(short_id: str) -> str:
    """Convert an account id (userdata folder name) to SteamID64.

    Args:
        short_id: Decimal account id, e.g. "43925226".

    Returns:
        SteamID64 as a decimal string.

    Raises:
        InvalidIdentifierError: If short_id is not ASCII digits, or the
            result does not fit in an unsigned 64-bit integer.
    """
    long_id = _parse_unsigned(short_id) + STEAM_ID_BASE
    if long_id > _UINT64_MAX:
        raise InvalidIdentifierError(f"Account id out of range: {short_id!r}")
    return str(long_id)


def to_short_id(long_id: str) -> str:
    """Convert SteamID64 back to the account id.

    Raises:
        InvalidIdentifierError: If long_id is not a decimal integer or lies
            below the SteamID64 base.
    """
    value = _parse_unsigned(long_id)
    if value < STEAM_ID_BASE or value > _UINT64_MAX:
        raise InvalidIdentifierError(f"Not a SteamID64: {long_id!r}")
    return str(value - STEAM_ID_BASE)


@dataclass(frozen=True)
class UserIdentity:
    """Both encodings of one Steam user.

    Attributes:
        short_id: The account id from the userdata folder name.
        long_id: The SteamID64 used as key in loginusers.vdf.
    """

    short_id: str
    long_id: str

    @classmethod
    def from_short_id(cls, short_id: str) -> UserIdentity:
        return cls(short_id=short_id, long_id=to_long_id(short_id))

    def __str__(self) -> str:
        return f"{self.short_id} ({self.long_id})"
