# tests/conftest.py
from __future__ import annotations

import struct
from io import BytesIO
from pathlib import Path
from typing import Callable

import pytest

BIN_NONE = b"\x00"
BIN_STRING = b"\x01"
BIN_INT32 = b"\x02"
BIN_UINT64 = b"\x07"
BIN_END = b"\x08"


def encode_binary_vdf(obj: dict[str, object]) -> bytes:
    """Reference encoder for test fixtures (the package only decodes).

    dict -> nested map, str -> string, int -> int32 when it fits,
    uint64 otherwise. Every map, the root included, ends with 0x08.
    """
    buf = BytesIO()
    _write_map(buf, obj)
    return buf.getvalue()


def _write_map(buf: BytesIO, obj: dict[str, object]) -> None:
    for key, value in obj.items():
        key_bytes = key.encode("utf-8") + b"\x00"
        if isinstance(value, dict):
            buf.write(BIN_NONE + key_bytes)
            _write_map(buf, value)
        elif isinstance(value, str):
            buf.write(BIN_STRING + key_bytes + value.encode("utf-8") + b"\x00")
        elif isinstance(value, int) and -(2**31) <= value < 2**31:
            buf.write(BIN_INT32 + key_bytes + struct.pack("<i", value))
        elif isinstance(value, int):
            buf.write(BIN_UINT64 + key_bytes + struct.pack("<Q", value))
        else:
            raise TypeError(f"Unsupported fixture value: {value!r}")
    buf.write(BIN_END)


@pytest.fixture
def encode_vdf() -> Callable[[dict[str, object]], bytes]:
    """Binary VDF reference encoder."""
    return encode_binary_vdf


@pytest.fixture
def manifest_text() -> str:
    """appmanifest_440.acf as written by the Steam client."""
    return """"AppState"
{
\t"appid"\t\t"440"
\t"Universe"\t\t"1"
\t"name"\t\t"Team Fortress 2"
\t"StateFlags"\t\t"4"
\t"installdir"\t\t"Team Fortress 2"
\t"LastUpdated"\t\t"1700000000"
\t"SizeOnDisk"\t\t"27381234567"
\t"buildid"\t\t"12345678"
\t"LastPlayed"\t\t"100"
\t"InstalledDepots"
\t{
\t\t"441"
\t\t{
\t\t\t"manifest"\t\t"7280959080077824592"
\t\t\t"size"\t\t"27381234567"
\t\t}
\t}
}
"""


@pytest.fixture
def localconfig_text() -> str:
    """Minimal localconfig.vdf with per-app overrides for 440."""
    return """"UserLocalConfigStore"
{
\t"Software"
\t{
\t\t"Valve"
\t\t{
\t\t\t"Steam"
\t\t\t{
\t\t\t\t"apps"
\t\t\t\t{
\t\t\t\t\t"440"
\t\t\t\t\t{
\t\t\t\t\t\t"LastPlayed"\t\t"200"
\t\t\t\t\t\t"LaunchOptions"\t\t"-novid"
\t\t\t\t\t\t"Playtime"\t\t"600"
\t\t\t\t\t}
\t\t\t\t}
\t\t\t}
\t\t}
\t}
}
"""


@pytest.fixture
def loginusers_text() -> str:
    """loginusers.vdf with one account (account id 5)."""
    return """"users"
{
\t"76561197960265733"
\t{
\t\t"AccountName"\t\t"gaben"
\t\t"PersonaName"\t\t"Gabe"
\t\t"MostRecent"\t\t"1"
\t}
}
"""


@pytest.fixture
def steam_root(
    tmp_path: Path,
    manifest_text: str,
    localconfig_text: str,
    loginusers_text: str,
    encode_vdf: Callable[[dict[str, object]], bytes],
) -> Path:
    """A fake Steam installation with one user, two manifests and one shortcut."""
    root = tmp_path / "Steam"
    steamapps = root / "steamapps"
    steamapps.mkdir(parents=True)
    (steamapps / "appmanifest_440.acf").write_text(manifest_text, encoding="utf-8")
    (steamapps / "appmanifest_999.acf").write_text('"AppState"\n{\n\t"name"\t\t"Broken"\n}\n', encoding="utf-8")
    (steamapps / "libraryfolders.vdf").write_text(
        f'"libraryfolders"\n{{\n\t"0"\n\t{{\n\t\t"path"\t\t"{root.as_posix()}"\n\t}}\n}}\n',
        encoding="utf-8",
    )

    config_dir = root / "config"
    config_dir.mkdir()
    (config_dir / "loginusers.vdf").write_text(loginusers_text, encoding="utf-8")

    user_config = root / "userdata" / "5" / "config"
    user_config.mkdir(parents=True)
    (user_config / "localconfig.vdf").write_text(localconfig_text, encoding="utf-8")
    (user_config / "shortcuts.vdf").write_bytes(
        encode_vdf(
            {
                "shortcuts": {
                    "0": {
                        "appid": -536285310,
                        "AppName": "Bar",
                        "Exe": "/bin/bar",
                        "StartDir": "/bin",
                        "icon": "/icons/bar.png",
                        "IsHidden": 1,
                        "tags": {"1": "Emulation", "0": "favorite"},
                    }
                }
            }
        )
    )
    return root
