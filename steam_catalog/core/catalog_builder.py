"""Merge parsed manifests, localconfig overrides and shortcuts into records.

Precedence, most specific first:

* ``LaunchOptions`` and ``LastPlayed`` come from localconfig.vdf when the
  user has an entry for the app id, otherwise from the manifest.
* Install dir, size, build id and state flags only ever come from the
  manifest.
* Shortcut fields (exe, start dir, shortcut path, hidden, tags) only ever
  appear on shortcut records. A shortcut and an installed app are always
  separate records.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from steam_catalog.core.catalog_record import CatalogRecord, FieldSource, RecordKind
from steam_catalog.core.value_tree import MapNode, Scalar
from steam_catalog.utils.paths import format_steam_cmd

__all__ = ["LOCAL_CONFIG_APPS_PATH", "build_catalog", "local_config_apps"]

logger = logging.getLogger("steamcatalog.catalog")

LOCAL_CONFIG_APPS_PATH = ("UserLocalConfigStore", "Software", "Valve", "Steam", "apps")

# record attribute -> manifest key
_MANIFEST_FIELDS: tuple[tuple[str, str], ...] = (
    ("universe", "Universe"),
    ("state_flags", "StateFlags"),
    ("install_dir", "installdir"),
    ("last_updated", "LastUpdated"),
    ("size_on_disk", "SizeOnDisk"),
    ("build_id", "buildid"),
    ("last_played", "LastPlayed"),
    ("launch_options", "LaunchOptions"),
)

# record attribute -> localconfig key; these win over the manifest
_OVERRIDE_FIELDS: tuple[tuple[str, str], ...] = (
    ("launch_options", "LaunchOptions"),
    ("last_played", "LastPlayed"),
)

_TRUTHY = frozenset({"1", "true"})

CommandFormatter = Callable[[str], str]
ImageFormatter = Callable[[str], str]


def local_config_apps(override_tree: MapNode | None) -> MapNode:
    """Return the per-app section of a parsed localconfig.vdf.

    Path segments are matched case-insensitively because the client has
    written both ``apps`` and ``Apps``.

    Returns:
        The apps map, or an empty map if the tree is missing or has no
        such section.
    """
    if override_tree is None:
        return MapNode()
    apps = override_tree.get_path(*LOCAL_CONFIG_APPS_PATH, casefold=True)
    if isinstance(apps, MapNode):
        return apps
    logger.debug("localconfig has no %s section", "/".join(LOCAL_CONFIG_APPS_PATH))
    return MapNode()


def build_catalog(
    manifest_trees: Iterable[MapNode],
    override_tree: MapNode | None = None,
    shortcuts_tree: MapNode | None = None,
    *,
    verbose: bool = False,
    command_formatter: CommandFormatter = format_steam_cmd,
    image_formatter: ImageFormatter | None = None,
) -> list[CatalogRecord]:
    """Build the ordered catalog.

    Args:
        manifest_trees: One parsed appmanifest per installed app, in
            directory enumeration order.
        override_tree: Parsed localconfig.vdf of the selected user.
        shortcuts_tree: Parsed shortcuts.vdf of the selected user.
        verbose: Log every record at INFO instead of DEBUG.
        command_formatter: Turns an app id into a launch URL.
        image_formatter: Turns an app id into an artwork path; records get
            an empty image path when omitted.

    Returns:
        Manifest records in input order followed by shortcut records in
        entry order.
    """
    trace = logger.info if verbose else logger.debug
    overrides = local_config_apps(override_tree)
    records: list[CatalogRecord] = []

    for index, manifest in enumerate(manifest_trees):
        record = _manifest_record(manifest, overrides, command_formatter, image_formatter)
        if record is None:
            logger.warning("Skipping manifest #%d: no appid field", index)
            continue
        trace("Manifest app %s parsed: %s", record.application_id, record.display_name)
        records.append(record)

    manifest_count = len(records)

    if shortcuts_tree is not None:
        for record in _shortcut_records(shortcuts_tree):
            trace("Shortcut %s parsed: %s", record.application_id, record.display_name)
            records.append(record)

    trace("Catalog built: %d manifest, %d shortcut records", manifest_count, len(records) - manifest_count)
    return records


def _manifest_record(
    manifest: MapNode,
    overrides: MapNode,
    command_formatter: CommandFormatter,
    image_formatter: ImageFormatter | None,
) -> CatalogRecord | None:
    # Nested parses keep the AppState wrapper; the flat parser does not.
    app_state = manifest.get("AppState")
    if isinstance(app_state, MapNode):
        manifest = app_state

    app_id = manifest.get_text("appid")
    if not app_id:
        return None

    values: dict[str, str] = {}
    provenance: dict[str, FieldSource] = {}
    for attr, key in _MANIFEST_FIELDS:
        value = manifest.get_text(key)
        if value is not None:
            values[attr] = value
            provenance[attr] = FieldSource.MANIFEST

    override = overrides.get(app_id)
    if isinstance(override, MapNode):
        for attr, key in _OVERRIDE_FIELDS:
            value = override.get_text(key, casefold=True)
            if value is not None:
                values[attr] = value
                provenance[attr] = FieldSource.LOCAL_CONFIG

    return CatalogRecord(
        application_id=app_id,
        display_name=manifest.get_text("name") or f"Steam Game {app_id}",
        launch_command=command_formatter(app_id),
        image_path=image_formatter(app_id) if image_formatter else "",
        kind=RecordKind.MANIFEST,
        provenance=provenance,
        **values,
    )


def _shortcut_records(shortcuts_tree: MapNode) -> Iterable[CatalogRecord]:
    shortcuts = shortcuts_tree.get_casefold("shortcuts")
    if not isinstance(shortcuts, MapNode):
        logger.warning("No shortcuts section in shortcuts.vdf data")
        return

    for key, entry in shortcuts.items():
        if not isinstance(entry, MapNode):
            logger.warning("Skipping shortcut %s: not an object", key)
            continue
        yield _shortcut_record(key, entry)


def _shortcut_record(key: str, entry: MapNode) -> CatalogRecord:
    exe = entry.get_text("Exe", casefold=True)
    values: dict[str, object] = {
        "exe": exe,
        "start_dir": entry.get_text("StartDir", casefold=True),
        "shortcut_path": entry.get_text("ShortcutPath", casefold=True),
        "launch_options": entry.get_text("LaunchOptions", casefold=True),
        "hidden": _is_truthy(entry, "hidden") or _is_truthy(entry, "IsHidden"),
    }
    tags = entry.get_casefold("tags")
    if tags is not None:
        values["tags"] = _normalize_tags(tags)

    provenance = {attr: FieldSource.SHORTCUT for attr, value in values.items() if value is not None}

    return CatalogRecord(
        application_id=key,
        display_name=entry.get_text("AppName", casefold=True) or f"Non-Steam Game {key}",
        launch_command=f"file://{exe}" if exe else "steam://run/unknown",
        image_path=entry.get_text("icon", "", casefold=True),
        kind=RecordKind.SHORTCUT,
        provenance=provenance,
        **values,
    )


def _is_truthy(entry: MapNode, key: str) -> bool:
    node = entry.get_casefold(key)
    return isinstance(node, Scalar) and node.as_text() in _TRUTHY


def _normalize_tags(tags: MapNode | Scalar) -> tuple[str, ...]:
    """Flatten the ordinal-keyed tags map into a tuple.

    Numeric keys sort numerically; any other keys follow in file order.
    """
    if isinstance(tags, Scalar):
        return (tags.as_text(),)

    def ordinal(item: tuple[str, object]) -> tuple[int, int]:
        key = item[0]
        return (0, int(key)) if key.isdecimal() else (1, 0)

    return tuple(value.as_text() for _, value in sorted(tags.items(), key=ordinal) if isinstance(value, Scalar))
