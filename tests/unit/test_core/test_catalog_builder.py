"""Tests for build_catalog: precedence, shortcut normalization and ordering."""

from __future__ import annotations

import logging

import pytest

from steam_catalog.core.catalog_builder import build_catalog, local_config_apps
from steam_catalog.core.catalog_record import FieldSource, RecordKind
from steam_catalog.core.value_tree import MapNode, from_plain
from steam_catalog.core.vdf_parser import parse_binary_vdf
from steam_catalog.utils.acf import parse_text_kv, parse_text_kv_nested


def _localconfig(apps: dict) -> dict:
    return {"UserLocalConfigStore": {"Software": {"Valve": {"Steam": {"apps": apps}}}}}


def _shortcuts(encode_vdf, entries: dict) -> MapNode:
    return parse_binary_vdf(encode_vdf({"shortcuts": entries}))


# ---------------------------------------------------------------------------
# Manifest records
# ---------------------------------------------------------------------------


class TestManifestRecords:
    """Records built from appmanifest trees."""

    def test_fields_from_manifest(self, manifest_text: str) -> None:
        (record,) = build_catalog([parse_text_kv(manifest_text)])
        assert record.application_id == "440"
        assert record.display_name == "Team Fortress 2"
        assert record.kind is RecordKind.MANIFEST
        assert record.universe == "1"
        assert record.state_flags == "4"
        assert record.install_dir == "Team Fortress 2"
        assert record.last_updated == "1700000000"
        assert record.size_on_disk == "27381234567"
        assert record.build_id == "12345678"
        assert record.last_played == "100"
        assert record.source_of("install_dir") is FieldSource.MANIFEST

    def test_manifest_never_has_shortcut_fields(self, manifest_text: str) -> None:
        (record,) = build_catalog([parse_text_kv(manifest_text)])
        assert record.exe is None
        assert record.start_dir is None
        assert record.shortcut_path is None
        assert record.hidden is None
        assert record.tags == ()
        assert record.source_of("exe") is None

    def test_default_command_and_image(self) -> None:
        (record,) = build_catalog([from_plain({"appid": "10"})])
        assert record.display_name == "Steam Game 10"
        assert record.launch_command.startswith("steam://")
        assert record.launch_command.endswith("/10")
        assert record.image_path == ""

    def test_custom_formatters(self) -> None:
        (record,) = build_catalog(
            [from_plain({"appid": "10"})],
            command_formatter=lambda app_id: f"run:{app_id}",
            image_formatter=lambda app_id: f"/art/{app_id}.jpg",
        )
        assert record.launch_command == "run:10"
        assert record.image_path == "/art/10.jpg"

    def test_nested_manifest_with_app_state(self, manifest_text: str) -> None:
        """Trees from the nested parser are unwrapped from AppState."""
        (record,) = build_catalog([parse_text_kv_nested(manifest_text)])
        assert record.application_id == "440"
        assert record.build_id == "12345678"

    def test_missing_appid_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="steamcatalog.catalog"):
            records = build_catalog([from_plain({"name": "NoId"}), from_plain({"appid": "20", "name": "Ok"})])
        assert [r.application_id for r in records] == ["20"]
        assert "no appid" in caplog.text

    def test_no_inputs(self) -> None:
        assert build_catalog([]) == []


# ---------------------------------------------------------------------------
# localconfig precedence
# ---------------------------------------------------------------------------


class TestLocalConfigOverride:
    """LaunchOptions and LastPlayed prefer localconfig.vdf."""

    def test_last_played_override(self) -> None:
        manifest = from_plain({"appid": "10", "LastPlayed": "100"})
        override = from_plain(_localconfig({"10": {"LastPlayed": "200"}}))
        (record,) = build_catalog([manifest], override)
        assert record.last_played == "200"
        assert record.source_of("last_played") is FieldSource.LOCAL_CONFIG

    def test_launch_options_override(self) -> None:
        manifest = from_plain({"appid": "10", "LaunchOptions": "-old"})
        override = from_plain(_localconfig({"10": {"LaunchOptions": "-novid"}}))
        (record,) = build_catalog([manifest], override)
        assert record.launch_options == "-novid"

    def test_falls_back_to_manifest(self) -> None:
        manifest = from_plain({"appid": "10", "LastPlayed": "100"})
        override = from_plain(_localconfig({"10": {"LaunchOptions": "-x"}}))
        (record,) = build_catalog([manifest], override)
        assert record.last_played == "100"
        assert record.source_of("last_played") is FieldSource.MANIFEST
        assert record.source_of("launch_options") is FieldSource.LOCAL_CONFIG

    def test_other_app_untouched(self) -> None:
        manifest = from_plain({"appid": "10", "LastPlayed": "100"})
        override = from_plain(_localconfig({"20": {"LastPlayed": "200"}}))
        (record,) = build_catalog([manifest], override)
        assert record.last_played == "100"

    def test_only_two_fields_overridable(self) -> None:
        manifest = from_plain({"appid": "10", "installdir": "foo"})
        override = from_plain(_localconfig({"10": {"installdir": "bar", "buildid": "9"}}))
        (record,) = build_catalog([manifest], override)
        assert record.install_dir == "foo"
        assert record.build_id is None

    def test_capitalized_apps_section(self, localconfig_text: str) -> None:
        """Both 'apps' and 'Apps' spellings are found."""
        tree = parse_text_kv_nested(localconfig_text.replace('"apps"', '"Apps"'))
        assert "440" in local_config_apps(tree)

    def test_parsed_localconfig(self, manifest_text: str, localconfig_text: str) -> None:
        (record,) = build_catalog([parse_text_kv(manifest_text)], parse_text_kv_nested(localconfig_text))
        assert record.last_played == "200"
        assert record.launch_options == "-novid"

    def test_override_without_apps_section(self) -> None:
        assert len(local_config_apps(from_plain({"UserLocalConfigStore": {}}))) == 0
        assert len(local_config_apps(None)) == 0


# ---------------------------------------------------------------------------
# Shortcut records
# ---------------------------------------------------------------------------


class TestShortcutRecords:
    """Records built from shortcuts.vdf."""

    def test_basic_fields(self, encode_vdf) -> None:
        tree = _shortcuts(
            encode_vdf,
            {
                "3": {
                    "appid": -1,
                    "AppName": "Bar",
                    "Exe": "/bin/bar",
                    "StartDir": "/bin",
                    "ShortcutPath": "/usr/share/applications/bar.desktop",
                    "LaunchOptions": "--fullscreen",
                    "icon": "/icons/bar.png",
                }
            },
        )
        (record,) = build_catalog([], shortcuts_tree=tree)
        assert record.application_id == "3"
        assert record.kind is RecordKind.SHORTCUT
        assert record.display_name == "Bar"
        assert record.launch_command == "file:///bin/bar"
        assert record.image_path == "/icons/bar.png"
        assert record.exe == "/bin/bar"
        assert record.start_dir == "/bin"
        assert record.shortcut_path == "/usr/share/applications/bar.desktop"
        assert record.launch_options == "--fullscreen"
        assert record.hidden is False
        assert record.source_of("exe") is FieldSource.SHORTCUT

    def test_lowercase_field_names(self, encode_vdf) -> None:
        """The client writes appname/exe in lower case."""
        tree = _shortcuts(encode_vdf, {"0": {"appname": "Baz", "exe": '"/opt/baz"'}})
        (record,) = build_catalog([], shortcuts_tree=tree)
        assert record.display_name == "Baz"
        assert record.exe == '"/opt/baz"'

    def test_defaults(self, encode_vdf) -> None:
        tree = _shortcuts(encode_vdf, {"7": {"appid": 1}})
        (record,) = build_catalog([], shortcuts_tree=tree)
        assert record.display_name == "Non-Steam Game 7"
        assert record.launch_command == "steam://run/unknown"
        assert record.image_path == ""
        assert record.tags == ()
        assert record.source_of("tags") is None

    def test_shortcuts_never_get_manifest_fields(self, encode_vdf) -> None:
        tree = _shortcuts(encode_vdf, {"0": {"AppName": "X", "installdir": "x", "LastPlayed": "5"}})
        (record,) = build_catalog([], shortcuts_tree=tree)
        assert record.install_dir is None
        assert record.last_played is None

    def test_shortcuts_ignore_localconfig(self, encode_vdf) -> None:
        tree = _shortcuts(encode_vdf, {"0": {"AppName": "X", "LaunchOptions": "-a"}})
        override = from_plain(_localconfig({"0": {"LaunchOptions": "-b"}}))
        (record,) = build_catalog([], override, tree)
        assert record.launch_options == "-a"

    @pytest.mark.parametrize(
        ("fields", "expected"),
        [
            ({"IsHidden": 1}, True),
            ({"IsHidden": 0}, False),
            ({"IsHidden": "true"}, True),
            ({"hidden": "1"}, True),
            ({"hidden": "true"}, True),
            ({"hidden": "yes"}, False),
            ({"hidden": "0", "IsHidden": 1}, True),
            ({}, False),
        ],
    )
    def test_hidden_flag(self, encode_vdf, fields: dict, expected: bool) -> None:
        tree = _shortcuts(encode_vdf, {"0": {"AppName": "X", **fields}})
        (record,) = build_catalog([], shortcuts_tree=tree)
        assert record.hidden is expected

    def test_tags_ordered_by_ordinal(self, encode_vdf) -> None:
        tags = {"10": "ten", "2": "two", "0": "zero", "1": "one"}
        tree = _shortcuts(encode_vdf, {"0": {"AppName": "X", "tags": tags}})
        (record,) = build_catalog([], shortcuts_tree=tree)
        assert record.tags == ("zero", "one", "two", "ten")
        assert record.source_of("tags") is FieldSource.SHORTCUT

    def test_missing_shortcuts_section(self, encode_vdf, caplog: pytest.LogCaptureFixture) -> None:
        tree = parse_binary_vdf(encode_vdf({"other": {}}))
        with caplog.at_level(logging.WARNING, logger="steamcatalog.catalog"):
            assert build_catalog([], shortcuts_tree=tree) == []
        assert "No shortcuts" in caplog.text

    def test_non_map_entry_skipped(self, encode_vdf) -> None:
        tree = parse_binary_vdf(encode_vdf({"shortcuts": {"0": "junk", "1": {"AppName": "Ok"}}}))
        records = build_catalog([], shortcuts_tree=tree)
        assert [r.display_name for r in records] == ["Ok"]


# ---------------------------------------------------------------------------
# Ordering and end-to-end
# ---------------------------------------------------------------------------


class TestCatalogOrdering:
    def test_manifests_then_shortcuts_without_dedup(self, encode_vdf) -> None:
        manifests = [from_plain({"appid": "20", "name": "B"}), from_plain({"appid": "10", "name": "A"})]
        tree = _shortcuts(encode_vdf, {"0": {"AppName": "A"}, "1": {"AppName": "C"}})
        records = build_catalog(manifests, shortcuts_tree=tree)
        assert [(r.kind, r.display_name) for r in records] == [
            (RecordKind.MANIFEST, "B"),
            (RecordKind.MANIFEST, "A"),
            (RecordKind.SHORTCUT, "A"),
            (RecordKind.SHORTCUT, "C"),
        ]

    def test_end_to_end_two_manifests_one_shortcut(self, encode_vdf) -> None:
        """A manifest without appid contributes nothing and does not fail."""
        manifest_10 = parse_text_kv('"AppState"\n{\n\t"appid"\t\t"10"\n\t"name"\t\t"Foo"\n}\n')
        manifest_20 = parse_text_kv('"AppState"\n{\n\t"name"\t\t"NoId"\n}\n')
        shortcuts = parse_binary_vdf(encode_vdf({"shortcuts": {"0": {"AppName": "Bar", "Exe": "/bin/bar"}}}))

        records = build_catalog([manifest_10, manifest_20], shortcuts_tree=shortcuts)

        assert len(records) == 2
        assert records[0].application_id == "10"
        assert records[0].display_name == "Foo"
        assert records[1].kind is RecordKind.SHORTCUT
        assert records[1].display_name == "Bar"
        assert records[1].exe == "/bin/bar"

    def test_verbose_logs_at_info(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="steamcatalog.catalog"):
            build_catalog([from_plain({"appid": "10", "name": "Foo"})], verbose=True)
        assert "Foo" in caplog.text

    def test_quiet_by_default(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="steamcatalog.catalog"):
            build_catalog([from_plain({"appid": "10", "name": "Foo"})])
        assert caplog.text == ""

    def test_records_are_immutable(self) -> None:
        (record,) = build_catalog([from_plain({"appid": "10"})])
        with pytest.raises(AttributeError):
            record.display_name = "changed"  # type: ignore[misc]
        with pytest.raises(TypeError):
            record.provenance["exe"] = FieldSource.SHORTCUT  # type: ignore[index]
