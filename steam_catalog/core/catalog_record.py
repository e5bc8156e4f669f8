# steam_catalog/core/catalog_record.py

"""CatalogRecord dataclass: one merged application entry.

Manifest-derived and shortcut-derived records share this schema but are
never merged into each other. Every optional field that was populated
carries a provenance entry naming the source that last set it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

__all__ = ["CatalogRecord", "FieldSource", "RecordKind"]


class RecordKind(Enum):
    """Which kind of source produced a record."""

    MANIFEST = "manifest"
    SHORTCUT = "shortcut"


class FieldSource(Enum):
    """File kind that supplied an optional field value."""

    MANIFEST = "manifest"
    LOCAL_CONFIG = "localconfig"
    SHORTCUT = "shortcut"


@dataclass(frozen=True)
class CatalogRecord:
    """Represents a single Steam or non-Steam application in the catalog.

    Args:
        application_id: Canonical key (manifest appid or shortcut entry key).
        display_name: Name shown to the user.
        launch_command: URL or file URI that starts the application.
        image_path: Library artwork path, or the shortcut icon.
        kind: Manifest or shortcut record.
        provenance: Field name to the source that last set it.
    """

    application_id: str
    display_name: str
    launch_command: str
    image_path: str
    kind: RecordKind = RecordKind.MANIFEST

    # appmanifest fields
    universe: str | None = None
    state_flags: str | None = None
    install_dir: str | None = None
    last_updated: str | None = None
    size_on_disk: str | None = None
    build_id: str | None = None
    last_played: str | None = None

    # manifest, localconfig or shortcut
    launch_options: str | None = None

    # shortcuts.vdf fields
    exe: str | None = None
    start_dir: str | None = None
    shortcut_path: str | None = None
    hidden: bool | None = None
    tags: tuple[str, ...] = ()

    provenance: Mapping[str, FieldSource] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "provenance", MappingProxyType(dict(self.provenance)))

    @property
    def is_shortcut(self) -> bool:
        return self.kind is RecordKind.SHORTCUT

    def source_of(self, field_name: str) -> FieldSource | None:
        """Return which source set ``field_name``, or None if it is unset."""
        return self.provenance.get(field_name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives."""
        return {
            "app_id": self.application_id,
            "name": self.display_name,
            "cmd": self.launch_command,
            "image_path": self.image_path,
            "kind": self.kind.value,
            "universe": self.universe,
            "state_flags": self.state_flags,
            "install_dir": self.install_dir,
            "last_updated": self.last_updated,
            "size_on_disk": self.size_on_disk,
            "build_id": self.build_id,
            "last_played": self.last_played,
            "launch_options": self.launch_options,
            "exe": self.exe,
            "start_dir": self.start_dir,
            "shortcut_path": self.shortcut_path,
            "hidden": self.hidden,
            "tags": list(self.tags),
            "provenance": {name: source.value for name, source in self.provenance.items()},
        }
