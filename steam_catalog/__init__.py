"""Read the Steam client's on-disk store into an application catalog."""

from __future__ import annotations

from steam_catalog.core.catalog_builder import build_catalog
from steam_catalog.core.catalog_record import CatalogRecord, FieldSource, RecordKind
from steam_catalog.core.steam_id import InvalidIdentifierError, UserIdentity, to_long_id
from steam_catalog.core.value_tree import MapNode, Scalar, ScalarKind
from steam_catalog.core.vdf_parser import TruncatedInputError, UnsupportedTagError, VDFDecodeError, parse_binary_vdf
from steam_catalog.utils.acf import parse_text_kv
from steam_catalog.version import __version__

__all__ = [
    "CatalogRecord",
    "FieldSource",
    "InvalidIdentifierError",
    "MapNode",
    "RecordKind",
    "Scalar",
    "ScalarKind",
    "TruncatedInputError",
    "UnsupportedTagError",
    "UserIdentity",
    "VDFDecodeError",
    "__version__",
    "build_catalog",
    "parse_binary_vdf",
    "parse_text_kv",
    "to_long_id",
]
