# steam_catalog/utils/acf.py

"""
Parsers for Steam's text KeyValues format (ACF / text VDF).

``parse_text_kv`` is the line-oriented reader used for appmanifest_*.acf
files. It does not track block nesting: every ``"key" "value"`` line lands
in one flat mapping. Manifests are a single ``AppState`` block whose keys
do not repeat across nested sections, so the flat view is all the catalog
needs.

``parse_text_kv_nested`` honours ``{ }`` blocks and is used for files that
nest by account or application id (localconfig.vdf, loginusers.vdf,
libraryfolders.vdf). It delegates tokenizing to the ``vdf`` package.
"""

from __future__ import annotations

import re
from typing import TextIO

import vdf

from steam_catalog.core.value_tree import MapNode, Scalar, ScalarKind, from_plain

__all__ = ("TextKVSyntaxError", "load", "parse_text_kv", "parse_text_kv_nested")

_PAIR_RE = re.compile(r'"([^"]+)"\s+"([^"]+)"')


class TextKVSyntaxError(ValueError):
    """Raised when a nested KeyValues document cannot be tokenized."""


def parse_text_kv(data: str) -> MapNode:
    """
    Parses an ACF string into a flat map of string scalars.

    Lines without two quoted strings (braces, section names, lines with
    unbalanced quotes) are skipped. A key seen twice keeps its last value.

    Args:
        data (str): The ACF-formatted text.

    Returns:
        MapNode: Flat map of every key/value line; empty if nothing matched.

    Raises:
        TypeError: If data is not a string.
    """
    if not isinstance(data, str):
        raise TypeError(f"Can only load str, got {type(data).__name__}")

    pairs = []
    for line in data.split("\n"):
        match = _PAIR_RE.search(line)
        if match:
            pairs.append((match.group(1), Scalar(ScalarKind.STRING, match.group(2))))
    return MapNode.from_pairs(pairs)


def load(fp: TextIO) -> MapNode:
    """
    Parses an ACF file into a flat map.

    Args:
        fp: A file-like object opened in text mode.
    """
    return parse_text_kv(fp.read())


def parse_text_kv_nested(data: str) -> MapNode:
    """
    Parses a nested KeyValues document, keeping block structure.

    Args:
        data (str): Text VDF content.

    Returns:
        MapNode: Nested tree; leaves are string scalars.

    Raises:
        TypeError: If data is not a string.
        TextKVSyntaxError: If the document is structurally malformed.
    """
    if not isinstance(data, str):
        raise TypeError(f"Can only load str, got {type(data).__name__}")

    try:
        parsed = vdf.loads(data)
    except SyntaxError as e:
        raise TextKVSyntaxError(str(e)) from e
    return from_plain(parsed)
