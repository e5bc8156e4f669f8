"""Binary VDF parser for Steam shortcuts.vdf and cached metadata blobs.

Type tags follow ValvePython/vdf v3.4 (MIT License).
Original: https://github.com/ValvePython/vdf
Copyright (c) 2015 Rossen Georgiev <rossen@rgp.io>

Decoding only; the parser keeps an explicit cursor and an explicit stack
of open maps, so deeply nested input cannot exhaust the interpreter stack.
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO

from steam_catalog.core.value_tree import MapNode, Scalar, ScalarKind, ValueNode

__all__ = [
    "TruncatedInputError",
    "UnsupportedTagError",
    "VDFDecodeError",
    "load_binary_vdf",
    "parse_binary_vdf",
]

logger = logging.getLogger("steamcatalog.vdf")

# -- Type tag constants --

BIN_NONE = b"\x00"
BIN_STRING = b"\x01"
BIN_INT32 = b"\x02"
BIN_FLOAT32 = b"\x03"
BIN_POINTER = b"\x04"
BIN_WIDESTRING = b"\x05"
BIN_COLOR = b"\x06"
BIN_UINT64 = b"\x07"
BIN_END = b"\x08"
BIN_INT64 = b"\x0a"
BIN_END_ALT = b"\x0b"

_FIXED_WIDTH: dict[bytes, tuple[struct.Struct, ScalarKind]] = {
    BIN_INT32: (struct.Struct("<i"), ScalarKind.INT32),
    BIN_FLOAT32: (struct.Struct("<f"), ScalarKind.FLOAT32),
    BIN_POINTER: (struct.Struct("<i"), ScalarKind.POINTER),
    BIN_COLOR: (struct.Struct("<i"), ScalarKind.COLOR),
    BIN_UINT64: (struct.Struct("<Q"), ScalarKind.UINT64),
    BIN_INT64: (struct.Struct("<q"), ScalarKind.INT64),
}

_VALUE_TAGS = frozenset(_FIXED_WIDTH) | {BIN_NONE, BIN_STRING, BIN_WIDESTRING}
# Tags written to shortcuts.vdf by the Steam client
_SHORTCUT_TAGS = frozenset({BIN_NONE, BIN_STRING, BIN_INT32, BIN_UINT64})


class VDFDecodeError(ValueError):
    """Base class for binary VDF decode failures."""


class UnsupportedTagError(VDFDecodeError):
    """Raised when an entry starts with a type tag the format does not define."""

    def __init__(self, tag: int, offset: int) -> None:
        self.tag = tag
        self.offset = offset
        super().__init__(f"Unknown binary VDF type tag 0x{tag:02x} at offset {offset}")


class TruncatedInputError(VDFDecodeError):
    """Raised when the buffer ends before a required field is complete."""

    def __init__(self, offset: int, expected: str) -> None:
        self.offset = offset
        self.expected = expected
        super().__init__(f"Binary VDF truncated at offset {offset}: expected {expected}")


class _BinaryVDFParser:
    """Cursor-based binary VDF decoder over an in-memory buffer."""

    def __init__(self, data: bytes, *, alt_end: bool = False, strict: bool = False) -> None:
        """Initializes the parser.

        Args:
            data: Complete binary VDF buffer.
            alt_end: Whether to accept BIN_END_ALT as end marker.
            strict: Reject the float, pointer, wide string, color and int64
                tags, which shortcuts.vdf never contains.
        """
        self._data = bytes(data)
        self._pos = 0
        self._end_tags = {BIN_END, BIN_END_ALT} if alt_end else {BIN_END}
        self._value_tags = _SHORTCUT_TAGS if strict else _VALUE_TAGS

    def parse(self) -> MapNode:
        """Decode the root entry sequence.

        Returns:
            The root map.

        Raises:
            UnsupportedTagError: If an entry carries an unknown type tag.
            TruncatedInputError: If the buffer ends inside an entry or before
                the root end marker.
        """
        # Each frame is (key of the open map, pairs collected so far).
        stack: list[tuple[str, list[tuple[str, ValueNode]]]] = [("", [])]

        while True:
            tag_offset = self._pos
            tag = self._take(1, "type tag or end marker")

            if tag in self._end_tags:
                key, pairs = stack.pop()
                node = MapNode.from_pairs(pairs)
                if not stack:
                    if self._pos < len(self._data):
                        logger.debug("Ignoring %d trailing bytes after root map", len(self._data) - self._pos)
                    return node
                stack[-1][1].append((key, node))
                continue

            if tag not in self._value_tags:
                raise UnsupportedTagError(tag[0], tag_offset)

            key = self._read_string()

            if tag == BIN_NONE:
                stack.append((key, []))
            elif tag == BIN_STRING:
                stack[-1][1].append((key, Scalar(ScalarKind.STRING, self._read_string())))
            elif tag == BIN_WIDESTRING:
                stack[-1][1].append((key, Scalar(ScalarKind.WSTRING, self._read_widestring())))
            else:
                fmt, kind = _FIXED_WIDTH[tag]
                raw = self._take(fmt.size, f"{fmt.size}-byte {kind.value} value")
                stack[-1][1].append((key, Scalar(kind, fmt.unpack(raw)[0])))

    def _take(self, size: int, expected: str) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise TruncatedInputError(self._pos, expected)
        chunk = self._data[self._pos : end]
        self._pos = end
        return chunk

    def _read_string(self) -> str:
        """Read a null-terminated UTF-8 string and consume the terminator."""
        end = self._data.find(b"\x00", self._pos)
        if end == -1:
            raise TruncatedInputError(len(self._data), "string terminator")
        raw = self._data[self._pos : end]
        self._pos = end + 1
        return raw.decode("utf-8", errors="replace")

    def _read_widestring(self) -> str:
        """Read a null-terminated UTF-16LE string."""
        buf = bytearray()
        while True:
            pair = self._take(2, "wide string terminator")
            if pair == b"\x00\x00":
                break
            buf.extend(pair)
        return buf.decode("utf-16-le", errors="replace")


def parse_binary_vdf(data: bytes, *, alt_end: bool = False, strict: bool = False) -> MapNode:
    """Parse binary VDF from bytes.

    Args:
        data: Binary VDF data, e.g. the contents of shortcuts.vdf.
        alt_end: Accept 0x0B as an end marker as well as 0x08.
        strict: Accept only the map, string, int32 and uint64 tags.

    Returns:
        Root map of the decoded tree.

    Raises:
        UnsupportedTagError: Unknown type tag.
        TruncatedInputError: Input ended early (including empty input).
    """
    return _BinaryVDFParser(data, alt_end=alt_end, strict=strict).parse()


def load_binary_vdf(fp: BinaryIO, *, alt_end: bool = False, strict: bool = False) -> MapNode:
    """Parse binary VDF from a file-like object opened in binary mode."""
    return parse_binary_vdf(fp.read(), alt_end=alt_end, strict=strict)
