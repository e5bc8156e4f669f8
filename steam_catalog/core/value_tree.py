"""In-memory tree shared by the text and binary KeyValues parsers.

Both parsers emit a ``MapNode`` whose children are either further
``MapNode`` objects or typed ``Scalar`` leaves. Trees are immutable once
built; callers navigate them with ``get``/``get_path`` and must check the
node kind instead of assuming a shape.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Union

__all__ = [
    "MapNode",
    "Scalar",
    "ScalarKind",
    "ValueNode",
    "from_plain",
]


_NAN = object()


class ScalarKind(Enum):
    """Leaf types known to the KeyValues formats."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    WSTRING = "wstring"
    POINTER = "pointer"
    COLOR = "color"


@dataclass(frozen=True)
class Scalar:
    """Typed leaf value.

    Args:
        kind: Wire type of the value.
        value: Decoded Python value (``str``, ``int`` or ``float``).
    """

    kind: ScalarKind
    value: str | int | float

    def _identity(self) -> tuple[ScalarKind, Any]:
        # A NaN scalar equals any other NaN scalar of the same kind.
        if isinstance(self.value, float) and math.isnan(self.value):
            return (self.kind, _NAN)
        return (self.kind, self.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scalar):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def as_text(self) -> str:
        """Return the value the way the Steam client writes it in text files."""
        return str(self.value)

    def as_map(self) -> MapNode:
        raise TypeError(f"Expected a map node, got {self.kind.value} scalar")

    def as_scalar(self) -> Scalar:
        return self


class MapNode:
    """Ordered, read-only mapping from string keys to ``ValueNode`` children.

    Instances are created by the parsers through ``from_pairs``. Keys are
    compared case-sensitively by ``get``; ``get_path`` can fold case for
    files where the client itself is inconsistent (``apps`` vs ``Apps``).
    """

    __slots__ = ("_children",)

    def __init__(self, children: Mapping[str, ValueNode] | None = None) -> None:
        self._children: Mapping[str, ValueNode] = MappingProxyType(dict(children or {}))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, ValueNode]]) -> MapNode:
        """Build a node from ``(key, value)`` pairs, last write wins.

        A key that repeats keeps the position of its first occurrence and the
        value of its last one.
        """
        children: dict[str, ValueNode] = {}
        for key, value in pairs:
            children[key] = value
        return cls(children)

    # -- navigation --

    def get(self, key: str) -> ValueNode | None:
        return self._children.get(key)

    def get_casefold(self, key: str) -> ValueNode | None:
        """Case-insensitive lookup; an exact match is preferred."""
        exact = self._children.get(key)
        if exact is not None:
            return exact
        folded = key.casefold()
        for name, value in self._children.items():
            if name.casefold() == folded:
                return value
        return None

    def get_path(self, *keys: str, casefold: bool = False) -> ValueNode | None:
        """Follow ``keys`` through nested maps.

        Returns:
            The node at the end of the path, or None if any segment is
            missing or is not a map.
        """
        node: ValueNode = self
        for key in keys:
            if not isinstance(node, MapNode):
                return None
            child = node.get_casefold(key) if casefold else node.get(key)
            if child is None:
                return None
            node = child
        return node

    def get_text(self, key: str, default: str | None = None, *, casefold: bool = False) -> str | None:
        """Return the scalar under ``key`` rendered as text.

        Missing keys and nested maps both yield ``default``.
        """
        node = self.get_casefold(key) if casefold else self.get(key)
        if isinstance(node, Scalar):
            return node.as_text()
        return default

    def keys(self):
        return self._children.keys()

    def values(self):
        return self._children.values()

    def items(self):
        return self._children.items()

    def as_map(self) -> MapNode:
        return self

    def as_scalar(self) -> Scalar:
        raise TypeError("Expected a scalar node, got a map")

    # -- conversion --

    def to_dict(self) -> dict[str, Any]:
        """Convert to plain nested dicts of Python values."""
        result: dict[str, Any] = {}
        stack: list[tuple[MapNode, dict[str, Any]]] = [(self, result)]
        while stack:
            node, target = stack.pop()
            for key, child in node.items():
                if isinstance(child, MapNode):
                    nested: dict[str, Any] = {}
                    target[key] = nested
                    stack.append((child, nested))
                else:
                    target[key] = child.value
        return result

    # -- container protocol --

    def __len__(self) -> int:
        return len(self._children)

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MapNode):
            return NotImplemented
        stack: list[tuple[MapNode, MapNode]] = [(self, other)]
        while stack:
            left, right = stack.pop()
            if list(left.keys()) != list(right.keys()):
                return False
            for key, lchild in left.items():
                rchild = right.get(key)
                if isinstance(lchild, MapNode) and isinstance(rchild, MapNode):
                    stack.append((lchild, rchild))
                elif isinstance(lchild, MapNode) or isinstance(rchild, MapNode):
                    return False
                elif lchild != rchild:
                    return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"MapNode({list(self._children)!r})"


ValueNode = Union[MapNode, Scalar]


def from_plain(obj: Mapping[str, Any]) -> MapNode:
    """Convert a plain nested mapping into a tree of ``STRING`` scalars.

    Used for the output of the ``vdf`` text decoder, where every leaf is a
    string. Non-string leaves are stringified.
    """
    # Children have to exist before the parent node can be frozen, so nodes
    # are built in post-order from an explicit work list.
    root_pairs: list[tuple[str, ValueNode]] = []
    stack: list[tuple[Iterator[tuple[Any, Any]], list[tuple[str, ValueNode]], str]] = [
        (iter(obj.items()), root_pairs, "")
    ]
    while stack:
        items, pairs, name = stack[-1]
        descended = False
        for key, value in items:
            if isinstance(value, Mapping):
                stack.append((iter(value.items()), [], str(key)))
                descended = True
                break
            pairs.append((str(key), Scalar(ScalarKind.STRING, str(value))))
        if descended:
            continue
        stack.pop()
        if stack:
            stack[-1][1].append((name, MapNode.from_pairs(pairs)))
    return MapNode.from_pairs(root_pairs)
