"""mlform – Value trees.

A field's nested data is either a ``Leaf`` holding one scalar or a ``Node``
holding an ordered mapping of structural index / field name to sub-trees.

Posted form data, stored JSON and locker entries are all converted with
``to_tree`` so that the merge code only ever deals with these two types.
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Any, Iterator, Union

Key = Union[int, str]


@dataclass(frozen=True)
class Leaf:
    """A scalar value at the bottom of a tree."""

    value: Any = None

    @property
    def is_empty(self) -> bool:
        """Falsy values are empty, except numeric zero which counts as a real value."""
        if isinstance(self.value, numbers.Number) and not isinstance(self.value, bool):
            return False
        return not self.value

    def to_data(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Node:
    """Ordered mapping of keys to sub-trees."""

    children: dict[Key, "ValueTree"] = field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        return key in self.children

    def __getitem__(self, key: Key) -> "ValueTree":
        return self.children[key]

    def __iter__(self) -> Iterator[Key]:
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    def get(self, key: Key, default: "ValueTree | None" = None) -> "ValueTree | None":
        return self.children.get(key, default)

    def keys(self) -> list[Key]:
        return list(self.children)

    def items(self) -> list[tuple[Key, "ValueTree"]]:
        return list(self.children.items())

    def values(self) -> list["ValueTree"]:
        return list(self.children.values())

    @property
    def is_sequence(self) -> bool:
        """True when the keys are exactly 0..n-1 in order."""
        return list(self.children) == list(range(len(self.children)))

    def reindexed(self) -> "Node":
        """Drop the existing keys and number the children 0..n-1, keeping their order."""
        return Node(dict(enumerate(self.children.values())))

    def to_data(self) -> Any:
        if self.is_sequence:
            return [child.to_data() for child in self.children.values()]
        return {key: child.to_data() for key, child in self.children.items()}

    @classmethod
    def from_items(cls, items: list["ValueTree"]) -> "Node":
        return cls(dict(enumerate(items)))


ValueTree = Union[Leaf, Node]


def _normalize_key(key: Any) -> Key:
    # Form posts carry indices as strings, JSON lists as positions.
    if isinstance(key, str) and key.isdigit():
        return int(key)
    if isinstance(key, int):
        return key
    return str(key)


def to_tree(data: Any) -> ValueTree:
    """Build a tree from plain nested dict / list data."""
    if isinstance(data, (Leaf, Node)):
        return data
    if isinstance(data, dict):
        return Node({_normalize_key(k): to_tree(v) for k, v in data.items()})
    if isinstance(data, (list, tuple)):
        return Node({i: to_tree(v) for i, v in enumerate(data)})
    return Leaf(data)


def as_node(tree: ValueTree | None) -> Node:
    """Return ``tree`` if it is a node, an empty node otherwise."""
    if isinstance(tree, Node):
        return tree
    return Node()


def from_data(data: Any) -> Node:
    """Convert plain data to a node; scalars and ``None`` become an empty node."""
    return as_node(to_tree(data)) if data is not None else Node()
