"""mlform – Nested repeater widget.

Holds the live item collection of a repeatable field group and renders it.
Each item wraps one sub-tree of the field value; nested groups stay inside
that sub-tree.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import structlog

from mlform.core.submission import name_to_path
from mlform.core.tree import Leaf, Node, ValueTree, as_node, to_tree
from mlform.widgets.templating import WidgetTemplateEngine, get_engine

logger = structlog.get_logger()

_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]+")


def _is_empty(tree: ValueTree | None) -> bool:
    if tree is None:
        return True
    if isinstance(tree, Leaf):
        return tree.is_empty
    return len(tree) == 0


def flatten(tree: ValueTree, prefix: str) -> list[tuple[str, Any]]:
    """List ``(html name, value)`` pairs for every leaf below ``prefix``."""
    if isinstance(tree, Leaf):
        return [(prefix, tree.value)]
    pairs: list[tuple[str, Any]] = []
    for key, child in tree.items():
        pairs.extend(flatten(child, f"{prefix}[{key}]"))
    return pairs


@dataclass
class RepeaterItem:
    index: int
    value: ValueTree

    def inputs(self, field_prefix: str) -> list[tuple[str, Any]]:
        return flatten(self.value, f"{field_prefix}[{self.index}]")


class NestedRepeater:
    """Repeatable group of nested form items."""

    alias = "nestedform"
    template = "nestedform.html.j2"

    def __init__(
        self,
        field_name: str,
        model_name: str,
        value: Any = None,
        *,
        engine: WidgetTemplateEngine | None = None,
    ) -> None:
        self.field_name = field_name
        self.model_name = model_name
        self.engine = engine or get_engine()
        self.items: list[RepeaterItem] = []
        self.init_items_from(to_tree(value) if value is not None else Node())

    # ── Identity ───────────────────────────────────────────────────────────────

    @property
    def form_field_name(self) -> str:
        """HTML name of the field, e.g. ``Post[blocks]``."""
        path = name_to_path(self.field_name)
        return self.model_name + "".join(f"[{part}]" for part in path)

    def get_id(self, suffix: str | None = None) -> str:
        base = _ID_UNSAFE.sub("-", f"{self.alias}-{self.model_name}-{self.field_name}").strip("-")
        return f"{base}-{suffix}" if suffix else base

    # ── Items ──────────────────────────────────────────────────────────────────

    def init_items_from(self, tree: ValueTree) -> None:
        """Replace the whole item collection with the items of ``tree``.

        Empty items are dropped; the remaining ones are numbered 0..n-1.
        """
        children = [child for child in as_node(tree).values() if not _is_empty(child)]
        self.items = [RepeaterItem(index, child) for index, child in enumerate(children)]
        logger.debug("repeater.items_initialized", field=self.field_name, count=len(self.items))

    def current_tree(self) -> Node:
        return Node.from_items([item.value for item in self.items])

    def add_item(self, data: Any = None) -> RepeaterItem:
        item = RepeaterItem(len(self.items), to_tree(data) if data is not None else Node())
        self.items.append(item)
        return item

    def remove_item(self, index: int) -> None:
        if not 0 <= index < len(self.items):
            raise IndexError(f"No item at index {index}")
        del self.items[index]
        self._renumber()

    def move_item(self, source: int, destination: int) -> None:
        if not 0 <= source < len(self.items):
            raise IndexError(f"No item at index {source}")
        item = self.items.pop(source)
        self.items.insert(max(0, min(destination, len(self.items))), item)
        self._renumber()

    def _renumber(self) -> None:
        for index, item in enumerate(self.items):
            item.index = index

    # ── Rendering ──────────────────────────────────────────────────────────────

    def prepare_vars(self) -> dict[str, Any]:
        prefix = self.form_field_name
        return {
            "widget_id": self.get_id(),
            "items_id": self.get_id("items"),
            "field_name": self.field_name,
            "form_field_name": prefix,
            "items": [
                {"index": item.index, "inputs": item.inputs(prefix)}
                for item in self.items
            ],
        }

    def render(self) -> str:
        return self.engine.render(NestedRepeater.template, **NestedRepeater.prepare_vars(self))
