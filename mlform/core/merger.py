"""mlform – Leaf merge.

Overlays one locale's leaf values on the candidate tree. The candidate's
shape always wins: keys are never added or removed, only leaf values swapped.
"""

from __future__ import annotations

from mlform.core.tree import Leaf, Node, ValueTree, as_node


def merge(candidate: ValueTree, base: ValueTree | None, target: ValueTree | None) -> ValueTree:
    """Merge ``target`` leaves over ``base`` leaves, shaped like ``candidate``.

    For every leaf of the candidate the target value is used when it is set
    (an explicit zero counts as set), else the base value, else the
    candidate's own value. A sub-tree the base does not know about is passed
    through untouched.
    """
    if isinstance(candidate, Leaf):
        return candidate

    base_node = as_node(base)
    target_node = as_node(target)
    merged: dict = {}

    for key, value in candidate.items():
        if isinstance(value, Node):
            if isinstance(base_node.get(key), Node):
                merged[key] = merge(value, base_node[key], target_node.get(key))
            else:
                merged[key] = value
            continue

        override = target_node.get(key)
        fallback = base_node.get(key)
        if isinstance(override, Leaf) and not override.is_empty:
            merged[key] = override
        elif isinstance(fallback, Leaf):
            merged[key] = fallback
        else:
            merged[key] = value

    return Node(merged)
