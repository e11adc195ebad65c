"""mlform – Submission parsing.

Turns the posted form namespace into an explicit ``Submission``:

    <model>[<field>]...                                  live tree as rendered
    MLTranslate[<locale>][mlnf][<field>]...              per-locale leaf overrides
    MLTranslateNestedFormLocale[<field>]                 locale active at submit

The namespace names come from settings. Nothing in here mutates the post.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from typing import Any

import structlog

from config.settings import Settings, get_settings
from mlform.core.errors import LockerIntegrityError
from mlform.core.tree import Node, ValueTree, from_data, to_tree

logger = structlog.get_logger()

_NAME_PART = re.compile(r"\[([^\]]*)\]")


def name_to_path(name: str) -> list[str]:
    """Split an HTML field name into its path parts.

    ``"Model[items][0][title]"`` -> ``["Model", "items", "0", "title"]``.
    Empty brackets (``items[]``) are dropped.
    """
    name = (name or "").strip()
    if not name:
        return []
    head, _, rest = name.partition("[")
    parts = [head] if head else []
    if rest:
        parts.extend(part for part in _NAME_PART.findall("[" + rest) if part != "")
    return parts


def dotted(path: list[str]) -> str:
    return ".".join(path)


def get_path(data: Any, path: list[str], default: Any = None) -> Any:
    """Read a nested value; any missing step yields ``default``."""
    current = data
    for part in path:
        if isinstance(current, dict) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return default
    return current


def expand_brackets(flat: dict[str, Any]) -> dict[str, Any]:
    """Expand flat ``a[b][c]=v`` form keys into nested dictionaries.

    Keys without brackets are copied as they are, nested dictionaries are
    merged into the result.
    """
    result: dict[str, Any] = {}
    for name, value in flat.items():
        path = name_to_path(name) if "[" in name else [name]
        if not path:
            continue
        cursor = result
        for part in path[:-1]:
            nxt = cursor.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                cursor[part] = nxt
            cursor = nxt
        leaf_key = path[-1]
        if isinstance(value, dict) and isinstance(cursor.get(leaf_key), dict):
            cursor[leaf_key].update(value)
        else:
            cursor[leaf_key] = value
    return result


def _decode_overrides(raw: Any, *, locale: str, field_name: str) -> ValueTree:
    # The locker may hand back values that were stored serialized.
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as exc:
            raise LockerIntegrityError(
                f"Stored value for locale '{locale}' is not valid JSON",
                locale=locale,
                field=field_name,
            ) from exc
    return to_tree(raw)


@dataclass(frozen=True)
class Submission:
    """One request's view of a multi-locale nested field."""

    candidate: Node
    base_locale: str
    locale_overrides: dict[str, ValueTree] | None = None
    active_locale: str | None = None
    field_name: str = ""

    @property
    def has_overrides(self) -> bool:
        return self.locale_overrides is not None

    @property
    def locales(self) -> list[str]:
        return list(self.locale_overrides or {})

    @property
    def base_overrides(self) -> ValueTree:
        overrides = self.locale_overrides or {}
        if self.base_locale not in overrides:
            logger.error("submission.base_overrides_missing", field=self.field_name, base_locale=self.base_locale)
            raise LockerIntegrityError(
                f"Submission has no overrides for base locale '{self.base_locale}'",
                locale=self.base_locale,
                field=self.field_name,
            )
        return overrides[self.base_locale]

    def with_overrides(self, locale: str, tree: ValueTree) -> "Submission":
        """Return a copy with ``tree`` stored as the overrides of ``locale``."""
        overrides = dict(self.locale_overrides or {})
        overrides[locale] = tree
        return replace(self, locale_overrides=overrides)

    def with_candidate(self, tree: Node) -> "Submission":
        return replace(self, candidate=tree)

    def with_active_locale(self, locale: str | None) -> "Submission":
        return replace(self, active_locale=locale)

    @classmethod
    def from_post(
        cls,
        post: dict[str, Any],
        *,
        model_name: str,
        field_name: str,
        settings: Settings | None = None,
    ) -> "Submission":
        settings = settings or get_settings()
        field_path = name_to_path(field_name)

        candidate = from_data(get_path(post, [model_name, *field_path]))

        overrides: dict[str, ValueTree] | None = None
        section = post.get(settings.overrides_namespace)
        if isinstance(section, dict):
            overrides = {}
            for locale, locale_data in section.items():
                raw = get_path(locale_data, [settings.overrides_widget_key, *field_path])
                if raw is None:
                    logger.debug("submission.locale_without_field", locale=locale, field=field_name)
                    # The base locale has to be posted; the rest fall back to it.
                    if locale != settings.base_locale:
                        overrides[locale] = Node()
                    continue
                overrides[locale] = _decode_overrides(raw, locale=locale, field_name=field_name)

        marker = get_path(post, [settings.locale_marker_namespace, *field_path])
        active_locale = str(marker).strip() if marker not in (None, "") else None

        return cls(
            candidate=candidate,
            base_locale=settings.base_locale,
            locale_overrides=overrides,
            active_locale=active_locale or None,
            field_name=dotted(field_path),
        )
