"""mlform – Multi-lingual nested form widget.

Renders a nested repeater whose structure comes from the base locale and
whose leaf values can be edited per locale. Switching the locale rebuilds
the item collection from the locker; the values of the locale being left
are returned to the client so it can cache them until the form is saved.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from config.settings import Settings, get_settings
from mlform.core.errors import WidgetUsageError
from mlform.core.extractor import array_values, extract_save_value, locale_save_value, reconciled_locker
from mlform.core.locker import locale_tree, locker_for
from mlform.core.submission import Submission, name_to_path
from mlform.core.tree import Node, ValueTree, to_tree
from mlform.widgets.repeater import NestedRepeater
from mlform.widgets.templating import WidgetTemplateEngine

logger = structlog.get_logger()


def _brackets(parts: list[str]) -> str:
    return "".join(f"[{part}]" for part in parts)


def _serialize(tree: ValueTree | None) -> str:
    if tree is None:
        return ""
    return json.dumps(tree.to_data(), ensure_ascii=False)


class MLNestedForm(NestedRepeater):
    """Nested repeater with a locale selector."""

    alias = "mlnestedform"
    template = "mlnestedform.html.j2"

    def __init__(
        self,
        field_name: str,
        model_name: str,
        value: Any = None,
        *,
        translations: dict[str, Any] | None = None,
        settings: Settings | None = None,
        engine: WidgetTemplateEngine | None = None,
    ) -> None:
        super().__init__(field_name, model_name, value, engine=engine)
        self.settings = settings or get_settings()
        self.translations = {locale: to_tree(data) for locale, data in (translations or {}).items()}
        self.init_locale()

    def init_locale(self) -> None:
        self.default_locale = self.settings.base_locale
        self.active_locale = self.default_locale
        self.locales = self.settings.locales
        self.is_available = self.settings.translation_available

    # ── Transport names ────────────────────────────────────────────────────────

    @property
    def marker_name(self) -> str:
        return self.settings.locale_marker_namespace + _brackets(name_to_path(self.field_name))

    def overrides_name(self, locale: str) -> str:
        return (
            f"{self.settings.overrides_namespace}[{locale}][{self.settings.overrides_widget_key}]"
            + _brackets(name_to_path(self.field_name))
        )

    def submission_from_post(self, post: dict[str, Any]) -> Submission:
        return Submission.from_post(
            post,
            model_name=self.model_name,
            field_name=self.field_name,
            settings=self.settings,
        )

    # ── Rendering ──────────────────────────────────────────────────────────────

    def prepare_locale_vars(self, submission: Submission | None = None) -> dict[str, Any]:
        if submission is not None and submission.has_overrides:
            values = locker_for(submission)
        else:
            values = dict(self.translations)
            values[self.default_locale] = self.current_tree()
        return {
            "locales": {code: code.upper() for code in self.locales},
            "default_locale": self.default_locale,
            "active_locale": self.active_locale,
            "is_available": self.is_available,
            "marker_name": self.marker_name,
            "overrides_name": self.overrides_name,
            "locale_values": {code: _serialize(values.get(code)) for code in self.locales},
        }

    def prepare_vars(self, submission: Submission | None = None) -> dict[str, Any]:
        variables = super().prepare_vars()
        variables.update(self.prepare_locale_vars(submission))
        return variables

    def render(self, submission: Submission | None = None) -> str:
        parent_content = super().render()
        if not self.is_available:
            return parent_content

        variables = self.prepare_vars(submission)
        variables["nestedform"] = parent_content
        return self.engine.render(MLNestedForm.template, **variables)

    # ── Saving ─────────────────────────────────────────────────────────────────

    def get_save_value(self, submission: Submission, value: Any = None) -> ValueTree:
        """Value to persist for the field: the reconciled base locale tree."""
        live = array_values(to_tree(value)) if value is not None else None
        return extract_save_value(submission, live)

    def get_locale_save_data(self, submission: Submission, value: Any = None) -> dict[str, ValueTree]:
        """Every locale's reconciled tree, with the live edits filed under the active locale."""
        live = array_values(to_tree(value)) if value is not None else None
        if not submission.active_locale:
            return locker_for(submission)
        return reconciled_locker(submission, live)

    # ── Handlers ───────────────────────────────────────────────────────────────

    def on_switch_item_locale(
        self,
        target_locale: str | None,
        previous_locale: str | None,
        submission: Submission,
    ) -> dict[str, Any]:
        """Show the items of ``target_locale``.

        Returns the re-rendered items keyed by their DOM id, plus the values of
        the locale being left as ``updateValue`` / ``updateLocale``.

        Raises:
            WidgetUsageError: no target locale in the request.
        """
        locale = (target_locale or "").strip()
        if not locale:
            raise WidgetUsageError(f"Unable to find a nestedform locale for: {self.field_name}")

        previous_locale = (previous_locale or submission.active_locale or self.active_locale).strip()

        if not submission.has_overrides:
            # Nothing was ever translated: the live tree is all there is.
            previous_value = array_values(submission.candidate)
            target_tree = previous_value if locale == previous_locale else Node()
        else:
            previous_value = locale_save_value(submission, previous_locale)
            # The target locale sees the just-left locale's edits as its overrides.
            locker_submission = submission.with_candidate(array_values(submission.candidate)).with_overrides(
                previous_locale, previous_value
            )
            target_tree = locale_tree(locker_submission, locale)

        self.reprocess_locale_items(target_tree)
        self.active_locale = locale

        logger.info(
            "widget.locale_switched",
            field=self.field_name,
            previous_locale=previous_locale,
            locale=locale,
            items=len(self.items),
        )

        return {
            "#" + self.get_id("items"): super().render(),
            "updateValue": _serialize(previous_value),
            "updateLocale": previous_locale,
        }

    def reprocess_locale_items(self, tree: ValueTree) -> None:
        """Throw the current items away and rebuild them from ``tree``."""
        self.items = []
        self.init_items_from(tree)
