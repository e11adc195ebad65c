"""mlform – Jinja2 widget templates.

Templates live in ``mlform/widgets/templates/``.

Usage:
    from mlform.widgets.templating import get_engine

    html = get_engine().render("nestedform.html.j2", items=[...])
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

logger = structlog.get_logger()

_TEMPLATE_BASE = Path(__file__).parent / "templates"


class WidgetTemplateEngine:
    """Jinja2-backed renderer for widget partials."""

    def __init__(self, template_dir: str | Path = _TEMPLATE_BASE) -> None:
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(enabled_extensions=("html", "j2"), default_for_string=True),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_name: str, **context: Any) -> str:
        """Render a widget partial.

        Args:
            template_name: File name relative to the template dir, e.g. "nestedform.html.j2".
            **context: Variables injected into the template.
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except Exception as exc:
            logger.error("templating.render_failed", template=template_name, error=str(exc))
            raise


# Module-level singleton
_engine: WidgetTemplateEngine | None = None


def get_engine() -> WidgetTemplateEngine:
    """Return the module-level WidgetTemplateEngine singleton."""
    global _engine
    if _engine is None:
        _engine = WidgetTemplateEngine(_TEMPLATE_BASE)
    return _engine
