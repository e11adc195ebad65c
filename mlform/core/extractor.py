"""mlform – Save value extraction.

The live repeater only ever posts the locale that is currently shown, so on
save its tree is filed under that locale's overrides before the locker is
built. The value persisted for the field is always the base locale entry.
"""

from __future__ import annotations

import structlog

from mlform.core.locker import locker_for
from mlform.core.submission import Submission
from mlform.core.tree import Node, ValueTree

logger = structlog.get_logger()


def array_values(tree: ValueTree) -> ValueTree:
    """Renumber an item list 0..n-1; trees keyed by field name are left alone."""
    if isinstance(tree, Node) and all(isinstance(key, int) for key in tree):
        return tree.reindexed()
    return tree


def splice_live_tree(submission: Submission, live_tree: ValueTree) -> Submission:
    """Return a copy of ``submission`` with ``live_tree`` as the active locale's overrides."""
    if not submission.active_locale:
        return submission
    return submission.with_overrides(submission.active_locale, live_tree)


def reconciled_locker(submission: Submission, live_tree: ValueTree | None = None) -> dict[str, ValueTree]:
    """Build the locker after filing the live tree under the active locale."""
    candidate = array_values(submission.candidate)
    live = array_values(live_tree if live_tree is not None else candidate)
    return locker_for(splice_live_tree(submission.with_candidate(candidate), live))


def locale_save_value(submission: Submission, locale: str, live_tree: ValueTree | None = None) -> ValueTree:
    """The full tree of ``locale`` once the live tree is filed as its overrides.

    Used when leaving a locale: the result is what the client caches so the
    edits survive until the form is saved.
    """
    return reconciled_locker(submission.with_active_locale(locale), live_tree)[locale]


def extract_save_value(submission: Submission, live_tree: ValueTree | None = None) -> ValueTree:
    """Compute the value to persist for the field.

    Without an active locale marker there is nothing to reconcile: the base
    locale overrides are returned as posted, or the live tree when the
    field never went through translation at all.
    """
    if not submission.active_locale:
        if not submission.has_overrides:
            return array_values(live_tree if live_tree is not None else submission.candidate)
        return submission.base_overrides

    locker = reconciled_locker(submission, live_tree)
    logger.info(
        "extractor.save_value",
        field=submission.field_name,
        active_locale=submission.active_locale,
        locales=list(locker),
    )
    return locker[submission.base_locale]
