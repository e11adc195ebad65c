"""mlform – Locale locker.

The locker maps every posted locale to its reconciled value tree. It is a
view over one submission, rebuilt each time it is asked for.
"""

from __future__ import annotations

import structlog

from mlform.core.merger import merge
from mlform.core.submission import Submission
from mlform.core.tree import Node, ValueTree

logger = structlog.get_logger()


def locker_for(submission: Submission) -> dict[str, ValueTree]:
    """Return ``{locale: merged tree}`` for every locale in the submission.

    Raises:
        LockerIntegrityError: overrides were posted but none for the base locale.
    """
    if not submission.has_overrides:
        return {}

    candidate = submission.candidate
    base = submission.base_overrides

    locker: dict[str, ValueTree] = {}
    for locale, overrides in (submission.locale_overrides or {}).items():
        locker[locale] = merge(candidate, base, overrides)

    logger.debug("locker.built", field=submission.field_name, locales=list(locker))
    return locker


def locale_tree(submission: Submission, locale: str) -> ValueTree:
    """The locker entry for ``locale``; an empty node if it was never translated."""
    tree = locker_for(submission).get(locale)
    if tree is None:
        logger.info("locker.locale_missing", field=submission.field_name, locale=locale)
        return Node()
    return tree
