"""mlform – Locale locker tests."""

import pytest

from mlform.core.errors import LockerIntegrityError
from mlform.core.locker import locale_tree, locker_for
from mlform.core.merger import merge
from mlform.core.submission import Submission
from mlform.core.tree import Node, to_tree


@pytest.fixture
def submission(en_items, fr_overrides) -> Submission:
    return Submission(
        candidate=to_tree(en_items),
        base_locale="en",
        locale_overrides={
            "en": to_tree(en_items),
            "fr": to_tree(fr_overrides),
            "de": to_tree([{"title": "Hallo"}, {"title": "Welt"}]),
        },
        field_name="blocks",
    )


class TestLockerFor:
    def test_one_entry_per_locale(self, submission) -> None:
        locker = locker_for(submission)
        assert list(locker) == ["en", "fr", "de"]

    def test_base_entry_is_base_merge(self, submission) -> None:
        locker = locker_for(submission)
        expected = merge(submission.candidate, submission.base_overrides, submission.base_overrides)
        assert locker["en"] == expected

    def test_locale_entries(self, submission) -> None:
        locker = locker_for(submission)
        assert locker["fr"].to_data() == [{"title": "Bonjour", "qty": 0}, {"title": "World", "qty": 0}]
        assert locker["de"].to_data() == [{"title": "Hallo", "qty": 0}, {"title": "Welt", "qty": 5}]

    def test_no_override_section(self, en_items) -> None:
        submission = Submission(candidate=to_tree(en_items), base_locale="en")
        assert locker_for(submission) == {}

    def test_missing_base_locale_is_an_integrity_error(self, en_items, fr_overrides) -> None:
        submission = Submission(
            candidate=to_tree(en_items),
            base_locale="en",
            locale_overrides={"fr": to_tree(fr_overrides)},
        )
        with pytest.raises(LockerIntegrityError):
            locker_for(submission)


class TestLocaleTree:
    def test_known_locale(self, submission) -> None:
        assert locale_tree(submission, "de").to_data()[0]["title"] == "Hallo"

    def test_untranslated_locale_is_empty(self, submission) -> None:
        assert locale_tree(submission, "it") == Node()
