"""
Version state machine tests.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from cms_versioning.domain.entities import CmsVersion
from cms_versioning.domain.state import (
    TRANSITIONS,
    can_edit_notes,
    can_transition,
    is_mutable,
    transition,
)

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)


def _version(status: str = "Draft", **kwargs) -> CmsVersion:
    return CmsVersion(status=status, created_by="editor", created_at=NOW, **kwargs)


class TestTransitions:
    def test_draft_can_only_be_published(self) -> None:
        assert can_transition("Draft", "Published")
        assert not can_transition("Draft", "Archived")
        assert not can_transition("Draft", "Draft")

    def test_published_can_only_be_archived(self) -> None:
        assert can_transition("Published", "Archived")
        assert not can_transition("Published", "Draft")

    def test_archived_is_terminal(self) -> None:
        assert TRANSITIONS["Archived"] == ()
        for status in ("Draft", "Published", "Archived"):
            assert not can_transition("Archived", status)


class TestGuards:
    def test_only_drafts_are_mutable(self) -> None:
        assert is_mutable("Draft")
        assert not is_mutable("Published")
        assert not is_mutable("Archived")

    def test_notes_editable_until_archived(self) -> None:
        assert can_edit_notes("Draft")
        assert can_edit_notes("Published")
        assert not can_edit_notes("Archived")


class TestTransitionFunction:
    def test_publish_stamps_fields_and_clears_schedule(self) -> None:
        draft = _version(scheduled_publish_at=datetime(2024, 6, 15, 11, 0, tzinfo=UTC))

        published = transition(draft, "Published", NOW, actor="publisher")

        assert published.status == "Published"
        assert published.published_at == NOW
        assert published.published_by == "publisher"
        assert published.scheduled_publish_at is None
        assert published.updated_at == NOW

    def test_transition_returns_new_object(self) -> None:
        draft = _version()

        published = transition(draft, "Published", NOW, actor="publisher")

        assert draft.status == "Draft"
        assert published is not draft

    def test_archive_keeps_publication_stamps(self) -> None:
        published = _version("Published", published_at=NOW, published_by="publisher")

        archived = transition(published, "Archived", NOW)

        assert archived.status == "Archived"
        assert archived.published_at == NOW
        assert archived.published_by == "publisher"

    def test_invalid_transition_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid transition"):
            transition(_version("Archived"), "Published", NOW)

    def test_already_published_draft_cannot_be_published_again(self) -> None:
        odd = _version("Draft", published_at=NOW)
        with pytest.raises(ValueError, match="already published"):
            transition(odd, "Published", NOW)
