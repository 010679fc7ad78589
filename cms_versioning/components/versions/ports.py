"""
Version registry port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from cms_versioning.domain.entities import (
    CmsVersion,
    VersionDetail,
    VersionHistoryEntry,
    VersionStatus,
)


class VersionRepoPort(Protocol):
    """Repository interface for version records."""

    def get_by_id(self, version_id: UUID) -> CmsVersion | None:
        """Get a version summary by ID."""
        ...

    def get_detail(self, version_id: UUID) -> VersionDetail | None:
        """Get a version with its blocks."""
        ...

    def get_by_status(self, status: VersionStatus) -> CmsVersion | None:
        """Get the single Draft or Published version, if any."""
        ...

    def list_versions(self) -> list[CmsVersion]:
        """List all versions, newest first."""
        ...

    def create_draft(self, version: CmsVersion) -> VersionDetail:
        """Insert a draft and clone published blocks. Raises DraftAlreadyExistsError."""
        ...

    def update_notes(
        self, version_id: UUID, notes: str | None, actor: str, now: datetime
    ) -> CmsVersion:
        """Replace notes on a non-archived version."""
        ...

    def delete_draft(self, version_id: UUID) -> None:
        """Discard a draft and its blocks."""
        ...

    def set_schedule(
        self, version_id: UUID, publish_at: datetime, actor: str, now: datetime
    ) -> CmsVersion:
        """Set scheduled_publish_at on a draft."""
        ...

    def clear_schedule(self, version_id: UUID, actor: str, now: datetime) -> CmsVersion:
        """Clear scheduled_publish_at on a draft."""
        ...

    def get_history(self, version_id: UUID) -> list[VersionHistoryEntry]:
        """Audit trail of a version."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
