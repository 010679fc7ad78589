"""
Scheduler port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from cms_versioning.domain.entities import CmsVersion


class DueVersionRepoPort(Protocol):
    """Store access needed by the scheduler."""

    def list_due(self, now: datetime, limit: int = 10) -> list[CmsVersion]:
        """Drafts whose scheduled_publish_at is at or before now."""
        ...

    def publish(self, version_id: UUID, actor: str, now: datetime) -> CmsVersion:
        """Atomic archive-then-publish."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
