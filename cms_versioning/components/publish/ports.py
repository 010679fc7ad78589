"""
Publication workflow port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from cms_versioning.domain.entities import CmsVersion


class PublishRepoPort(Protocol):
    """Store capable of the archive-then-publish swap."""

    def publish(self, version_id: UUID, actor: str, now: datetime) -> CmsVersion:
        """
        Archive the current published version and publish the target in one
        transaction. Raises NotFoundError / InvalidStateError.
        """
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
