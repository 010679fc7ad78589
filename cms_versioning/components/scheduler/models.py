"""
Scheduler component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from cms_versioning.domain.errors import CmsValidationError


@dataclass(frozen=True)
class ScheduledPublishFailure:
    """A due version that could not be published during a scan."""

    version_id: UUID
    code: str
    message: str


@dataclass(frozen=True)
class ProcessDueInput:
    """
    Input for one scheduler scan.

    now defaults to the time port's current time.
    """

    actor: str = "scheduler"
    max_versions: int = 10
    now: datetime | None = None


@dataclass(frozen=True)
class ProcessDueOutput:
    """Outcome of one scan; failures of single versions do not abort it."""

    published: tuple[UUID, ...] = ()
    failures: tuple[ScheduledPublishFailure, ...] = ()
    skipped: tuple[UUID, ...] = ()
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True

    @property
    def total_processed(self) -> int:
        return len(self.published) + len(self.failures)
