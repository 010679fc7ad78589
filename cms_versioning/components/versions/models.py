"""
Version registry input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from cms_versioning.domain.entities import CmsVersion, VersionDetail, VersionHistoryEntry
from cms_versioning.domain.errors import CmsValidationError

# --- Input Models ---


@dataclass(frozen=True)
class CreateDraftInput:
    """Input for opening a new draft."""

    actor: str
    notes: str | None = None


@dataclass(frozen=True)
class GetActiveInput:
    """Input for fetching the open draft - empty input."""

    pass


@dataclass(frozen=True)
class GetVersionInput:
    """Input for fetching a version with its blocks."""

    version_id: UUID


@dataclass(frozen=True)
class ListVersionsInput:
    """Input for listing versions - empty input."""

    pass


@dataclass(frozen=True)
class UpdateNotesInput:
    """Input for editing a version's changelog notes."""

    version_id: UUID
    actor: str
    notes: str | None = None


@dataclass(frozen=True)
class DeleteVersionInput:
    """Input for discarding a draft."""

    version_id: UUID


@dataclass(frozen=True)
class ScheduleVersionInput:
    """Input for scheduling a draft's publication."""

    version_id: UUID
    publish_at: datetime
    actor: str


@dataclass(frozen=True)
class CancelScheduleInput:
    """Input for clearing a draft's scheduled time."""

    version_id: UUID
    actor: str


@dataclass(frozen=True)
class GetHistoryInput:
    """Input for reading a version's audit trail."""

    version_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class VersionOutput:
    """Output containing a version summary."""

    version: CmsVersion | None
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class VersionDetailOutput:
    """Output containing a version with blocks; None without error means no draft."""

    version: VersionDetail | None
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class VersionListOutput:
    """Output containing version summaries, newest first."""

    versions: list[CmsVersion] = field(default_factory=list)
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class VersionOperationOutput:
    """Output for operations without a payload (delete)."""

    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class HistoryOutput:
    """Output containing history entries, oldest first."""

    entries: list[VersionHistoryEntry] = field(default_factory=list)
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True
