"""
Diff engine models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
from uuid import UUID

from cms_versioning.domain.errors import CmsValidationError

DiffStatus = Literal["added", "removed", "modified", "unchanged"]


@dataclass(frozen=True)
class BlockDiff:
    """Classified change of one block key between two block sets."""

    block_key: str
    section_key: str
    status: DiffStatus
    draft_content: str | None
    published_content: str | None
    # Informational only; classification compares content alone
    metadata_changed: bool = False
    language: str | None = None


@dataclass(frozen=True)
class SectionDiff:
    """Changes of one section with per-status counts."""

    section_key: str
    blocks: tuple[BlockDiff, ...]
    added_count: int
    removed_count: int
    modified_count: int
    unchanged_count: int


@dataclass(frozen=True)
class VersionComparison:
    """Section-grouped comparison of two versions."""

    base_version_id: UUID | None
    target_version_id: UUID
    language: str | None
    sections: tuple[SectionDiff, ...]
    total_added: int
    total_removed: int
    total_modified: int
    total_unchanged: int

    @property
    def has_changes(self) -> bool:
        return bool(self.total_added or self.total_removed or self.total_modified)


# --- Input / Output ---


@dataclass(frozen=True)
class DiffVersionsInput:
    """
    Input for comparing two stored versions.

    base_version_id None means "whatever is currently published".
    """

    target_version_id: UUID
    base_version_id: UUID | None = None
    language: str | None = None
    include_unchanged: bool = False


@dataclass(frozen=True)
class DiffOutput:
    """Output for a version comparison."""

    comparison: VersionComparison | None
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True
