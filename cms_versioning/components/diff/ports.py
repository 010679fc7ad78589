"""
Diff engine port definitions.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from cms_versioning.domain.entities import CmsVersion, ContentBlock, VersionStatus


class VersionLookupPort(Protocol):
    """Read access to version records."""

    def get_by_id(self, version_id: UUID) -> CmsVersion | None:
        """Get a version summary by ID."""
        ...

    def get_by_status(self, status: VersionStatus) -> CmsVersion | None:
        """Get the single Draft or Published version, if any."""
        ...


class BlockSnapshotPort(Protocol):
    """Read access to a version's block set."""

    def list_blocks(
        self,
        version_id: UUID,
        section_key: str | None = None,
        language: str | None = None,
    ) -> list[ContentBlock]:
        """List a version's blocks."""
        ...
