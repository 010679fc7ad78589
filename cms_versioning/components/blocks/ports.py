"""
Content block store port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol
from uuid import UUID

from cms_versioning.domain.entities import ContentBlock

from .models import BulkUpdateItem, ReorderItem


class BlockRepoPort(Protocol):
    """
    Repository interface for content blocks.

    Every mutating method must re-check that the owning version is a Draft
    inside the same transaction as the write.
    """

    def list_blocks(
        self,
        version_id: UUID,
        section_key: str | None = None,
        language: str | None = None,
    ) -> list[ContentBlock]:
        """List a version's blocks ordered by sort_order."""
        ...

    def get_block(self, version_id: UUID, block_id: UUID) -> ContentBlock | None:
        """Get a block scoped to its version."""
        ...

    def create_block(self, block: ContentBlock) -> ContentBlock:
        """Insert a block. Raises DuplicateKeyError / InvalidStateError."""
        ...

    def update_block(
        self,
        version_id: UUID,
        block_id: UUID,
        content: str,
        now: datetime,
        sort_order: int | None = None,
        metadata: str | None = None,
    ) -> ContentBlock:
        """Update one block's content."""
        ...

    def bulk_update(
        self, version_id: UUID, items: Sequence[BulkUpdateItem], now: datetime
    ) -> list[ContentBlock]:
        """Apply all items atomically. Raises BulkUpdateError."""
        ...

    def reorder(self, version_id: UUID, items: Sequence[ReorderItem], now: datetime) -> None:
        """Update sort_order of the given blocks atomically."""
        ...

    def delete_block(self, version_id: UUID, block_id: UUID) -> None:
        """Remove a block from a draft."""
        ...

    def clone_published(self, target_version_id: UUID, now: datetime) -> list[ContentBlock]:
        """Replace the draft's blocks with a copy of the published set."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
