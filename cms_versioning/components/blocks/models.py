"""
Content block store input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from cms_versioning.domain.entities import BlockType, ContentBlock
from cms_versioning.domain.errors import CmsValidationError

# --- Batch Items ---


@dataclass(frozen=True)
class BulkUpdateItem:
    """One field edit flushed by the editor."""

    id: UUID
    content: str
    sort_order: int | None = None
    metadata: str | None = None


@dataclass(frozen=True)
class ReorderItem:
    """New position for a block within its section."""

    block_id: UUID
    new_sort_order: int


# --- Input Models ---


@dataclass(frozen=True)
class ListBlocksInput:
    """Input for listing a version's blocks."""

    version_id: UUID
    section_key: str | None = None
    language: str | None = None


@dataclass(frozen=True)
class GetBlockInput:
    """Input for retrieving a single block."""

    version_id: UUID
    block_id: UUID


@dataclass(frozen=True)
class CreateBlockInput:
    """Input for creating a block in a draft."""

    version_id: UUID
    block_key: str
    block_type: BlockType
    content: str
    section_key: str
    language: str | None = None
    sort_order: int | None = None
    metadata: str | None = None


@dataclass(frozen=True)
class UpdateBlockInput:
    """Input for updating one block's content."""

    version_id: UUID
    block_id: UUID
    content: str
    sort_order: int | None = None
    metadata: str | None = None


@dataclass(frozen=True)
class BulkUpdateInput:
    """Input for the editor's all-or-nothing save."""

    version_id: UUID
    items: tuple[BulkUpdateItem, ...]


@dataclass(frozen=True)
class ReorderBlocksInput:
    """Input for reordering blocks."""

    version_id: UUID
    items: tuple[ReorderItem, ...]


@dataclass(frozen=True)
class DeleteBlockInput:
    """Input for deleting a block from a draft."""

    version_id: UUID
    block_id: UUID


@dataclass(frozen=True)
class ClonePublishedInput:
    """Input for resetting a draft to the live block set."""

    target_version_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class BlockOutput:
    """Output containing a single block."""

    block: ContentBlock | None
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BlockListOutput:
    """Output containing a list of blocks."""

    blocks: list[ContentBlock] = field(default_factory=list)
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class BlockOperationOutput:
    """Output for operations without a payload (reorder, delete)."""

    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True
