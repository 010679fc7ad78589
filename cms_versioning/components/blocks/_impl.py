"""
DraftEditBuffer - per-field dirty tracking for the editor save path.

The editor accumulates field edits locally and flushes them in one
bulk update. The buffer keeps the last-saved content of each block as a
baseline; a field is dirty while its staged value differs from it.

Key behaviors:
- Staging the baseline value again clears that field's dirty flag
- A successful flush advances the baseline and leaves the buffer clean
- A failed flush keeps every staged edit so the save can be retried
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from cms_versioning.domain.entities import ContentBlock

from .component import run_bulk_update
from .models import BlockListOutput, BulkUpdateInput, BulkUpdateItem
from .ports import BlockRepoPort, TimePort


@dataclass
class _StagedEdit:
    content: str
    sort_order: int | None = None
    metadata: str | None = None


@dataclass
class DraftEditBuffer:
    """Staged, unsaved edits against one draft version."""

    version_id: UUID
    _baseline: dict[UUID, ContentBlock] = field(default_factory=dict)
    _staged: dict[UUID, _StagedEdit] = field(default_factory=dict)

    @classmethod
    def from_blocks(cls, version_id: UUID, blocks: list[ContentBlock]) -> DraftEditBuffer:
        buffer = cls(version_id=version_id)
        buffer.reset(blocks)
        return buffer

    def reset(self, blocks: list[ContentBlock]) -> None:
        """Load a fresh baseline and drop all staged edits."""
        self._baseline = {b.id: b for b in blocks}
        self._staged.clear()

    def content_of(self, block_id: UUID) -> str:
        """Current editor value: staged if dirty, otherwise the saved content."""
        staged = self._staged.get(block_id)
        if staged is not None:
            return staged.content
        return self._baseline[block_id].content

    def stage(
        self,
        block_id: UUID,
        content: str,
        sort_order: int | None = None,
        metadata: str | None = None,
    ) -> None:
        """Record an edit. Raises KeyError for blocks outside the baseline."""
        base = self._baseline[block_id]
        unchanged = (
            content == base.content
            and (sort_order is None or sort_order == base.sort_order)
            and (metadata is None or metadata == base.metadata)
        )
        if unchanged:
            self._staged.pop(block_id, None)
            return
        self._staged[block_id] = _StagedEdit(content, sort_order, metadata)

    def revert(self, block_id: UUID) -> None:
        self._staged.pop(block_id, None)

    def is_dirty(self, block_id: UUID | None = None) -> bool:
        if block_id is None:
            return bool(self._staged)
        return block_id in self._staged

    @property
    def dirty_ids(self) -> list[UUID]:
        return list(self._staged)

    def to_bulk_items(self) -> tuple[BulkUpdateItem, ...]:
        return tuple(
            BulkUpdateItem(
                id=block_id,
                content=edit.content,
                sort_order=edit.sort_order,
                metadata=edit.metadata,
            )
            for block_id, edit in self._staged.items()
        )

    def flush(self, *, repo: BlockRepoPort, time: TimePort) -> BlockListOutput:
        """Save all dirty fields in one bulk update."""
        if not self._staged:
            return BlockListOutput(blocks=[])

        result = run_bulk_update(
            BulkUpdateInput(version_id=self.version_id, items=self.to_bulk_items()),
            repo=repo,
            time=time,
        )
        if result.success:
            for block in result.blocks:
                self._baseline[block.id] = block
                self._staged.pop(block.id, None)
        return result
