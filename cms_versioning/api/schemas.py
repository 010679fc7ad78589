"""
Request/response models for the HTTP surface.

JSON bodies use camelCase; Python attributes stay snake_case.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cms_versioning.domain.entities import BlockType, VersionAction, VersionStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# --- Content Blocks ---
class ContentBlockResponse(CamelModel):
    id: UUID
    version_id: UUID
    block_key: str
    section_key: str
    block_type: BlockType
    content: str
    language: str
    sort_order: int
    metadata: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class CreateBlockRequest(CamelModel):
    block_key: str
    section_key: str
    block_type: BlockType
    content: str
    language: str | None = None
    sort_order: int | None = None
    metadata: str | None = None


class UpdateBlockRequest(CamelModel):
    content: str
    sort_order: int | None = None
    metadata: str | None = None


class BulkUpdateItemRequest(CamelModel):
    id: UUID
    content: str
    sort_order: int | None = None
    metadata: str | None = None


class BulkUpdateRequest(CamelModel):
    items: list[BulkUpdateItemRequest] = Field(min_length=1)


class ReorderItemRequest(CamelModel):
    block_id: UUID
    new_sort_order: int


class ReorderRequest(CamelModel):
    items: list[ReorderItemRequest] = Field(min_length=1)


# --- Versions ---
class VersionResponse(CamelModel):
    id: UUID
    sequence_number: int
    status: VersionStatus
    notes: str | None = None
    created_by: str
    created_at: datetime
    updated_at: datetime | None = None
    published_by: str | None = None
    published_at: datetime | None = None
    scheduled_publish_at: datetime | None = None
    content_block_count: int = 0


class VersionDetailResponse(VersionResponse):
    content_blocks: list[ContentBlockResponse] = []


class CreateVersionRequest(CamelModel):
    notes: str | None = None


class UpdateVersionRequest(CamelModel):
    notes: str | None = None


class ScheduleRequest(CamelModel):
    publish_at: datetime


class HistoryEntryResponse(CamelModel):
    id: UUID
    version_id: UUID
    action: VersionAction
    performed_by: str
    performed_at: datetime
    notes: str | None = None
    old_status: VersionStatus | None = None
    new_status: VersionStatus | None = None
    change_summary: str | None = None
    scheduled_publish_at: datetime | None = None


# --- Diff ---
class BlockDiffResponse(CamelModel):
    block_key: str
    section_key: str
    language: str | None = None
    status: str
    draft_content: str | None = None
    published_content: str | None = None
    metadata_changed: bool = False


class SectionDiffResponse(CamelModel):
    section_key: str
    blocks: list[BlockDiffResponse]
    added_count: int
    removed_count: int
    modified_count: int
    unchanged_count: int


class VersionComparisonResponse(CamelModel):
    base_version_id: UUID | None = None
    target_version_id: UUID
    language: str | None = None
    sections: list[SectionDiffResponse]
    total_added: int
    total_removed: int
    total_modified: int
    total_unchanged: int
    has_changes: bool


# --- Public ---
class PublishedContentResponse(CamelModel):
    version_id: UUID | None = None
    sections: dict[str, list[ContentBlockResponse]]
