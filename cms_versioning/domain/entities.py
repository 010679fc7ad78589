from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
VersionStatus = Literal["Draft", "Published", "Archived"]
BlockType = Literal["Text", "RichText", "Image", "Link", "Json", "Number", "Boolean"]
VersionAction = Literal[
    "Created",
    "Modified",
    "Scheduled",
    "ScheduleCancelled",
    "Published",
    "Archived",
]

VERSION_STATUSES: tuple[VersionStatus, ...] = ("Draft", "Published", "Archived")
BLOCK_TYPES: tuple[BlockType, ...] = (
    "Text",
    "RichText",
    "Image",
    "Link",
    "Json",
    "Number",
    "Boolean",
)
DEFAULT_LANGUAGE = "en"


def utc_now() -> datetime:
    return datetime.now(UTC)


# --- Versions ---

class CmsVersion(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    sequence_number: int = 0  # Assigned by the store on insert
    status: VersionStatus = "Draft"
    notes: str | None = None

    created_by: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = None

    published_by: str | None = None
    published_at: datetime | None = None
    scheduled_publish_at: datetime | None = None

    content_block_count: int = 0


class VersionDetail(CmsVersion):
    """A version together with its full block set."""

    content_blocks: list["ContentBlock"] = Field(default_factory=list)


# --- Content Blocks ---

class ContentBlock(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    version_id: UUID
    block_key: str
    section_key: str
    block_type: BlockType
    content: str  # Opaque; structured types carry serialized JSON
    language: str = DEFAULT_LANGUAGE
    sort_order: int = 0
    metadata: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = None


# --- History ---

class VersionHistoryEntry(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    version_id: UUID
    action: VersionAction
    performed_by: str
    performed_at: datetime = Field(default_factory=utc_now)
    notes: str | None = None
    old_status: VersionStatus | None = None
    new_status: VersionStatus | None = None
    change_summary: str | None = None
    scheduled_publish_at: datetime | None = None


VersionDetail.model_rebuild()
