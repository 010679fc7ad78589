"""
Published content read models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from cms_versioning.domain.entities import ContentBlock
from cms_versioning.domain.errors import CmsValidationError


@dataclass(frozen=True)
class GetPublishedInput:
    """Input for reading live content, optionally one section."""

    section_key: str | None = None
    language: str | None = None


@dataclass(frozen=True)
class GetPublishedPageInput:
    """Input for reading every section under a page key."""

    page_key: str
    language: str | None = None


@dataclass(frozen=True)
class GetPublishedBlockInput:
    """Input for reading one live block by key."""

    block_key: str
    language: str | None = None


@dataclass(frozen=True)
class PublishedContentOutput:
    """
    Live content grouped by section.

    sections is empty when nothing has ever been published.
    """

    sections: dict[str, list[ContentBlock]] = field(default_factory=dict)
    version_id: UUID | None = None
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class PublishedBlockOutput:
    """Output containing one live block."""

    block: ContentBlock | None
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True
