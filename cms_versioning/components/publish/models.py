"""
Publication workflow input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from cms_versioning.domain.entities import CmsVersion
from cms_versioning.domain.errors import CmsValidationError


@dataclass(frozen=True)
class PublishVersionInput:
    """Input for promoting a draft to published."""

    version_id: UUID
    actor: str


@dataclass(frozen=True)
class PublishOutput:
    """Output containing the newly published version."""

    version: CmsVersion | None
    errors: list[CmsValidationError] = field(default_factory=list)
    success: bool = True
