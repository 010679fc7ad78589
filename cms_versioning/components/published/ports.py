"""
Published content port definitions.
"""

from __future__ import annotations

from typing import Protocol

from cms_versioning.domain.entities import ContentBlock


class PublishedBlockPort(Protocol):
    """Read access to the blocks of the Published version only."""

    def list_published(
        self,
        section_key: str | None = None,
        language: str | None = None,
        section_prefix: str | None = None,
        block_key: str | None = None,
    ) -> list[ContentBlock]:
        """Blocks ordered by section, sort_order, block_key."""
        ...
