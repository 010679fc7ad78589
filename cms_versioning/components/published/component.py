"""
Published content reads for the public site.

Only the Published version is ever visible here; drafts and archived
versions are never returned. The store resolves the live version and its
blocks in one query so a concurrent publish cannot mix two versions.
"""

from __future__ import annotations

from cms_versioning.domain.entities import ContentBlock
from cms_versioning.domain.errors import CmsError, CmsValidationError, to_validation_error

from .models import (
    GetPublishedBlockInput,
    GetPublishedInput,
    GetPublishedPageInput,
    PublishedBlockOutput,
    PublishedContentOutput,
)
from .ports import PublishedBlockPort


def group_sections(blocks: list[ContentBlock]) -> dict[str, list[ContentBlock]]:
    """Group blocks by section_key, keeping their order within each section."""
    sections: dict[str, list[ContentBlock]] = {}
    for block in blocks:
        sections.setdefault(block.section_key, []).append(block)
    return sections


def _content_output(blocks: list[ContentBlock]) -> PublishedContentOutput:
    return PublishedContentOutput(
        sections=group_sections(blocks),
        version_id=blocks[0].version_id if blocks else None,
    )


def run_get_published(
    inp: GetPublishedInput, *, repo: PublishedBlockPort
) -> PublishedContentOutput:
    """Live content, optionally restricted to one section and language."""
    try:
        blocks = repo.list_published(section_key=inp.section_key, language=inp.language)
    except CmsError as e:
        return PublishedContentOutput(errors=[to_validation_error(e)], success=False)
    return _content_output(blocks)


def run_get_published_page(
    inp: GetPublishedPageInput, *, repo: PublishedBlockPort
) -> PublishedContentOutput:
    """Sections equal to page_key or nested under it ('landing', 'landing.hero')."""
    try:
        blocks = repo.list_published(language=inp.language, section_prefix=inp.page_key)
    except CmsError as e:
        return PublishedContentOutput(errors=[to_validation_error(e)], success=False)
    return _content_output(blocks)


def run_get_published_block(
    inp: GetPublishedBlockInput, *, repo: PublishedBlockPort
) -> PublishedBlockOutput:
    """One live block by key; not_found when absent in that language."""
    try:
        blocks = repo.list_published(language=inp.language, block_key=inp.block_key)
    except CmsError as e:
        return PublishedBlockOutput(block=None, errors=[to_validation_error(e)], success=False)

    if blocks:
        return PublishedBlockOutput(block=blocks[0])

    return PublishedBlockOutput(
        block=None,
        errors=[
            CmsValidationError(
                code="not_found",
                message=f"Published block '{inp.block_key}' not found",
                field="block_key",
            )
        ],
        success=False,
    )
