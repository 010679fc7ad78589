"""
Diff engine - classify changes between two block sets.

Blocks are matched by (block_key, language), so translations of the same
key are never compared with each other. Content is compared as raw strings:
a re-serialized but equivalent JSON payload is reported as modified.
run_diff narrows both sets to one language when one is given.
"""

from __future__ import annotations

from collections.abc import Iterable

from cms_versioning.domain.entities import ContentBlock
from cms_versioning.domain.errors import CmsError, CmsValidationError, to_validation_error

from .models import (
    BlockDiff,
    DiffOutput,
    DiffVersionsInput,
    SectionDiff,
    VersionComparison,
)
from .ports import BlockSnapshotPort, VersionLookupPort


def diff_blocks(
    draft_blocks: Iterable[ContentBlock],
    published_blocks: Iterable[ContentBlock],
    include_unchanged: bool = False,
) -> list[BlockDiff]:
    """
    Compare a draft block set against a published one. Pure, no I/O.

    Returns entries sorted by (section_key, block_key, language); unchanged
    entries are omitted unless include_unchanged is set.
    """
    published = {(b.block_key, b.language): b for b in published_blocks}
    draft = {(b.block_key, b.language): b for b in draft_blocks}
    result: list[BlockDiff] = []

    for key, block in draft.items():
        old = published.get(key)
        if old is None:
            result.append(
                BlockDiff(
                    block_key=key[0],
                    section_key=block.section_key,
                    status="added",
                    draft_content=block.content,
                    published_content=None,
                    language=key[1],
                )
            )
            continue

        metadata_changed = block.metadata != old.metadata
        if block.content != old.content:
            status = "modified"
        elif include_unchanged:
            status = "unchanged"
        else:
            continue

        result.append(
            BlockDiff(
                block_key=key[0],
                section_key=block.section_key,
                status=status,
                draft_content=block.content,
                published_content=old.content,
                metadata_changed=metadata_changed,
                language=key[1],
            )
        )

    for key, old in published.items():
        if key not in draft:
            result.append(
                BlockDiff(
                    block_key=key[0],
                    section_key=old.section_key,
                    status="removed",
                    draft_content=None,
                    published_content=old.content,
                    language=key[1],
                )
            )

    result.sort(key=lambda d: (d.section_key, d.block_key, d.language or ""))
    return result


def group_by_section(diffs: Iterable[BlockDiff]) -> list[SectionDiff]:
    """Group diff entries by section, sections in key order."""
    buckets: dict[str, list[BlockDiff]] = {}
    for d in diffs:
        buckets.setdefault(d.section_key, []).append(d)

    sections = []
    for section_key in sorted(buckets):
        blocks = buckets[section_key]
        sections.append(
            SectionDiff(
                section_key=section_key,
                blocks=tuple(blocks),
                added_count=sum(1 for b in blocks if b.status == "added"),
                removed_count=sum(1 for b in blocks if b.status == "removed"),
                modified_count=sum(1 for b in blocks if b.status == "modified"),
                unchanged_count=sum(1 for b in blocks if b.status == "unchanged"),
            )
        )
    return sections


def run_diff(
    inp: DiffVersionsInput,
    *,
    versions: VersionLookupPort,
    blocks: BlockSnapshotPort,
) -> DiffOutput:
    """
    Compare a target version against a base version (default: published).

    With nothing published, every target block is reported as added.
    """
    try:
        target = versions.get_by_id(inp.target_version_id)
    except CmsError as e:
        return DiffOutput(comparison=None, errors=[to_validation_error(e)], success=False)
    if target is None:
        return DiffOutput(
            comparison=None,
            errors=[
                CmsValidationError(
                    code="not_found",
                    message=f"Version {inp.target_version_id} not found",
                    field="target_version_id",
                )
            ],
            success=False,
        )

    try:
        if inp.base_version_id is not None:
            base = versions.get_by_id(inp.base_version_id)
        else:
            base = versions.get_by_status("Published")
    except CmsError as e:
        return DiffOutput(comparison=None, errors=[to_validation_error(e)], success=False)

    if inp.base_version_id is not None and base is None:
        return DiffOutput(
            comparison=None,
            errors=[
                CmsValidationError(
                    code="not_found",
                    message=f"Version {inp.base_version_id} not found",
                    field="base_version_id",
                )
            ],
            success=False,
        )

    try:
        target_blocks = blocks.list_blocks(target.id, language=inp.language)
        base_blocks = blocks.list_blocks(base.id, language=inp.language) if base else []
    except CmsError as e:
        return DiffOutput(comparison=None, errors=[to_validation_error(e)], success=False)

    diffs = diff_blocks(target_blocks, base_blocks, include_unchanged=inp.include_unchanged)
    sections = group_by_section(diffs)

    comparison = VersionComparison(
        base_version_id=base.id if base else None,
        target_version_id=target.id,
        language=inp.language,
        sections=tuple(sections),
        total_added=sum(s.added_count for s in sections),
        total_removed=sum(s.removed_count for s in sections),
        total_modified=sum(s.modified_count for s in sections),
        total_unchanged=sum(s.unchanged_count for s in sections),
    )
    return DiffOutput(comparison=comparison)
