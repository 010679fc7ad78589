"""
Content block store - CRUD and batch writes on a draft's blocks.

Blocks are only mutable while their version is a Draft. The repository
enforces that inside each write transaction; this layer validates input
shape and turns store errors into output error entries.

The editor's primary save path is `run_bulk_update`: many field edits are
accumulated client-side (see DraftEditBuffer) and flushed in one
all-or-nothing call.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from uuid import uuid4

from cms_versioning.domain.entities import BLOCK_TYPES, DEFAULT_LANGUAGE, ContentBlock
from cms_versioning.domain.errors import CmsError, CmsValidationError, to_validation_error

from .models import (
    BlockListOutput,
    BlockOperationOutput,
    BlockOutput,
    BulkUpdateInput,
    ClonePublishedInput,
    CreateBlockInput,
    DeleteBlockInput,
    GetBlockInput,
    ListBlocksInput,
    ReorderBlocksInput,
    UpdateBlockInput,
)
from .ports import BlockRepoPort, TimePort

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_\-]+(?:\.[A-Za-z0-9_\-]+)*$")


# --- Validation Functions ---


def is_valid_key(key: str) -> bool:
    """Check a dotted hierarchical key such as 'landing.hero.headline'."""
    return bool(_KEY_PATTERN.match(key))


def _validate_create(
    inp: CreateBlockInput,
    block_types: Sequence[str],
    languages: Sequence[str] | None,
) -> list[CmsValidationError]:
    errors: list[CmsValidationError] = []

    if not inp.block_key or not is_valid_key(inp.block_key):
        errors.append(
            CmsValidationError(
                code="invalid_input",
                message="block_key must be a dotted key of letters, digits, '_' or '-'",
                field="block_key",
            )
        )
    if not inp.section_key or not is_valid_key(inp.section_key):
        errors.append(
            CmsValidationError(
                code="invalid_input",
                message="section_key must be a dotted key of letters, digits, '_' or '-'",
                field="section_key",
            )
        )
    if inp.block_type not in block_types:
        errors.append(
            CmsValidationError(
                code="invalid_input",
                message=f"block_type must be one of {', '.join(block_types)}",
                field="block_type",
            )
        )
    if inp.language is not None and not inp.language.strip():
        errors.append(
            CmsValidationError(
                code="invalid_input",
                message="language must not be blank",
                field="language",
            )
        )
    elif inp.language is not None and languages is not None and inp.language not in languages:
        errors.append(
            CmsValidationError(
                code="invalid_input",
                message=f"language must be one of {', '.join(languages)}",
                field="language",
            )
        )

    return errors


# --- Component Entry Points ---


def run_list(inp: ListBlocksInput, *, repo: BlockRepoPort) -> BlockListOutput:
    """List a version's blocks, optionally filtered by section and language."""
    try:
        blocks = repo.list_blocks(inp.version_id, inp.section_key, inp.language)
    except CmsError as e:
        return BlockListOutput(errors=[to_validation_error(e, "version_id")], success=False)
    return BlockListOutput(blocks=blocks)


def run_get(inp: GetBlockInput, *, repo: BlockRepoPort) -> BlockOutput:
    """Get a single block of a version."""
    try:
        block = repo.get_block(inp.version_id, inp.block_id)
    except CmsError as e:
        return BlockOutput(block=None, errors=[to_validation_error(e, "block_id")], success=False)
    if block is None:
        return BlockOutput(
            block=None,
            errors=[
                CmsValidationError(
                    code="not_found",
                    message=f"Block {inp.block_id} not found in version {inp.version_id}",
                    field="block_id",
                )
            ],
            success=False,
        )
    return BlockOutput(block=block)


def run_create(
    inp: CreateBlockInput,
    *,
    repo: BlockRepoPort,
    time: TimePort,
    default_language: str = DEFAULT_LANGUAGE,
    block_types: Sequence[str] = BLOCK_TYPES,
    languages: Sequence[str] | None = None,
) -> BlockOutput:
    """
    Create a block in a draft version.

    Fails with duplicate_key if (version, block_key, language) is taken and
    with invalid_state if the version is not a Draft.
    """
    errors = _validate_create(inp, block_types, languages)
    if errors:
        return BlockOutput(block=None, errors=errors, success=False)

    block = ContentBlock(
        id=uuid4(),
        version_id=inp.version_id,
        block_key=inp.block_key,
        section_key=inp.section_key,
        block_type=inp.block_type,
        content=inp.content,
        language=inp.language or default_language,
        sort_order=inp.sort_order or 0,
        metadata=inp.metadata,
        created_at=time.now_utc(),
    )

    try:
        saved = repo.create_block(block)
    except CmsError as e:
        return BlockOutput(block=None, errors=[to_validation_error(e)], success=False)

    return BlockOutput(block=saved)


def run_update(inp: UpdateBlockInput, *, repo: BlockRepoPort, time: TimePort) -> BlockOutput:
    """Update one block's content (and optionally order / metadata)."""
    try:
        block = repo.update_block(
            inp.version_id,
            inp.block_id,
            inp.content,
            time.now_utc(),
            sort_order=inp.sort_order,
            metadata=inp.metadata,
        )
    except CmsError as e:
        return BlockOutput(block=None, errors=[to_validation_error(e, "block_id")], success=False)
    return BlockOutput(block=block)


def run_bulk_update(
    inp: BulkUpdateInput, *, repo: BlockRepoPort, time: TimePort
) -> BlockListOutput:
    """
    Apply a batch of edits all-or-nothing.

    On failure the output lists every rejected item so the caller can keep
    its unsaved edits and retry with corrected data.
    """
    seen: set[str] = set()
    for item in inp.items:
        if str(item.id) in seen:
            return BlockListOutput(
                errors=[
                    CmsValidationError(
                        code="invalid_input",
                        message=f"Block {item.id} appears more than once in the batch",
                        field="items",
                    )
                ],
                success=False,
            )
        seen.add(str(item.id))

    try:
        blocks = repo.bulk_update(inp.version_id, inp.items, time.now_utc())
    except CmsError as e:
        return BlockListOutput(errors=[to_validation_error(e, "items")], success=False)
    return BlockListOutput(blocks=blocks)


def run_reorder(
    inp: ReorderBlocksInput, *, repo: BlockRepoPort, time: TimePort
) -> BlockOperationOutput:
    """Change sort_order of the given blocks; nothing else is touched."""
    try:
        repo.reorder(inp.version_id, inp.items, time.now_utc())
    except CmsError as e:
        return BlockOperationOutput(errors=[to_validation_error(e, "items")], success=False)
    return BlockOperationOutput()


def run_delete(inp: DeleteBlockInput, *, repo: BlockRepoPort) -> BlockOperationOutput:
    """Remove a block from a draft."""
    try:
        repo.delete_block(inp.version_id, inp.block_id)
    except CmsError as e:
        return BlockOperationOutput(errors=[to_validation_error(e, "block_id")], success=False)
    return BlockOperationOutput()


def run_clone_published(
    inp: ClonePublishedInput, *, repo: BlockRepoPort, time: TimePort
) -> BlockListOutput:
    """Reset a draft to an exact copy of the published block set."""
    try:
        blocks = repo.clone_published(inp.target_version_id, time.now_utc())
    except CmsError as e:
        return BlockListOutput(
            errors=[to_validation_error(e, "target_version_id")], success=False
        )
    return BlockListOutput(blocks=blocks)
