"""
Admin block routes, scoped to a version. Writes only succeed on drafts.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from cms_versioning.adapters.clock import SystemClock
from cms_versioning.adapters.sqlite.repos import SQLiteBlockRepo
from cms_versioning.api.deps import get_block_repo, get_clock, get_rules
from cms_versioning.api.errors import raise_for_errors
from cms_versioning.api.schemas import (
    BulkUpdateRequest,
    ContentBlockResponse,
    CreateBlockRequest,
    ReorderRequest,
    UpdateBlockRequest,
)
from cms_versioning.components.blocks import (
    BulkUpdateInput,
    BulkUpdateItem,
    ClonePublishedInput,
    CreateBlockInput,
    DeleteBlockInput,
    GetBlockInput,
    ListBlocksInput,
    ReorderBlocksInput,
    ReorderItem,
    UpdateBlockInput,
    run_bulk_update,
    run_clone_published,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_reorder,
    run_update,
)
from cms_versioning.rules.models import Rules

router = APIRouter()


@router.get("/versions/{version_id}/blocks", response_model=list[ContentBlockResponse])
def list_blocks(
    version_id: UUID,
    section_key: str | None = Query(default=None, alias="sectionKey"),
    language: str | None = None,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
) -> Any:
    result = run_list(
        ListBlocksInput(version_id=version_id, section_key=section_key, language=language),
        repo=repo,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.blocks


# Fixed sub-paths are registered before /{block_id}


@router.put("/versions/{version_id}/blocks/bulk", response_model=list[ContentBlockResponse])
def bulk_update_blocks(
    version_id: UUID,
    req: BulkUpdateRequest,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
    clock: SystemClock = Depends(get_clock),
) -> Any:
    """Save a batch of edits; every item is applied or none is."""
    items = tuple(
        BulkUpdateItem(
            id=item.id,
            content=item.content,
            sort_order=item.sort_order,
            metadata=item.metadata,
        )
        for item in req.items
    )
    result = run_bulk_update(
        BulkUpdateInput(version_id=version_id, items=items), repo=repo, time=clock
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.blocks


@router.put("/versions/{version_id}/blocks/reorder", status_code=204)
def reorder_blocks(
    version_id: UUID,
    req: ReorderRequest,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
    clock: SystemClock = Depends(get_clock),
) -> None:
    items = tuple(
        ReorderItem(block_id=item.block_id, new_sort_order=item.new_sort_order)
        for item in req.items
    )
    result = run_reorder(
        ReorderBlocksInput(version_id=version_id, items=items), repo=repo, time=clock
    )
    if not result.success:
        raise_for_errors(result.errors)


@router.post(
    "/versions/{version_id}/blocks/clone-published",
    response_model=list[ContentBlockResponse],
)
def clone_published(
    version_id: UUID,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
    clock: SystemClock = Depends(get_clock),
) -> Any:
    """Reset the draft to a copy of the published blocks."""
    result = run_clone_published(
        ClonePublishedInput(target_version_id=version_id), repo=repo, time=clock
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.blocks


@router.get("/versions/{version_id}/blocks/{block_id}", response_model=ContentBlockResponse)
def get_block(
    version_id: UUID, block_id: UUID, repo: SQLiteBlockRepo = Depends(get_block_repo)
) -> Any:
    result = run_get(GetBlockInput(version_id=version_id, block_id=block_id), repo=repo)
    if not result.success:
        raise_for_errors(result.errors)
    return result.block


@router.post(
    "/versions/{version_id}/blocks", response_model=ContentBlockResponse, status_code=201
)
def create_block(
    version_id: UUID,
    req: CreateBlockRequest,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> Any:
    result = run_create(
        CreateBlockInput(
            version_id=version_id,
            block_key=req.block_key,
            block_type=req.block_type,
            content=req.content,
            section_key=req.section_key,
            language=req.language,
            sort_order=req.sort_order,
            metadata=req.metadata,
        ),
        repo=repo,
        time=clock,
        default_language=rules.content.default_language,
        block_types=rules.content.block_types,
        languages=rules.content.languages,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.block


@router.put("/versions/{version_id}/blocks/{block_id}", response_model=ContentBlockResponse)
def update_block(
    version_id: UUID,
    block_id: UUID,
    req: UpdateBlockRequest,
    repo: SQLiteBlockRepo = Depends(get_block_repo),
    clock: SystemClock = Depends(get_clock),
) -> Any:
    result = run_update(
        UpdateBlockInput(
            version_id=version_id,
            block_id=block_id,
            content=req.content,
            sort_order=req.sort_order,
            metadata=req.metadata,
        ),
        repo=repo,
        time=clock,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.block


@router.delete("/versions/{version_id}/blocks/{block_id}", status_code=204)
def delete_block(
    version_id: UUID, block_id: UUID, repo: SQLiteBlockRepo = Depends(get_block_repo)
) -> None:
    result = run_delete(DeleteBlockInput(version_id=version_id, block_id=block_id), repo=repo)
    if not result.success:
        raise_for_errors(result.errors)
