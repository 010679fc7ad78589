"""
Admin version routes: draft lifecycle, publication, scheduling, history
and comparison.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from cms_versioning.adapters.clock import SystemClock
from cms_versioning.adapters.sqlite.repos import SQLiteBlockRepo, SQLiteVersionRepo
from cms_versioning.api.deps import (
    get_actor,
    get_block_repo,
    get_clock,
    get_rules,
    get_version_repo,
)
from cms_versioning.api.errors import raise_for_errors
from cms_versioning.api.schemas import (
    CreateVersionRequest,
    HistoryEntryResponse,
    ScheduleRequest,
    UpdateVersionRequest,
    VersionComparisonResponse,
    VersionDetailResponse,
    VersionResponse,
)
from cms_versioning.components.diff import DiffVersionsInput, run_diff
from cms_versioning.components.publish import PublishVersionInput, run_publish
from cms_versioning.components.versions import (
    CancelScheduleInput,
    CreateDraftInput,
    DeleteVersionInput,
    GetActiveInput,
    GetHistoryInput,
    GetVersionInput,
    ListVersionsInput,
    ScheduleVersionInput,
    UpdateNotesInput,
    run_cancel_schedule,
    run_create_draft,
    run_delete,
    run_get,
    run_get_active,
    run_history,
    run_list,
    run_schedule,
    run_update_notes,
)
from cms_versioning.rules.models import Rules

router = APIRouter()


@router.get("/versions", response_model=list[VersionResponse])
def list_versions(repo: SQLiteVersionRepo = Depends(get_version_repo)) -> Any:
    """All versions, newest first."""
    result = run_list(ListVersionsInput(), repo=repo)
    if not result.success:
        raise_for_errors(result.errors)
    return result.versions


@router.post("/versions", response_model=VersionDetailResponse, status_code=201)
def create_draft(
    req: CreateVersionRequest | None = None,
    actor: str = Depends(get_actor),
    repo: SQLiteVersionRepo = Depends(get_version_repo),
    clock: SystemClock = Depends(get_clock),
) -> Any:
    """Open a new draft seeded with the published content."""
    notes = req.notes if req else None
    result = run_create_draft(CreateDraftInput(actor=actor, notes=notes), repo=repo, time=clock)
    if not result.success:
        raise_for_errors(result.errors)
    return result.version


@router.get("/versions/active", response_model=VersionDetailResponse)
def get_active_draft(repo: SQLiteVersionRepo = Depends(get_version_repo)) -> Any:
    """The open draft, or 204 when there is none."""
    result = run_get_active(GetActiveInput(), repo=repo)
    if not result.success:
        raise_for_errors(result.errors)
    if result.version is None:
        return Response(status_code=204)
    return result.version


@router.get("/versions/{version_id}", response_model=VersionDetailResponse)
def get_version(
    version_id: UUID, repo: SQLiteVersionRepo = Depends(get_version_repo)
) -> Any:
    result = run_get(GetVersionInput(version_id=version_id), repo=repo)
    if not result.success:
        raise_for_errors(result.errors)
    return result.version


@router.put("/versions/{version_id}", response_model=VersionResponse)
def update_version(
    version_id: UUID,
    req: UpdateVersionRequest,
    actor: str = Depends(get_actor),
    repo: SQLiteVersionRepo = Depends(get_version_repo),
    clock: SystemClock = Depends(get_clock),
) -> Any:
    """Replace the version's notes."""
    result = run_update_notes(
        UpdateNotesInput(version_id=version_id, actor=actor, notes=req.notes),
        repo=repo,
        time=clock,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.version


@router.delete("/versions/{version_id}", status_code=204)
def delete_version(
    version_id: UUID, repo: SQLiteVersionRepo = Depends(get_version_repo)
) -> None:
    """Discard a draft."""
    result = run_delete(DeleteVersionInput(version_id=version_id), repo=repo)
    if not result.success:
        raise_for_errors(result.errors)


@router.post("/versions/{version_id}/publish", response_model=VersionResponse)
def publish_version(
    version_id: UUID,
    actor: str = Depends(get_actor),
    repo: SQLiteVersionRepo = Depends(get_version_repo),
    clock: SystemClock = Depends(get_clock),
) -> Any:
    """Publish a draft now, archiving the current published version."""
    result = run_publish(
        PublishVersionInput(version_id=version_id, actor=actor), repo=repo, time=clock
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.version


@router.post("/versions/{version_id}/schedule", status_code=204)
def schedule_version(
    version_id: UUID,
    req: ScheduleRequest,
    actor: str = Depends(get_actor),
    repo: SQLiteVersionRepo = Depends(get_version_repo),
    clock: SystemClock = Depends(get_clock),
) -> None:
    result = run_schedule(
        ScheduleVersionInput(version_id=version_id, publish_at=req.publish_at, actor=actor),
        repo=repo,
        time=clock,
    )
    if not result.success:
        raise_for_errors(result.errors)


@router.delete("/versions/{version_id}/schedule", response_model=VersionResponse)
def cancel_schedule(
    version_id: UUID,
    actor: str = Depends(get_actor),
    repo: SQLiteVersionRepo = Depends(get_version_repo),
    clock: SystemClock = Depends(get_clock),
) -> Any:
    result = run_cancel_schedule(
        CancelScheduleInput(version_id=version_id, actor=actor), repo=repo, time=clock
    )
    if not result.success:
        raise_for_errors(result.errors)
    return result.version


@router.get("/versions/{version_id}/history", response_model=list[HistoryEntryResponse])
def get_history(
    version_id: UUID, repo: SQLiteVersionRepo = Depends(get_version_repo)
) -> Any:
    result = run_history(GetHistoryInput(version_id=version_id), repo=repo)
    if not result.success:
        raise_for_errors(result.errors)
    return result.entries


@router.get("/versions/{version_id}/diff", response_model=VersionComparisonResponse)
def diff_version(
    version_id: UUID,
    against: UUID | None = None,
    language: str | None = None,
    include_unchanged: bool = Query(default=False, alias="includeUnchanged"),
    versions: SQLiteVersionRepo = Depends(get_version_repo),
    blocks: SQLiteBlockRepo = Depends(get_block_repo),
    rules: Rules = Depends(get_rules),
) -> Any:
    """Compare a version against another one (default: the published version)."""
    result = run_diff(
        DiffVersionsInput(
            target_version_id=version_id,
            base_version_id=against,
            language=language or rules.content.default_language,
            include_unchanged=include_unchanged,
        ),
        versions=versions,
        blocks=blocks,
    )
    if not result.success:
        raise_for_errors(result.errors)
    return VersionComparisonResponse.model_validate(result.comparison)
