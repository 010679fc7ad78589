"""
Version registry - lifecycle of CMS versions.

State Machine:
- (none) -> Draft (create_draft, clones the published block set)
- Draft -> Published (publish component)
- Draft -> (removed) (delete)
- Published -> Archived (publication of a different version)
- Archived is terminal

Guards:
- At most one Draft and one Published version exist at any time
- Only Drafts can be deleted, scheduled, or have their schedule cancelled
- Archived versions cannot have their notes changed
- A schedule must be strictly in the future
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from cms_versioning.domain.entities import CmsVersion
from cms_versioning.domain.errors import CmsError, CmsValidationError, to_validation_error

from .models import (
    CancelScheduleInput,
    CreateDraftInput,
    DeleteVersionInput,
    GetActiveInput,
    GetHistoryInput,
    GetVersionInput,
    HistoryOutput,
    ListVersionsInput,
    ScheduleVersionInput,
    UpdateNotesInput,
    VersionDetailOutput,
    VersionListOutput,
    VersionOperationOutput,
    VersionOutput,
)
from .ports import TimePort, VersionRepoPort

# --- Validation Functions ---


def _not_found(version_id: object) -> CmsValidationError:
    return CmsValidationError(
        code="not_found",
        message=f"Version {version_id} not found",
        field="version_id",
    )


def _validate_publish_at(publish_at: datetime, now: datetime) -> list[CmsValidationError]:
    """Scheduled time must be strictly after now."""
    # Normalize to UTC for comparison
    if publish_at.tzinfo is None:
        publish_at = publish_at.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    if publish_at <= now:
        return [
            CmsValidationError(
                code="invalid_schedule",
                message="publish_at must be in the future",
                field="publish_at",
            )
        ]
    return []


# --- Component Entry Points ---


def run_create_draft(
    inp: CreateDraftInput,
    *,
    repo: VersionRepoPort,
    time: TimePort,
) -> VersionDetailOutput:
    """
    Open a new draft as a full copy of the live content.

    Returns draft_already_exists when a draft is open; callers should
    resume that draft instead (see run_get_active).
    """
    draft = CmsVersion(
        id=uuid4(),
        status="Draft",
        notes=inp.notes,
        created_by=inp.actor,
        created_at=time.now_utc(),
    )

    try:
        created = repo.create_draft(draft)
    except CmsError as e:
        return VersionDetailOutput(version=None, errors=[to_validation_error(e)], success=False)

    return VersionDetailOutput(version=created)


def run_get_active(inp: GetActiveInput, *, repo: VersionRepoPort) -> VersionDetailOutput:
    """Return the open draft with blocks, or version=None when there is none."""
    _ = inp  # Explicitly mark as intentionally unused
    try:
        draft = repo.get_by_status("Draft")
        if draft is None:
            return VersionDetailOutput(version=None)
        detail = repo.get_detail(draft.id)
    except CmsError as e:
        return VersionDetailOutput(version=None, errors=[to_validation_error(e)], success=False)

    # Discarded between the two reads: same as no draft
    return VersionDetailOutput(version=detail)


def run_get(inp: GetVersionInput, *, repo: VersionRepoPort) -> VersionDetailOutput:
    """Get any version (including archived ones) with its blocks."""
    try:
        detail = repo.get_detail(inp.version_id)
    except CmsError as e:
        return VersionDetailOutput(version=None, errors=[to_validation_error(e)], success=False)
    if detail is None:
        return VersionDetailOutput(
            version=None, errors=[_not_found(inp.version_id)], success=False
        )
    return VersionDetailOutput(version=detail)


def run_list(inp: ListVersionsInput, *, repo: VersionRepoPort) -> VersionListOutput:
    """List version summaries, newest first."""
    _ = inp
    try:
        versions = repo.list_versions()
    except CmsError as e:
        return VersionListOutput(errors=[to_validation_error(e)], success=False)
    return VersionListOutput(versions=versions)


def run_update_notes(
    inp: UpdateNotesInput,
    *,
    repo: VersionRepoPort,
    time: TimePort,
) -> VersionOutput:
    """Replace a version's notes. Only notes are mutable here."""
    try:
        version = repo.update_notes(inp.version_id, inp.notes, inp.actor, time.now_utc())
    except CmsError as e:
        return VersionOutput(version=None, errors=[to_validation_error(e)], success=False)
    return VersionOutput(version=version)


def run_delete(inp: DeleteVersionInput, *, repo: VersionRepoPort) -> VersionOperationOutput:
    """Discard an unpublished draft."""
    try:
        repo.delete_draft(inp.version_id)
    except CmsError as e:
        return VersionOperationOutput(errors=[to_validation_error(e)], success=False)
    return VersionOperationOutput()


def run_schedule(
    inp: ScheduleVersionInput,
    *,
    repo: VersionRepoPort,
    time: TimePort,
) -> VersionOutput:
    """Schedule a draft for automatic publication."""
    try:
        version = repo.get_by_id(inp.version_id)
    except CmsError as e:
        return VersionOutput(version=None, errors=[to_validation_error(e)], success=False)
    if version is None:
        return VersionOutput(version=None, errors=[_not_found(inp.version_id)], success=False)

    if version.status != "Draft":
        return VersionOutput(
            version=None,
            errors=[
                CmsValidationError(
                    code="invalid_state",
                    message=f"Cannot schedule version in '{version.status}' status",
                    field="status",
                )
            ],
            success=False,
        )

    now = time.now_utc()
    errors = _validate_publish_at(inp.publish_at, now)
    if errors:
        return VersionOutput(version=None, errors=errors, success=False)

    try:
        scheduled = repo.set_schedule(inp.version_id, inp.publish_at, inp.actor, now)
    except CmsError as e:
        return VersionOutput(version=None, errors=[to_validation_error(e)], success=False)
    return VersionOutput(version=scheduled)


def run_cancel_schedule(
    inp: CancelScheduleInput,
    *,
    repo: VersionRepoPort,
    time: TimePort,
) -> VersionOutput:
    """Clear a draft's scheduled publication time."""
    try:
        version = repo.clear_schedule(inp.version_id, inp.actor, time.now_utc())
    except CmsError as e:
        return VersionOutput(version=None, errors=[to_validation_error(e)], success=False)
    return VersionOutput(version=version)


def run_history(inp: GetHistoryInput, *, repo: VersionRepoPort) -> HistoryOutput:
    """Audit trail of a version, oldest first."""
    try:
        entries = repo.get_history(inp.version_id)
    except CmsError as e:
        return HistoryOutput(errors=[to_validation_error(e, "version_id")], success=False)
    return HistoryOutput(entries=entries)
