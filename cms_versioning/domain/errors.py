"""
Error taxonomy for the versioning engine.

Store adapters raise these; components translate them into
CmsValidationError entries on their outputs. Every subclass carries a
stable `code` used by the HTTP layer to pick a status.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


class CmsError(Exception):
    """Base error for all versioning operations."""

    code = "cms_error"


class NotFoundError(CmsError):
    """Referenced version or block does not exist."""

    code = "not_found"

    def __init__(self, kind: str, ident: UUID | str) -> None:
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind} {ident} not found")


class InvalidStateError(CmsError):
    """Operation not permitted in the version's current status."""

    code = "invalid_state"

    def __init__(self, version_id: UUID, status: str, operation: str) -> None:
        self.version_id = version_id
        self.status = status
        self.operation = operation
        super().__init__(f"Cannot {operation} version {version_id} in '{status}' status")


class DraftAlreadyExistsError(CmsError):
    """A draft version is already open."""

    code = "draft_already_exists"

    def __init__(self, existing_id: UUID | None = None) -> None:
        self.existing_id = existing_id
        msg = "A draft version already exists"
        if existing_id:
            msg += f": {existing_id}"
        super().__init__(msg)


class DuplicateKeyError(CmsError):
    """Block key already used for this version and language."""

    code = "duplicate_key"

    def __init__(self, version_id: UUID, block_key: str, language: str) -> None:
        self.version_id = version_id
        self.block_key = block_key
        self.language = language
        super().__init__(
            f"Block '{block_key}' ({language}) already exists in version {version_id}"
        )


class InvalidScheduleError(CmsError):
    """Scheduled time is not strictly in the future."""

    code = "invalid_schedule"


@dataclass(frozen=True)
class BulkItemFailure:
    """One rejected item of a batch write."""

    block_id: UUID
    reason: str


class BulkUpdateError(CmsError):
    """One or more batch items were invalid; nothing was written."""

    code = "bulk_update_failure"

    def __init__(self, failures: list[BulkItemFailure]) -> None:
        self.failures = failures
        ids = ", ".join(str(f.block_id) for f in failures)
        super().__init__(f"Batch rejected, {len(failures)} invalid item(s): {ids}")


class TransientStoreError(CmsError):
    """Persistence failure (lock timeout, busy database); safe to retry."""

    code = "transient"


# --- Output error records ---


@dataclass(frozen=True)
class CmsValidationError:
    """Error entry carried on component outputs."""

    code: str
    message: str
    field: str | None = None
    failures: tuple[BulkItemFailure, ...] = ()


def to_validation_error(exc: CmsError, field: str | None = None) -> CmsValidationError:
    """Convert a raised CmsError into an output error entry."""
    failures: tuple[BulkItemFailure, ...] = ()
    if isinstance(exc, BulkUpdateError):
        failures = tuple(exc.failures)
    return CmsValidationError(code=exc.code, message=str(exc), field=field, failures=failures)
