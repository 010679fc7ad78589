from typing import Any, NoReturn

from fastapi import HTTPException

from cms_versioning.domain.errors import CmsValidationError

STATUS_BY_CODE: dict[str, int] = {
    "not_found": 404,
    "invalid_state": 409,
    "draft_already_exists": 409,
    "duplicate_key": 409,
    "invalid_schedule": 422,
    "bulk_update_failure": 422,
    "invalid_input": 422,
    "transient": 503,
}


def error_detail(err: CmsValidationError) -> dict[str, Any]:
    detail: dict[str, Any] = {"code": err.code, "message": err.message}
    if err.field:
        detail["field"] = err.field
    if err.failures:
        detail["failures"] = [
            {"blockId": str(f.block_id), "reason": f.reason} for f in err.failures
        ]
    return detail


def raise_for_errors(errors: list[CmsValidationError]) -> NoReturn:
    """Turn the first component error into an HTTPException."""
    if not errors:
        raise HTTPException(status_code=500, detail="Operation failed without an error")
    err = errors[0]
    raise HTTPException(
        status_code=STATUS_BY_CODE.get(err.code, 400),
        detail=error_detail(err),
    )
