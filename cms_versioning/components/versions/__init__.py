"""
Versions component - version registry and lifecycle.
"""

from .component import (
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

__all__ = [
    # Entry points
    "run_cancel_schedule",
    "run_create_draft",
    "run_delete",
    "run_get",
    "run_get_active",
    "run_history",
    "run_list",
    "run_schedule",
    "run_update_notes",
    # Input models
    "CancelScheduleInput",
    "CreateDraftInput",
    "DeleteVersionInput",
    "GetActiveInput",
    "GetHistoryInput",
    "GetVersionInput",
    "ListVersionsInput",
    "ScheduleVersionInput",
    "UpdateNotesInput",
    # Output models
    "HistoryOutput",
    "VersionDetailOutput",
    "VersionListOutput",
    "VersionOperationOutput",
    "VersionOutput",
    # Ports
    "TimePort",
    "VersionRepoPort",
]
