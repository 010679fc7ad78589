from datetime import datetime
from typing import Any

from cms_versioning.domain.entities import CmsVersion, VersionStatus

# Archived is terminal. A Draft leaves the machine only by publish or delete.
TRANSITIONS: dict[VersionStatus, tuple[VersionStatus, ...]] = {
    "Draft": ("Published",),
    "Published": ("Archived",),
    "Archived": (),
}


def can_transition(current: VersionStatus, new: VersionStatus) -> bool:
    """
    Determine if a status transition is allowed.
    """
    return new in TRANSITIONS.get(current, ())


def is_mutable(status: VersionStatus) -> bool:
    """Blocks may only be written while their version is a draft."""
    return status == "Draft"


def can_edit_notes(status: VersionStatus) -> bool:
    return status != "Archived"


def transition(
    version: CmsVersion,
    new_status: VersionStatus,
    now: datetime,
    actor: str | None = None,
) -> CmsVersion:
    """
    Return a NEW CmsVersion with the updated status and stamps.
    Raises ValueError if the transition is invalid.
    """
    if not can_transition(version.status, new_status):
        raise ValueError(f"Invalid transition from {version.status} to {new_status}")

    updates: dict[str, Any] = {"status": new_status, "updated_at": now}

    if new_status == "Published":
        if version.published_at is not None:
            raise ValueError(f"Version {version.id} was already published")
        updates["published_at"] = now
        updates["published_by"] = actor
        updates["scheduled_publish_at"] = None

    return version.model_copy(update=updates)
