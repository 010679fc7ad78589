"""
Scheduler component - publish drafts whose scheduled time has elapsed.

Each due version goes through the publication workflow on its own; a
failure is logged and recorded and the scan moves on.

Overlap protection:
- The publish transaction only flips a row that is still a Draft
- Scans in this process are serialized by a module lock
- A version id is attempted at most once per scan
"""

from __future__ import annotations

import logging
import threading
from uuid import UUID

from cms_versioning.components.publish import PublishVersionInput, run_publish
from cms_versioning.domain.errors import CmsError, to_validation_error

from .models import ProcessDueInput, ProcessDueOutput, ScheduledPublishFailure
from .ports import DueVersionRepoPort, TimePort

logger = logging.getLogger(__name__)

_scan_lock = threading.Lock()


def run_process_due(
    inp: ProcessDueInput,
    *,
    repo: DueVersionRepoPort,
    time: TimePort,
) -> ProcessDueOutput:
    """
    Publish every Draft with scheduled_publish_at <= now.

    Only one Draft can exist, so a scan normally publishes at most one
    version; max_versions bounds the work regardless.
    """
    with _scan_lock:
        now = inp.now or time.now_utc()
        try:
            due = repo.list_due(now, limit=inp.max_versions)
        except CmsError as e:
            logger.warning("Scheduler scan could not list due versions: %s", e)
            return ProcessDueOutput(errors=[to_validation_error(e)], success=False)

        published: list[UUID] = []
        failures: list[ScheduledPublishFailure] = []
        skipped: list[UUID] = []
        seen: set[UUID] = set()

        for version in due:
            if version.id in seen:
                skipped.append(version.id)
                continue
            seen.add(version.id)

            try:
                result = run_publish(
                    PublishVersionInput(version_id=version.id, actor=inp.actor),
                    repo=repo,
                    time=time,
                )
            except Exception as e:
                logger.exception("Scheduled publish of version %s raised", version.id)
                failures.append(
                    ScheduledPublishFailure(
                        version_id=version.id, code="unexpected", message=str(e)
                    )
                )
                continue

            if result.success:
                published.append(version.id)
                logger.info(
                    "Scheduled publish of version %s (due %s) succeeded",
                    version.id,
                    version.scheduled_publish_at,
                )
            else:
                err = result.errors[0]
                logger.warning(
                    "Scheduled publish of version %s failed: %s", version.id, err.message
                )
                failures.append(
                    ScheduledPublishFailure(
                        version_id=version.id, code=err.code, message=err.message
                    )
                )

    if published or failures:
        logger.info(
            "Scheduler scan at %s: %d published, %d failed",
            now.isoformat(),
            len(published),
            len(failures),
        )

    return ProcessDueOutput(
        published=tuple(published),
        failures=tuple(failures),
        skipped=tuple(skipped),
        success=not failures,
    )
