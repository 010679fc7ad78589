"""
Publication workflow - promote a draft to the live version.

Publishing is a single atomic swap: the previous Published version becomes
Archived and the target Draft becomes Published, or nothing changes.
Publishing is not idempotent; a second call on the same version fails with
invalid_state. No follow-up draft is created.
"""

from __future__ import annotations

import logging

from cms_versioning.domain.errors import CmsError, to_validation_error

from .models import PublishOutput, PublishVersionInput
from .ports import PublishRepoPort, TimePort

logger = logging.getLogger(__name__)


def run_publish(
    inp: PublishVersionInput,
    *,
    repo: PublishRepoPort,
    time: TimePort,
) -> PublishOutput:
    """Publish a draft, archiving whatever was live before."""
    try:
        version = repo.publish(inp.version_id, inp.actor, time.now_utc())
    except CmsError as e:
        logger.info("Publish of version %s rejected: %s", inp.version_id, e)
        return PublishOutput(
            version=None, errors=[to_validation_error(e, "version_id")], success=False
        )
    return PublishOutput(version=version)
