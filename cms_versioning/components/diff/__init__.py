"""Diff component - block set comparison between versions."""

from .component import diff_blocks, group_by_section, run_diff
from .models import (
    BlockDiff,
    DiffOutput,
    DiffStatus,
    DiffVersionsInput,
    SectionDiff,
    VersionComparison,
)
from .ports import BlockSnapshotPort, VersionLookupPort

__all__ = [
    # Pure functions
    "diff_blocks",
    "group_by_section",
    # Entry point
    "run_diff",
    # Models
    "BlockDiff",
    "DiffOutput",
    "DiffStatus",
    "DiffVersionsInput",
    "SectionDiff",
    "VersionComparison",
    # Ports
    "BlockSnapshotPort",
    "VersionLookupPort",
]
