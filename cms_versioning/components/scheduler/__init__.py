"""
Scheduler component - timed publication of drafts.
"""

from ._impl import SchedulerPoller
from .component import run_process_due
from .models import ProcessDueInput, ProcessDueOutput, ScheduledPublishFailure
from .ports import DueVersionRepoPort, TimePort

__all__ = [
    # Entry point
    "run_process_due",
    # Poller
    "SchedulerPoller",
    # Models
    "ProcessDueInput",
    "ProcessDueOutput",
    "ScheduledPublishFailure",
    # Ports
    "DueVersionRepoPort",
    "TimePort",
]
