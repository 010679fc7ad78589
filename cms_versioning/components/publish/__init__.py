"""
Publish component - atomic archive-then-publish.
"""

from .component import run_publish
from .models import PublishOutput, PublishVersionInput
from .ports import PublishRepoPort, TimePort

__all__ = [
    # Entry point
    "run_publish",
    # Models
    "PublishOutput",
    "PublishVersionInput",
    # Ports
    "PublishRepoPort",
    "TimePort",
]
