"""
Published component - public read access to live content.
"""

from .component import (
    group_sections,
    run_get_published,
    run_get_published_block,
    run_get_published_page,
)
from .models import (
    GetPublishedBlockInput,
    GetPublishedInput,
    GetPublishedPageInput,
    PublishedBlockOutput,
    PublishedContentOutput,
)
from .ports import PublishedBlockPort

__all__ = [
    # Entry points
    "run_get_published",
    "run_get_published_block",
    "run_get_published_page",
    "group_sections",
    # Models
    "GetPublishedBlockInput",
    "GetPublishedInput",
    "GetPublishedPageInput",
    "PublishedBlockOutput",
    "PublishedContentOutput",
    # Ports
    "PublishedBlockPort",
]
