"""
Blocks component - content block store and editor dirty tracking.
"""

from ._impl import DraftEditBuffer
from .component import (
    is_valid_key,
    run_bulk_update,
    run_clone_published,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_reorder,
    run_update,
)
from .models import (
    BlockListOutput,
    BlockOperationOutput,
    BlockOutput,
    BulkUpdateInput,
    BulkUpdateItem,
    ClonePublishedInput,
    CreateBlockInput,
    DeleteBlockInput,
    GetBlockInput,
    ListBlocksInput,
    ReorderBlocksInput,
    ReorderItem,
    UpdateBlockInput,
)
from .ports import BlockRepoPort, TimePort

__all__ = [
    # Entry points
    "run_bulk_update",
    "run_clone_published",
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_reorder",
    "run_update",
    "is_valid_key",
    # Dirty tracking
    "DraftEditBuffer",
    # Input models
    "BulkUpdateInput",
    "BulkUpdateItem",
    "ClonePublishedInput",
    "CreateBlockInput",
    "DeleteBlockInput",
    "GetBlockInput",
    "ListBlocksInput",
    "ReorderBlocksInput",
    "ReorderItem",
    "UpdateBlockInput",
    # Output models
    "BlockListOutput",
    "BlockOperationOutput",
    "BlockOutput",
    # Ports
    "BlockRepoPort",
    "TimePort",
]
