from .document import apply_operation, locate_task_line
from .operations import (
    AddDependency,
    AddOwnId,
    AddStar,
    AddTag,
    Operation,
    RemoveDependency,
    RemoveOwnId,
    RemoveStar,
    RemoveTag,
    SetStatus,
)
from .writer import DocumentMutator

__all__ = [
    "apply_operation",
    "locate_task_line",
    "AddDependency",
    "AddOwnId",
    "AddStar",
    "AddTag",
    "Operation",
    "RemoveDependency",
    "RemoveOwnId",
    "RemoveStar",
    "RemoveTag",
    "SetStatus",
    "DocumentMutator",
]
