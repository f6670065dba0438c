"""Mutation operations understood by the document mutator."""

from dataclasses import dataclass
from typing import Optional, Union

from tasks_map.models.task import ALL_STATUSES


@dataclass(frozen=True)
class SetStatus:
    status: str

    def __post_init__(self) -> None:
        if self.status not in ALL_STATUSES:
            raise ValueError(f"Invalid status '{self.status}'. Must be one of: {ALL_STATUSES}")


@dataclass(frozen=True)
class AddTag:
    tag: str


@dataclass(frozen=True)
class RemoveTag:
    tag: str


@dataclass(frozen=True)
class AddStar:
    pass


@dataclass(frozen=True)
class RemoveStar:
    pass


@dataclass(frozen=True)
class AddDependency:
    """
    Make the target task depend on another task.

    ``dep_id`` is the blocking task's short id (inline targets); ``title`` is
    the blocking note's title (note targets).
    """

    dep_id: str
    style: str = "csv"
    title: Optional[str] = None


@dataclass(frozen=True)
class RemoveDependency:
    """``dep_id`` is a short id for inline targets and a path for note targets."""

    dep_id: str


@dataclass(frozen=True)
class AddOwnId:
    own_id: str
    style: str = "csv"


@dataclass(frozen=True)
class RemoveOwnId:
    own_id: str


Operation = Union[
    SetStatus,
    AddTag,
    RemoveTag,
    AddStar,
    RemoveStar,
    AddDependency,
    RemoveDependency,
    AddOwnId,
    RemoveOwnId,
]
