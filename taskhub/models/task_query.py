"""Query request and paged response shapes for task listing."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from pymongo import ASCENDING, DESCENDING

from taskhub.models.task_model import Task

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20


class TaskStatus(Enum):
    ALL = "all"
    DONE = "done"
    UNDONE = "undone"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"

    @property
    def direction(self):
        return ASCENDING if self is SortOrder.ASC else DESCENDING


class SortField(Enum):
    """Whitelisted sort fields, mapped to the stored key they order by."""

    TITLE = "title"
    CATEGORY = "category"
    PRIORITY = "priority"
    CREATED_AT = "createdAt"

    @property
    def sort_key(self):
        return _SORT_KEYS[self]

    @classmethod
    def parse(cls, value) -> Optional["SortField"]:
        """Return the field named by ``value``, or None if it is not whitelisted."""
        try:
            return cls(value)
        except ValueError:
            return None


# "category" orders by the joined category's name
_SORT_KEYS = {
    SortField.TITLE: "title",
    SortField.CATEGORY: "category.name",
    SortField.PRIORITY: "priority",
    SortField.CREATED_AT: "created_at",
}


@dataclass
class TaskQuery:
    """A listing request.

    ``sort_field`` keeps the raw requested name: an unknown field is not an
    error, it falls back to the default ordering.
    """

    search: Optional[str] = None
    status: Optional[TaskStatus] = None
    category: Optional[str] = None
    sort_field: Optional[str] = None
    sort_by: Optional[SortOrder] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self):
        return (self.page - 1) * self.limit

    def resolve_sort(self):
        """Return the ``(key, direction)`` pairs for this request.

        Only a whitelisted field paired with a direction is honored; anything
        else orders by creation time, newest first. ``_id`` follows in the
        same direction so ties never straddle a page boundary.
        """
        field_ = SortField.parse(self.sort_field) if self.sort_field else None
        if field_ is None or self.sort_by is None:
            return [("created_at", DESCENDING), ("_id", DESCENDING)]
        direction = self.sort_by.direction
        return [(field_.sort_key, direction), ("_id", direction)]


@dataclass
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def pages(self):
        return math.ceil(self.total / self.limit) if self.total else 0

    def to_dict(self):
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


@dataclass
class TaskPage:
    pagination: Pagination
    tasks: List[Task] = field(default_factory=list)

    def to_dict(self):
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "pagination": self.pagination.to_dict(),
        }
