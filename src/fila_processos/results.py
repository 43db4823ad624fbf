from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class QueryStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    CORRUPT_DATA = "corrupt_data"
    INVALID_SHAPE = "invalid_shape"
    FAILED = "failed"


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Outcome of one query: a status tag, the value (or its empty sentinel) and a message."""

    status: QueryStatus
    value: T | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is QueryStatus.OK

    @property
    def not_found(self) -> bool:
        return self.status is QueryStatus.NOT_FOUND
