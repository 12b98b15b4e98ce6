"""
Entity store port.

Records are plain dicts keyed by snake_case column names. The store owns
``id``, ``created_at`` and ``updated_at``; callers may pass an explicit
``id`` on create (users are keyed by identity-provider subject).

Missing ids raise NotFound and unique-key conflicts raise AlreadyExists.
Writes issued inside ``transaction()`` commit or roll back together.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncContextManager, Dict, List, Optional, Sequence


class Collection(str, Enum):
    """Persisted collections."""

    USERS = "users"
    COMPANIES = "companies"
    JOBS = "jobs"
    APPLICATIONS = "applications"
    AUDIT_LOGS = "audit_logs"


# Fields that must be unique within their collection
UNIQUE_FIELDS = {
    Collection.USERS: ("email",),
    Collection.COMPANIES: ("owner_uid",),
    Collection.APPLICATIONS: ("dedupe_key",),
}

# Collections that only accept inserts
APPEND_ONLY = frozenset({Collection.AUDIT_LOGS})

FILTER_OPS = ("eq", "ne", "lt", "le", "gt", "ge", "in")


@dataclass(frozen=True)
class Filter:
    """Predicate on a single field, e.g. ``Filter("status", "eq", "approved")``."""

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in FILTER_OPS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class Sort:
    field: str
    descending: bool = False


def eq(field: str, value: Any) -> Filter:
    return Filter(field, "eq", value)


Record = Dict[str, Any]


class EntityStore(ABC):
    """Storage port used by the workflow engine."""

    @abstractmethod
    async def get(self, collection: Collection, record_id: str) -> Record:
        """Return the record or raise NotFound."""

    @abstractmethod
    async def find_one(self, collection: Collection, **equals: Any) -> Optional[Record]:
        """First record (in creation order) whose fields equal ``equals``."""

    @abstractmethod
    async def query(
        self,
        collection: Collection,
        filters: Sequence[Filter] = (),
        sort: Sequence[Sort] = (),
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Record]:
        """Records matching all ``filters``; creation order breaks sort ties."""

    @abstractmethod
    async def count(self, collection: Collection, filters: Sequence[Filter] = ()) -> int:
        ...

    @abstractmethod
    async def create(self, collection: Collection, data: Record) -> Record:
        """Insert a record; raises AlreadyExists on a unique-key conflict."""

    @abstractmethod
    async def update(self, collection: Collection, record_id: str, changes: Record) -> Record:
        ...

    @abstractmethod
    async def increment(
        self, collection: Collection, record_id: str, field: str, amount: int = 1
    ) -> Record:
        """Atomically add ``amount`` to a numeric field."""

    @abstractmethod
    async def delete(self, collection: Collection, record_id: str) -> None:
        ...

    @abstractmethod
    def transaction(self) -> AsyncContextManager["EntityStore"]:
        """Group the enclosed store calls into one atomic unit."""

    async def close(self) -> None:
        """Release backend resources."""
