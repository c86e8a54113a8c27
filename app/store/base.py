"""Entity store capability shared by the in-memory and SQL backings."""
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Mapping, TypeVar

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationError
from app.schemas.records import (
    EntryRecord,
    Record,
    ReferralCodeRecord,
    UserRecord,
    WinnerRecord,
)

R = TypeVar("R", bound=Record)

# Field tuples that must be unique per kind. The SQL models declare the same
# constraints; MemoryStore keeps a hash index for each.
UNIQUE_KEYS: dict[type[Record], tuple[tuple[str, ...], ...]] = {
    UserRecord: (("username",), ("email",)),
    EntryRecord: (("user_id", "giveaway_id", "entry_source"),),
    WinnerRecord: (("giveaway_id",),),
    ReferralCodeRecord: (("code",),),
}


class StoreError(Exception):
    pass


class UniqueViolation(StoreError):
    def __init__(self, kind: type[Record], key: tuple[str, ...] | None = None):
        self.kind = kind
        self.key = key
        fields = ", ".join(key) if key else "unique key"
        super().__init__(f"{kind.__name__} violates unique ({fields})")


def validate_record(kind: type[R], data: Mapping[str, Any]) -> R:
    try:
        return kind.model_validate(dict(data))
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ValidationError(f"Invalid {kind.__name__}: {problems}") from exc


class EntityStore(ABC):
    """Identifier-keyed storage for every record kind.

    Ids are assigned per kind, sequentially from 1, and never reused. Reads
    return fresh copies; callers never share mutable state with the store.
    Unique keys from ``UNIQUE_KEYS`` are enforced atomically with the write
    and surface as ``UniqueViolation``.
    """

    backend_name = "abstract"

    @abstractmethod
    def create(self, kind: type[R], data: Mapping[str, Any]) -> R: ...

    @abstractmethod
    def get(self, kind: type[R], record_id: int) -> R | None: ...

    @abstractmethod
    def list(self, kind: type[R], **filters: Any) -> list[R]: ...

    @abstractmethod
    def update(self, kind: type[R], record_id: int, changes: Mapping[str, Any]) -> R | None: ...

    @abstractmethod
    def delete(self, kind: type[R], record_id: int) -> bool: ...

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """All store calls inside the block commit together or not at all."""

    def find_one(self, kind: type[R], **filters: Any) -> R | None:
        rows = self.list(kind, **filters)
        return rows[0] if rows else None

    def count(self, kind: type[R], **filters: Any) -> int:
        return len(self.list(kind, **filters))

    def create_schema(self) -> None:
        pass

    def close(self) -> None:
        pass
