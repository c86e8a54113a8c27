import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import app.db.models as models
from app.db.base import Base
from app.db.session import build_engine, build_session_factory
from app.schemas.records import (
    EntryRecord,
    GiveawayRecord,
    Record,
    ReferralCodeRecord,
    ReferralEntryRecord,
    UserRecord,
    WinnerRecord,
)
from app.store.base import UNIQUE_KEYS, EntityStore, R, UniqueViolation, validate_record

logger = logging.getLogger(__name__)

MODEL_BY_RECORD: dict[type[Record], type[Base]] = {
    UserRecord: models.User,
    GiveawayRecord: models.Giveaway,
    EntryRecord: models.Entry,
    WinnerRecord: models.Winner,
    ReferralCodeRecord: models.ReferralCode,
    ReferralEntryRecord: models.ReferralEntry,
}


def _is_unique_violation(exc: IntegrityError) -> bool:
    pgcode = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if pgcode:
        return pgcode == "23505"
    return "unique" in str(exc.orig).lower()


class SqlStore(EntityStore):
    """SQLAlchemy backing. Works against any URL the engine accepts."""

    backend_name = "sql"

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = build_engine(database_url, echo=echo)
        self._session_factory = build_session_factory(self.engine)
        self._local = threading.local()

    def create_schema(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if getattr(self._local, "session", None) is not None:
            # nested blocks join the outer transaction
            yield
            return
        session = self._session_factory()
        self._local.session = session
        try:
            yield
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            self._local.session = None
            session.close()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        current = getattr(self._local, "session", None)
        if current is not None:
            yield current
            return
        with self.transaction():
            yield self._local.session

    @staticmethod
    def _to_record(kind: type[R], row: Base) -> R:
        return kind.model_validate(row)

    def _flush(self, session: Session, kind: type[Record]) -> None:
        try:
            session.flush()
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise UniqueViolation(kind, _guess_key(kind, exc)) from exc
            raise

    def create(self, kind: type[R], data: Mapping[str, Any]) -> R:
        record = validate_record(kind, {**data, "id": None})
        model = MODEL_BY_RECORD[kind]
        with self._session() as session:
            row = model(**record.model_dump(exclude={"id"}))
            session.add(row)
            self._flush(session, kind)
            return self._to_record(kind, row)

    def get(self, kind: type[R], record_id: int) -> R | None:
        with self._session() as session:
            row = session.get(MODEL_BY_RECORD[kind], record_id)
            return self._to_record(kind, row) if row is not None else None

    def _filtered(self, kind: type[Record], filters: Mapping[str, Any]):
        model = MODEL_BY_RECORD[kind]
        stmt = select(model)
        for field, value in filters.items():
            stmt = stmt.where(getattr(model, field) == value)
        return stmt.order_by(model.id)

    def list(self, kind: type[R], **filters: Any) -> list[R]:
        with self._session() as session:
            rows = session.scalars(self._filtered(kind, filters)).all()
            return [self._to_record(kind, row) for row in rows]

    def find_one(self, kind: type[R], **filters: Any) -> R | None:
        with self._session() as session:
            row = session.scalars(self._filtered(kind, filters).limit(1)).first()
            return self._to_record(kind, row) if row is not None else None

    def count(self, kind: type[R], **filters: Any) -> int:
        model = MODEL_BY_RECORD[kind]
        stmt = select(func.count()).select_from(model)
        for field, value in filters.items():
            stmt = stmt.where(getattr(model, field) == value)
        with self._session() as session:
            return int(session.scalar(stmt) or 0)

    def update(self, kind: type[R], record_id: int, changes: Mapping[str, Any]) -> R | None:
        model = MODEL_BY_RECORD[kind]
        with self._session() as session:
            row = session.get(model, record_id)
            if row is None:
                return None
            current = self._to_record(kind, row)
            updated = validate_record(kind, {**current.model_dump(), **changes, "id": record_id})
            for field, value in updated.model_dump(exclude={"id"}).items():
                setattr(row, field, value)
            self._flush(session, kind)
            return self._to_record(kind, row)

    def delete(self, kind: type[R], record_id: int) -> bool:
        with self._session() as session:
            row = session.get(MODEL_BY_RECORD[kind], record_id)
            if row is None:
                return False
            session.delete(row)
            session.flush()
            return True


def _guess_key(kind: type[Record], exc: IntegrityError) -> tuple[str, ...] | None:
    message = str(exc.orig).lower()
    for key in UNIQUE_KEYS.get(kind, ()):
        if all(field in message for field in key):
            return key
    return None
