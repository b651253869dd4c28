"""
SQLAlchemy backend (SQLite / PostgreSQL / MySQL via ``DATABASE_URL``).
"""
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.database import Base, build_session_factory
from app.core.errors import StoreError
from app.models.message import Message
from app.schemas.message import MessageRecord, NewMessage
from app.storage.base import MessageStore, RootFilter, utcnow

logger = logging.getLogger(__name__)


def _to_record(row: Message) -> MessageRecord:
    try:
        return MessageRecord.model_validate(row)
    except PydanticValidationError as e:
        raise StoreError(f"Malformed message row {row.id}: {e}") from e


class SQLMessageStore(MessageStore):

    def __init__(self, engine: Engine, session_factory: Optional[sessionmaker] = None):
        self.engine = engine
        self.session_factory = session_factory or build_session_factory(engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Database error: %s", e, exc_info=True)
            raise StoreError(str(e)) from e
        finally:
            db.close()

    def ensure_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self.engine, tables=[Message.__table__])
        except SQLAlchemyError as e:
            raise StoreError(f"Schema creation failed: {e}") from e

    def drop_schema(self) -> None:
        try:
            Message.__table__.drop(bind=self.engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise StoreError(f"Schema drop failed: {e}") from e

    def insert(self, new: NewMessage) -> MessageRecord:
        now = utcnow()
        with self._session() as db:
            row = Message(**new.model_dump(), created_at=now, updated_at=now)
            db.add(row)
            db.commit()
            db.refresh(row)
            return _to_record(row)

    def get(self, message_id: int) -> Optional[MessageRecord]:
        with self._session() as db:
            row = db.get(Message, message_id)
            return _to_record(row) if row else None

    def _root_query(self, flt: RootFilter):
        query = select(Message).where(Message.parent_id.is_(None))
        if flt.status is not None:
            query = query.where(Message.status == flt.status)
        if flt.language is not None:
            query = query.where(Message.language == flt.language)
        return query

    def list_roots(self, flt: RootFilter, offset: int = 0, limit: Optional[int] = None) -> List[MessageRecord]:
        query = self._root_query(flt).order_by(Message.created_at.desc(), Message.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        with self._session() as db:
            return [_to_record(row) for row in db.scalars(query).all()]

    def count_roots(self, flt: RootFilter) -> int:
        query = select(func.count()).select_from(self._root_query(flt).subquery())
        with self._session() as db:
            return db.scalar(query) or 0

    def list_replies(self, parent_ids: Sequence[int], status: Optional[str] = None) -> List[MessageRecord]:
        if not parent_ids:
            return []
        query = select(Message).where(Message.parent_id.in_(list(parent_ids)))
        if status is not None:
            query = query.where(Message.status == status)
        query = query.order_by(Message.created_at.asc(), Message.id.asc())
        with self._session() as db:
            return [_to_record(row) for row in db.scalars(query).all()]

    def update_status(self, message_id: int, status: str) -> Optional[MessageRecord]:
        with self._session() as db:
            row = db.get(Message, message_id)
            if row is None:
                return None
            row.status = status
            row.updated_at = max(utcnow(), row.created_at)
            db.commit()
            db.refresh(row)
            return _to_record(row)

    def delete_cascade(self, message_id: int) -> List[int]:
        with self._session() as db:
            reply_ids = list(db.scalars(select(Message.id).where(Message.parent_id == message_id)).all())
            if reply_ids:
                db.execute(delete(Message).where(Message.parent_id == message_id))
                db.commit()

            deleted = db.execute(delete(Message).where(Message.id == message_id))
            db.commit()

        deleted_ids = list(reply_ids)
        if deleted.rowcount:
            deleted_ids.insert(0, message_id)
        return deleted_ids

    def close(self) -> None:
        self.engine.dispose()
