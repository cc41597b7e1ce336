"""
PicPlace Backend — Data Access Layer
======================================

What:  Per-entity CRUD operations over the users and places tables, plus the
       paired-write primitive that keeps User.places consistent with Place rows.
Why:   Services never touch SQLAlchemy directly; every store failure is
       translated into exactly one PersistenceError here.
How:   A generic Repository bound to one ORM model. Operations take the
       request's AsyncSession so they join whatever transaction is open.

Paired writes:
    with_transaction(db, work) runs `work(db)` and commits. If any step raises,
    the whole session is rolled back by the database's native transaction, so
    no reader ever observes a place without its owner's reference (or the
    reverse).
"""

import logging
import uuid
from typing import Any, Awaitable, Callable, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from picplace.database import Base
from picplace.exceptions import PersistenceError, PicPlaceError
from picplace.models.place import Place
from picplace.models.user import User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
T = TypeVar("T")


def parse_id(raw: Any) -> Optional[uuid.UUID]:
    """Coerce a path/body id into a UUID; None when it cannot be one."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        return None


class Repository(Generic[ModelT]):
    """
    CRUD access for a single ORM model.

    Lookups return None (or an empty list) for misses; deciding whether a
    miss is a 404 is the service's job.
    """

    def __init__(self, model: Type[ModelT]):
        self.model = model
        self.name = model.__tablename__

    def _failure(self, operation: str, exc: SQLAlchemyError) -> PersistenceError:
        logger.error(
            "%s.%s failed: %s: %s",
            self.name,
            operation,
            type(exc).__name__,
            exc,
        )
        return PersistenceError(
            context={
                "table": self.name,
                "operation": operation,
                "error_type": type(exc).__name__,
                "integrity_violation": isinstance(exc, IntegrityError),
            }
        )

    async def find_by_id(
        self, db: AsyncSession, entity_id: Any, for_update: bool = False
    ) -> Optional[ModelT]:
        """
        Primary-key lookup.

        With for_update the row is re-read from the database (not the identity
        map) under SELECT ... FOR UPDATE, so it stays locked until the
        surrounding transaction ends. SQLite has no row locks and serializes
        writers on its database lock instead.
        """
        pk = parse_id(entity_id)
        if pk is None:
            logger.debug("%s.find_by_id: malformed id %r", self.name, entity_id)
            return None
        try:
            if for_update:
                return await db.get(self.model, pk, with_for_update=True, populate_existing=True)
            return await db.get(self.model, pk)
        except SQLAlchemyError as exc:
            raise self._failure("find_by_id", exc) from exc

    async def find_one(self, db: AsyncSession, **filters: Any) -> Optional[ModelT]:
        try:
            result = await db.execute(select(self.model).filter_by(**filters).limit(1))
            return result.scalars().first()
        except SQLAlchemyError as exc:
            raise self._failure("find_one", exc) from exc

    async def find(self, db: AsyncSession, **filters: Any) -> List[ModelT]:
        """All rows matching the equality filters, oldest first."""
        stmt = select(self.model).filter_by(**filters).order_by(self.model.created_at)
        try:
            result = await db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise self._failure("find", exc) from exc

    async def find_ids(self, db: AsyncSession, **filters: Any) -> List[str]:
        """Ids of the matching rows as strings, oldest first."""
        stmt = select(self.model.id).filter_by(**filters).order_by(self.model.created_at)
        try:
            result = await db.execute(stmt)
            return [str(pk) for pk in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise self._failure("find_ids", exc) from exc

    async def insert(self, db: AsyncSession, entity: ModelT) -> ModelT:
        try:
            db.add(entity)
            await db.flush()
        except SQLAlchemyError as exc:
            raise self._failure("insert", exc) from exc
        return entity

    async def update_fields(self, db: AsyncSession, entity: ModelT, **fields: Any) -> ModelT:
        for name, value in fields.items():
            if not hasattr(self.model, name):
                raise AttributeError(f"{self.model.__name__} has no field '{name}'")
            setattr(entity, name, value)
        try:
            await db.flush()
        except SQLAlchemyError as exc:
            raise self._failure("update_fields", exc) from exc
        return entity

    async def delete(self, db: AsyncSession, entity: ModelT) -> None:
        try:
            await db.delete(entity)
            await db.flush()
        except SQLAlchemyError as exc:
            raise self._failure("delete", exc) from exc


async def with_transaction(db: AsyncSession, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
    """
    Run a unit of work atomically and commit it.

    All writes issued by `work` succeed together or are rolled back together.
    Application errors raised inside `work` propagate unchanged after the
    rollback; raw SQLAlchemy errors (e.g. from the commit) become
    PersistenceError.
    """
    try:
        result = await work(db)
        await db.commit()
    except PicPlaceError:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Transaction failed: %s: %s", type(exc).__name__, exc)
        raise PersistenceError(context={"operation": "commit", "error_type": type(exc).__name__}) from exc
    return result


users_repo: Repository[User] = Repository(User)
places_repo: Repository[Place] = Repository(Place)
