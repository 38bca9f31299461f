"""
Generic CRUD repository over one ORM entity type.

Repositories never commit; the surrounding unit of work owns the transaction.
Writes flush so generated ids are visible to the caller immediately.
"""
from __future__ import annotations

from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ClauseElement

from zero_identity.errors import EntityNotFoundError, MultipleResultsError

T = TypeVar("T")


def _is_criterion(value: Any) -> bool:
    return isinstance(value, ClauseElement) or hasattr(value, "__clause_element__")


class Repository(Generic[T]):
    entity: Type[T]

    def __init__(self, db: Session, entity: Optional[Type[T]] = None):
        self.db = db
        if entity is not None:
            self.entity = entity
        if getattr(self, "entity", None) is None:
            raise TypeError(f"{type(self).__name__} needs an entity class")

    @property
    def entity_name(self) -> str:
        return self.entity.__name__

    def insert(self, entity: T) -> T:
        self.db.add(entity)
        self.db.flush()
        return entity

    def update(self, entity: T) -> T:
        entity_id = getattr(entity, "id", None)
        if entity_id is None:
            raise EntityNotFoundError(self.entity_name, entity_id)
        # Load first so merge() cannot silently insert a row for an unknown id
        self.get(entity_id)
        # merge() attaches entities loaded by an earlier, already closed session
        merged = self.db.merge(entity)
        self.db.flush()
        return merged

    def delete(self, entity_or_id: Any) -> bool:
        key = getattr(entity_or_id, "id", entity_or_id)
        obj = self.db.get(self.entity, key)
        if obj is None:
            return False
        self.db.delete(obj)
        self.db.flush()
        return True

    def get(self, entity_id: Any) -> T:
        obj = self.db.get(self.entity, entity_id)
        if obj is None:
            raise EntityNotFoundError(self.entity_name, entity_id)
        return obj

    def first_or_default(self, *criteria: Any) -> Optional[T]:
        """Return the row with the given id, or the first row matching ``criteria``."""
        if len(criteria) == 1 and not _is_criterion(criteria[0]):
            return self.db.get(self.entity, criteria[0])
        return self.db.scalars(self.get_all().where(*criteria).limit(1)).first()

    def single(self, *criteria: Any) -> T:
        rows = self.db.scalars(self.get_all().where(*criteria).limit(2)).all()
        if not rows:
            raise EntityNotFoundError(self.entity_name, " AND ".join(str(c) for c in criteria))
        if len(rows) > 1:
            raise MultipleResultsError(self.entity_name)
        return rows[0]

    def get_all(self) -> Select:
        """Unexecuted query over every row; compose with ``.where`` etc."""
        return select(self.entity)

    def get_all_list(self, *criteria: Any) -> List[T]:
        return list(self.db.scalars(self.get_all().where(*criteria)).all())

    def query(self, fn: Callable[[Select], Select]) -> List[Any]:
        return list(self.db.scalars(fn(self.get_all())).unique().all())

    def count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self.entity).where(*criteria)
        return int(self.db.scalar(stmt) or 0)
