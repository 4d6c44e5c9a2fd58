"""
Soft-delete lifecycle for models with a nullable deleted_at column.

States: LIVE (deleted_at NULL), SOFT_DELETED (deleted_at set), HARD_DELETED (row gone).
Each transition is one UPDATE/DELETE keyed by id whose WHERE clause carries the
precondition, so a concurrent caller that loses the race sees rowcount 0 and fails
with NotFoundError/ConflictError instead of overwriting state.
"""

import enum
import logging
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, delete, select, update
from sqlalchemy.orm import Session

from strongroom.core.errors import ConflictError, NotFoundError
from strongroom.models.base import utcnow

logger = logging.getLogger(__name__)

M = TypeVar("M")


class LifecycleState(str, enum.Enum):
    LIVE = "LIVE"
    SOFT_DELETED = "SOFT_DELETED"
    HARD_DELETED = "HARD_DELETED"


class SoftDeleteLifecycle(Generic[M]):
    """Transitions and visibility rule for one soft-deletable model."""

    def __init__(self, model: type[M], label: str | None = None) -> None:
        self.model = model
        self.label = label or model.__name__

    def _not_found(self, entity_id: str) -> NotFoundError:
        return NotFoundError(f"{self.label} with ID {entity_id} not found")

    def live_select(self) -> Select:
        """Default read scope: rows that are not soft-deleted."""
        return select(self.model).where(self.model.deleted_at.is_(None))

    def find_live(self, session: Session, entity_id: str) -> M | None:
        stmt = self.live_select().where(self.model.id == entity_id)
        return session.scalars(stmt.execution_options(populate_existing=True)).one_or_none()

    def find_any(self, session: Session, entity_id: str) -> M | None:
        """Lookup that ignores the soft-delete filter."""
        stmt = select(self.model).where(self.model.id == entity_id)
        return session.scalars(stmt.execution_options(populate_existing=True)).one_or_none()

    def get_live(self, session: Session, entity_id: str) -> M:
        entity = self.find_live(session, entity_id)
        if entity is None:
            raise self._not_found(entity_id)
        return entity

    def get_any(self, session: Session, entity_id: str) -> M:
        entity = self.find_any(session, entity_id)
        if entity is None:
            raise self._not_found(entity_id)
        return entity

    def state_of(self, session: Session, entity_id: str) -> LifecycleState:
        entity = self.find_any(session, entity_id)
        if entity is None:
            return LifecycleState.HARD_DELETED
        if entity.deleted_at is not None:
            return LifecycleState.SOFT_DELETED
        return LifecycleState.LIVE

    def soft_delete(self, session: Session, entity_id: str) -> None:
        """LIVE -> SOFT_DELETED. NotFoundError if absent or already soft-deleted."""
        result = session.execute(
            update(self.model)
            .where(self.model.id == entity_id, self.model.deleted_at.is_(None))
            .values(deleted_at=utcnow())
        )
        if result.rowcount == 0:
            session.rollback()
            raise self._not_found(entity_id)
        session.commit()
        logger.info("%s soft-deleted: %s", self.label, entity_id)

    def restore(self, session: Session, entity_id: str) -> M:
        """
        SOFT_DELETED -> LIVE.

        NotFoundError if the row never existed (or was hard-deleted); ConflictError if
        it exists but is not soft-deleted.
        """
        result = session.execute(
            update(self.model)
            .where(self.model.id == entity_id, self.model.deleted_at.is_not(None))
            .values(deleted_at=None)
        )
        if result.rowcount == 0:
            session.rollback()
            if self.find_any(session, entity_id) is None:
                raise self._not_found(entity_id)
            raise ConflictError(f"{self.label} with ID {entity_id} is not deleted")
        session.commit()
        logger.info("%s restored: %s", self.label, entity_id)
        return self.get_live(session, entity_id)

    def hard_delete(self, session: Session, entity_id: str) -> None:
        """LIVE or SOFT_DELETED -> HARD_DELETED (row removed). Irreversible."""
        result = session.execute(delete(self.model).where(self.model.id == entity_id))
        if result.rowcount == 0:
            session.rollback()
            raise self._not_found(entity_id)
        session.commit()
        logger.info("%s permanently deleted: %s", self.label, entity_id)

    def update_live(self, session: Session, entity_id: str, **values: Any) -> M:
        """Overwrite columns on a live row; NotFoundError if absent or soft-deleted."""
        result = session.execute(
            update(self.model)
            .where(self.model.id == entity_id, self.model.deleted_at.is_(None))
            .values(**values)
        )
        if result.rowcount == 0:
            session.rollback()
            raise self._not_found(entity_id)
        session.commit()
        return self.get_live(session, entity_id)
