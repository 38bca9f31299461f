"""
Unit of work: one session, one transaction, and the repositories bound to it.

Usage::

    with UnitOfWork(SessionLocal) as uow:
        user = uow.users.get(user_id)
        uow.user_logins.insert(...)

The transaction commits when the block exits cleanly and rolls back when it
raises; the session is always closed.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from zero_identity.db.repositories import (
    RoleRepository,
    UserLoginRepository,
    UserRepository,
    UserRoleRepository,
)

logger = logging.getLogger(__name__)


class UnitOfWork:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self.session: Optional[Session] = None

    def __enter__(self) -> "UnitOfWork":
        self.session = self._session_factory()
        self.users = UserRepository(self.session)
        self.roles = RoleRepository(self.session)
        self.user_logins = UserLoginRepository(self.session)
        self.user_roles = UserRoleRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.commit()
            else:
                logger.warning("Rolling back unit of work after %s: %s", exc_type.__name__, exc)
                self.rollback()
        finally:
            self.session.close()
            self.session = None

    def commit(self) -> None:
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def rollback(self) -> None:
        self.session.rollback()
