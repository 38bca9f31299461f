"""
User store consumed by the identity framework.

Implements the user, password, email, login, role and queryable store
contracts on top of the repositories. Every operation is awaitable: the
synchronous repository work runs in an executor thread inside its own unit
of work, so callers never block the event loop on the database.
"""
from __future__ import annotations

import asyncio
import functools
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from zero_identity.config import get_settings
from zero_identity.db import models, schemas
from zero_identity.db.uow import UnitOfWork
from zero_identity.errors import RoleNotFoundError
from zero_identity.session import IdentitySession

logger = logging.getLogger(__name__)


class UserStore:
    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        session: Optional[IdentitySession] = None,
        executor: Optional[Executor] = None,
    ):
        if session_factory is None:
            from zero_identity.db.database import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        self._session = session or IdentitySession()
        self._owns_executor = False
        if executor is None and get_settings().store_max_workers:
            executor = ThreadPoolExecutor(
                max_workers=get_settings().store_max_workers,
                thread_name_prefix="user-store",
            )
            self._owns_executor = True
        # None runs on the event loop's default executor
        self._executor = executor

    def close(self) -> None:
        """Release the executor if this store created it; sessions are per call."""
        if self._owns_executor:
            self._executor.shutdown(wait=False)
            self._executor = None
            self._owns_executor = False

    async def _run(self, operation: str, fn: Callable[..., Any], *args: Any, key: Any = None) -> Any:
        logger.debug("user store %s key=%r", operation, key)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(self._in_unit_of_work, fn, *args))

    def _in_unit_of_work(self, fn: Callable[..., Any], *args: Any) -> Any:
        with UnitOfWork(self._session_factory) as uow:
            return fn(uow, *args)

    # User store

    async def create(self, user: models.User) -> None:
        await self._run("create", lambda uow: uow.users.insert(user), key=user.user_name)
        logger.debug("Created user id=%s user_name=%s", user.id, user.user_name)

    async def update(self, user: models.User) -> None:
        await self._run("update", lambda uow: uow.users.update(user), key=user.id)

    async def delete(self, user: models.User) -> None:
        await self._run("delete", lambda uow: uow.users.delete(user.id), key=user.id)

    async def find_by_id(self, user_id: int) -> Optional[models.User]:
        return await self._run("find_by_id", lambda uow: uow.users.first_or_default(user_id), key=user_id)

    async def find_by_name(self, user_name: str) -> Optional[models.User]:
        """Find a confirmed user of the current tenant by user name or email."""
        # Context variables do not follow work into executor threads
        tenant_id = self._session.tenant_id
        return await self._run(
            "find_by_name",
            lambda uow: uow.users.first_or_default(
                models.User.tenant_id == tenant_id,
                or_(models.User.user_name == user_name, models.User.email_address == user_name),
                models.User.is_email_confirmed.is_(True),
            ),
            key=user_name,
        )

    # Password store

    async def set_password_hash(self, user: models.User, password_hash: Optional[str]) -> None:
        await self._run("set_password_hash", lambda uow: uow.users.update_password(user.id, password_hash), key=user.id)
        user.password = password_hash

    async def get_password_hash(self, user: models.User) -> Optional[str]:
        return await self._run("get_password_hash", lambda uow: uow.users.get(user.id).password, key=user.id)

    async def has_password(self, user: models.User) -> bool:
        password = await self.get_password_hash(user)
        return bool(password)

    # Email store

    async def set_email(self, user: models.User, email: str) -> None:
        await self._run("set_email", lambda uow: uow.users.update_email(user.id, email), key=user.id)
        user.email_address = email

    async def get_email(self, user: models.User) -> str:
        return await self._run("get_email", lambda uow: uow.users.get(user.id).email_address, key=user.id)

    async def get_email_confirmed(self, user: models.User) -> bool:
        return await self._run("get_email_confirmed", lambda uow: uow.users.get(user.id).is_email_confirmed, key=user.id)

    async def set_email_confirmed(self, user: models.User, confirmed: bool) -> None:
        await self._run("set_email_confirmed", lambda uow: uow.users.update_is_email_confirmed(user.id, confirmed), key=user.id)
        user.is_email_confirmed = bool(confirmed)

    async def find_by_email(self, email: str) -> Optional[models.User]:
        return await self._run(
            "find_by_email",
            lambda uow: uow.users.first_or_default(models.User.email_address == email),
            key=email,
        )

    # Login store

    @staticmethod
    def _find_login(uow: UnitOfWork, user_id: int, login: schemas.UserLoginInfo) -> Optional[models.UserLogin]:
        return uow.user_logins.first_or_default(
            models.UserLogin.user_id == user_id,
            models.UserLogin.login_provider == login.login_provider,
            models.UserLogin.provider_key == login.provider_key,
        )

    async def add_login(self, user: models.User, login: schemas.UserLoginInfo) -> None:
        def _add(uow: UnitOfWork) -> None:
            if self._find_login(uow, user.id, login) is not None:
                logger.debug("User %s already has login %s", user.id, login.login_provider)
                return
            uow.user_logins.insert(
                models.UserLogin(
                    user_id=user.id,
                    login_provider=login.login_provider,
                    provider_key=login.provider_key,
                )
            )

        await self._run("add_login", _add, key=user.id)

    async def remove_login(self, user: models.User, login: schemas.UserLoginInfo) -> None:
        def _remove(uow: UnitOfWork) -> None:
            existing = self._find_login(uow, user.id, login)
            if existing is not None:
                uow.user_logins.delete(existing)

        await self._run("remove_login", _remove, key=user.id)

    async def get_logins(self, user: models.User) -> List[schemas.UserLoginInfo]:
        def _logins(uow: UnitOfWork) -> List[schemas.UserLoginInfo]:
            rows = uow.user_logins.query(
                lambda q: q.where(models.UserLogin.user_id == user.id).order_by(models.UserLogin.id)
            )
            return [schemas.UserLoginInfo.model_validate(row) for row in rows]

        return await self._run("get_logins", _logins, key=user.id)

    async def find(self, login: schemas.UserLoginInfo) -> Optional[models.User]:
        """Find the user linked to an external login."""
        return await self._run("find", self.find_user, login.login_provider, login.provider_key, key=login.login_provider)

    @staticmethod
    def find_user(uow: UnitOfWork, login_provider: str, provider_key: str) -> Optional[models.User]:
        rows = uow.users.query(
            lambda q: q.join(models.UserLogin, models.UserLogin.user_id == models.User.id)
            .where(
                models.UserLogin.login_provider == login_provider,
                models.UserLogin.provider_key == provider_key,
            )
            .limit(1)
        )
        return rows[0] if rows else None

    # Role store

    @staticmethod
    def _find_user_role(uow: UnitOfWork, user_id: int, role_name: str) -> Optional[models.UserRole]:
        rows = uow.user_roles.query(
            lambda q: q.join(models.Role, models.Role.id == models.UserRole.role_id)
            .where(models.UserRole.user_id == user_id, models.Role.name == role_name)
            .limit(1)
        )
        return rows[0] if rows else None

    async def add_to_role(self, user: models.User, role_name: str) -> None:
        def _add(uow: UnitOfWork) -> None:
            role = uow.roles.first_or_default(
                models.Role.tenant_id == user.tenant_id,
                models.Role.name == role_name,
            )
            if role is None:
                logger.info("Role %r not found for tenant %s", role_name, user.tenant_id)
                raise RoleNotFoundError(role_name, user.tenant_id)
            if uow.user_roles.first_or_default(
                models.UserRole.user_id == user.id,
                models.UserRole.role_id == role.id,
            ) is not None:
                logger.debug("User %s already in role %r", user.id, role_name)
                return
            uow.user_roles.insert(models.UserRole(user_id=user.id, role_id=role.id))

        await self._run("add_to_role", _add, key=user.id)

    async def remove_from_role(self, user: models.User, role_name: str) -> None:
        def _remove(uow: UnitOfWork) -> None:
            user_role = self._find_user_role(uow, user.id, role_name)
            if user_role is None:
                return
            uow.user_roles.delete(user_role.id)

        await self._run("remove_from_role", _remove, key=user.id)

    async def get_roles(self, user: models.User) -> List[str]:
        def _roles(uow: UnitOfWork) -> List[str]:
            rows = uow.user_roles.query(
                lambda q: q.join(models.Role, models.Role.id == models.UserRole.role_id)
                .where(models.UserRole.user_id == user.id)
                .order_by(models.Role.name)
            )
            return [row.role.name for row in rows]

        return await self._run("get_roles", _roles, key=user.id)

    async def is_in_role(self, user: models.User, role_name: str) -> bool:
        return await self._run(
            "is_in_role",
            lambda uow: self._find_user_role(uow, user.id, role_name) is not None,
            key=user.id,
        )

    # Queryable store

    @property
    def users(self) -> Select:
        """Unexecuted query over all users; pass to ``list_users`` to run it."""
        return select(models.User)

    async def list_users(
        self,
        statement: Optional[Select] = None,
        *,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[models.User]:
        stmt = statement if statement is not None else self.users.order_by(models.User.id)
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._run("list_users", lambda uow: list(uow.session.scalars(stmt).unique().all()))
