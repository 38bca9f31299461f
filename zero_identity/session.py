"""
Ambient caller context for store operations.

Holds the current tenant and user ids in context variables so that each
asyncio task (and each request) sees its own values.
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_tenant_id: ContextVar[Optional[int]] = ContextVar("zero_identity_tenant_id", default=None)
_user_id: ContextVar[Optional[int]] = ContextVar("zero_identity_user_id", default=None)


class IdentitySession:
    """Read access to the caller's tenant/user plus a scoped setter."""

    @property
    def tenant_id(self) -> Optional[int]:
        # None means the host side (no tenant)
        return _tenant_id.get()

    @property
    def user_id(self) -> Optional[int]:
        return _user_id.get()

    @contextmanager
    def use(self, *, tenant_id: Optional[int] = None, user_id: Optional[int] = None) -> Iterator["IdentitySession"]:
        tenant_token = _tenant_id.set(tenant_id)
        user_token = _user_id.set(user_id)
        try:
            yield self
        finally:
            _user_id.reset(user_token)
            _tenant_id.reset(tenant_token)
