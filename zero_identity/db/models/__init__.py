"""
Domain-split SQLAlchemy models.

Exposes `Base`, `now_utc`, and all ORM classes from a single import path.
"""

from .base import Base, BigIntId, now_utc  # re-export

from .tenants import Tenant
from .users import User
from .roles import Role, UserRole
from .logins import UserLogin

__all__ = [
    # base
    "Base",
    "BigIntId",
    "now_utc",
    # tenancy
    "Tenant",
    # users/roles/logins
    "User",
    "Role",
    "UserRole",
    "UserLogin",
]
