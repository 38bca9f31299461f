"""
Per-entity repositories for database access.

Each repository wraps one ORM entity behind the generic CRUD interface in
`base.Repository`; specialised updates live on the entity's subclass.
"""
from .base import Repository
from .users import UserRepository
from .roles import RoleRepository, UserRoleRepository
from .logins import UserLoginRepository

__all__ = [
    "Repository",
    "UserRepository",
    "RoleRepository",
    "UserRoleRepository",
    "UserLoginRepository",
]
