"""
Domain-split Pydantic schemas.
"""

from .users import UserBase, UserCreate, User
from .roles import RoleBase, RoleCreate, Role
from .logins import UserLoginInfo

__all__ = [
    "UserBase",
    "UserCreate",
    "User",
    "RoleBase",
    "RoleCreate",
    "Role",
    "UserLoginInfo",
]
