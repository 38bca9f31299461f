from __future__ import annotations

from zero_identity.db import models
from .base import Repository


class RoleRepository(Repository[models.Role]):
    entity = models.Role


class UserRoleRepository(Repository[models.UserRole]):
    entity = models.UserRole
