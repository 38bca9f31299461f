from __future__ import annotations

from zero_identity.db import models
from .base import Repository


class UserLoginRepository(Repository[models.UserLogin]):
    entity = models.UserLogin
