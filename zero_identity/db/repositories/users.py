"""
User repository: generic CRUD plus the single-column updates used by the
password and email stores.
"""
from __future__ import annotations

from typing import Optional

from zero_identity.db import models
from .base import Repository


class UserRepository(Repository[models.User]):
    entity = models.User

    def _set(self, user_id: int, **values) -> models.User:
        user = self.get(user_id)
        for key, value in values.items():
            setattr(user, key, value)
        self.db.flush()
        return user

    def update_password(self, user_id: int, password_hash: Optional[str]) -> models.User:
        return self._set(user_id, password=password_hash)

    def update_email(self, user_id: int, email_address: str) -> models.User:
        return self._set(user_id, email_address=email_address)

    def update_is_email_confirmed(self, user_id: int, confirmed: bool) -> models.User:
        return self._set(user_id, is_email_confirmed=bool(confirmed))
