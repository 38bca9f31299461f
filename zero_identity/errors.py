"""
Exceptions raised by the identity store and its repositories.
"""
from typing import Any


class IdentityStoreError(Exception):
    """Base class for identity store failures."""


class ConfigurationError(IdentityStoreError):
    pass


class EntityNotFoundError(IdentityStoreError):
    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key!r}")


class RoleNotFoundError(EntityNotFoundError):
    def __init__(self, role_name: str, tenant_id: Any = None):
        self.role_name = role_name
        self.tenant_id = tenant_id
        super().__init__("Role", role_name)


class MultipleResultsError(IdentityStoreError):
    """More than one row matched a lookup that expects exactly one."""

    def __init__(self, entity: str):
        self.entity = entity
        super().__init__(f"More than one {entity} matched")
