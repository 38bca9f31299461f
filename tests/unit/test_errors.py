from zero_identity.errors import (
    ConfigurationError,
    EntityNotFoundError,
    IdentityStoreError,
    MultipleResultsError,
    RoleNotFoundError,
)


def test_hierarchy():
    assert issubclass(ConfigurationError, IdentityStoreError)
    assert issubclass(EntityNotFoundError, IdentityStoreError)
    assert issubclass(RoleNotFoundError, EntityNotFoundError)
    assert issubclass(MultipleResultsError, IdentityStoreError)


def test_messages_and_attributes():
    err = EntityNotFoundError("User", 7)
    assert str(err) == "User not found: 7"
    assert (err.entity, err.key) == ("User", 7)

    role_err = RoleNotFoundError("Admin", tenant_id=3)
    assert str(role_err) == "Role not found: 'Admin'"
    assert (role_err.role_name, role_err.tenant_id) == ("Admin", 3)

    assert "UserRole" in str(MultipleResultsError("UserRole"))
