import logging

import pytest
from sqlalchemy.exc import IntegrityError

from zero_identity.db import models, schemas
from zero_identity.db.database import SessionLocal
from zero_identity.errors import EntityNotFoundError, RoleNotFoundError


def _reload(model, entity_id):
    db = SessionLocal()
    try:
        return db.get(model, entity_id)
    finally:
        db.close()


# User store

@pytest.mark.asyncio
async def test_create_assigns_id_and_find_by_id(store):
    user = models.User(user_name="alice", email_address="alice@example.com")
    await store.create(user)
    assert user.id is not None

    found = await store.find_by_id(user.id)
    assert found is not None
    assert found.user_name == "alice"
    assert found.is_email_confirmed is False


@pytest.mark.asyncio
async def test_find_by_id_unknown_returns_none(store):
    assert await store.find_by_id(424242) is None


@pytest.mark.asyncio
async def test_update_persists_changes(store):
    user = models.User(user_name="bob", email_address="bob@example.com")
    await store.create(user)

    user.name = "Bob"
    user.surname = "Builder"
    await store.update(user)

    stored = _reload(models.User, user.id)
    assert (stored.name, stored.surname) == ("Bob", "Builder")


@pytest.mark.asyncio
async def test_delete_removes_user(store, user_factory):
    user = user_factory("carol")
    await store.delete(user)
    assert await store.find_by_id(user.id) is None


@pytest.mark.asyncio
async def test_delete_cascades_roles_and_logins(store, user_factory, role_factory):
    role_factory("Admin")
    login = schemas.UserLoginInfo(login_provider="Google", provider_key="k1")
    old = user_factory("old")
    await store.add_to_role(old, "Admin")
    await store.add_login(old, login)

    await store.delete(old)
    new = user_factory("new")

    assert await store.get_roles(new) == []
    assert await store.get_logins(new) == []
    assert await store.find(login) is None
    db = SessionLocal()
    try:
        assert db.query(models.UserRole).count() == 0
        assert db.query(models.UserLogin).count() == 0
    finally:
        db.close()


@pytest.mark.asyncio
async def test_update_unknown_user_raises_without_inserting(store):
    ghost = models.User(id=999, user_name="ghost", email_address="ghost@example.com")
    with pytest.raises(EntityNotFoundError):
        await store.update(ghost)
    assert await store.find_by_id(999) is None


@pytest.mark.asyncio
async def test_operations_log_their_key(store, user_factory, caplog):
    user = user_factory("kate")
    caplog.set_level(logging.DEBUG, logger="zero_identity.stores.user_store")

    await store.get_email(user)
    await store.find_by_name("kate")

    messages = [r.getMessage() for r in caplog.records if r.name == "zero_identity.stores.user_store"]
    assert f"user store get_email key={user.id!r}" in messages
    assert "user store find_by_name key='kate'" in messages


@pytest.mark.asyncio
async def test_find_by_name_matches_user_name_or_email(store, user_factory):
    user = user_factory("dave", email="dave@corp.test")

    by_name = await store.find_by_name("dave")
    by_email = await store.find_by_name("dave@corp.test")
    assert by_name.id == user.id
    assert by_email.id == user.id
    assert await store.find_by_name("nobody") is None


@pytest.mark.asyncio
async def test_find_by_name_requires_confirmed_email(store, user_factory):
    user_factory("erin", confirmed=False)
    assert await store.find_by_name("erin") is None


@pytest.mark.asyncio
async def test_find_by_name_is_scoped_to_current_tenant(store, identity_session, user_factory, tenant_factory):
    acme = tenant_factory("acme")
    globex = tenant_factory("globex")
    acme_user = user_factory("frank", tenant=acme)
    globex_user = user_factory("frank", email="frank@globex.test", tenant=globex)
    user_factory("host-admin")

    with identity_session.use(tenant_id=acme.id):
        found = await store.find_by_name("frank")
        assert found.id == acme_user.id
        assert await store.find_by_name("host-admin") is None

    with identity_session.use(tenant_id=globex.id):
        assert (await store.find_by_name("frank")).id == globex_user.id

    # Host side (no tenant) only sees tenant-less users
    assert await store.find_by_name("frank") is None
    assert (await store.find_by_name("host-admin")).tenant_id is None


# Password store

@pytest.mark.asyncio
async def test_password_hash_roundtrip(store, user_factory):
    user = user_factory("grace")
    assert await store.has_password(user) is False

    await store.set_password_hash(user, "pbkdf2$abc")
    assert user.password == "pbkdf2$abc"
    assert await store.get_password_hash(user) == "pbkdf2$abc"
    assert await store.has_password(user) is True


@pytest.mark.asyncio
async def test_has_password_false_for_empty_hash(store, user_factory):
    user = user_factory("heidi", password="")
    assert await store.has_password(user) is False


@pytest.mark.asyncio
async def test_password_reads_use_stored_row(store, user_factory):
    user = user_factory("ivan", password="stored-hash")
    user.password = "stale-in-memory"
    assert await store.get_password_hash(user) == "stored-hash"


@pytest.mark.asyncio
async def test_password_ops_on_unknown_user_raise(store):
    ghost = models.User(id=999, user_name="ghost", email_address="ghost@example.com")
    with pytest.raises(EntityNotFoundError):
        await store.get_password_hash(ghost)
    with pytest.raises(EntityNotFoundError):
        await store.set_password_hash(ghost, "x")


# Email store

@pytest.mark.asyncio
async def test_email_get_set_and_confirmation(store, user_factory):
    user = user_factory("judy", confirmed=False)
    assert await store.get_email(user) == "judy@example.com"
    assert await store.get_email_confirmed(user) is False

    await store.set_email(user, "judy@new.test")
    await store.set_email_confirmed(user, True)

    assert user.email_address == "judy@new.test"
    assert await store.get_email(user) == "judy@new.test"
    assert await store.get_email_confirmed(user) is True
    assert _reload(models.User, user.id).is_email_confirmed is True


@pytest.mark.asyncio
async def test_find_by_email_ignores_tenant(store, identity_session, user_factory, tenant_factory):
    acme = tenant_factory("acme")
    globex = tenant_factory("globex")
    user = user_factory("mallory", email="mallory@acme.test", tenant=acme, confirmed=False)

    with identity_session.use(tenant_id=globex.id):
        found = await store.find_by_email("mallory@acme.test")
        assert found.id == user.id
        assert await store.find_by_email("missing@acme.test") is None


# Login store

@pytest.mark.asyncio
async def test_add_and_get_logins(store, user_factory):
    user = user_factory("oscar")
    google = schemas.UserLoginInfo(login_provider="Google", provider_key="g-123")
    github = schemas.UserLoginInfo(login_provider="GitHub", provider_key="gh-9")

    await store.add_login(user, google)
    await store.add_login(user, github)
    await store.add_login(user, google)  # duplicate is ignored

    logins = await store.get_logins(user)
    assert logins == [google, github]


@pytest.mark.asyncio
async def test_find_by_login(store, user_factory):
    oscar = user_factory("oscar")
    peggy = user_factory("peggy")
    await store.add_login(oscar, schemas.UserLoginInfo(login_provider="Google", provider_key="g-1"))
    await store.add_login(peggy, schemas.UserLoginInfo(login_provider="Google", provider_key="g-2"))

    found = await store.find(schemas.UserLoginInfo(login_provider="Google", provider_key="g-2"))
    assert found.id == peggy.id
    assert await store.find(schemas.UserLoginInfo(login_provider="Twitter", provider_key="g-2")) is None


@pytest.mark.asyncio
async def test_remove_login(store, user_factory):
    user = user_factory("trent")
    login = schemas.UserLoginInfo(login_provider="Google", provider_key="g-7")
    await store.add_login(user, login)

    await store.remove_login(user, login)
    assert await store.get_logins(user) == []
    assert await store.find(login) is None

    # Removing a login that is not there is a no-op
    await store.remove_login(user, login)


@pytest.mark.asyncio
async def test_login_key_cannot_belong_to_two_users(store, user_factory):
    login = schemas.UserLoginInfo(login_provider="Google", provider_key="shared")
    await store.add_login(user_factory("victor"), login)
    with pytest.raises(IntegrityError):
        await store.add_login(user_factory("walter"), login)


# Role store

@pytest.mark.asyncio
async def test_role_membership_lifecycle(store, user_factory, role_factory):
    user = user_factory("sybil")
    role_factory("Admin")
    role_factory("Editor")

    await store.add_to_role(user, "Editor")
    await store.add_to_role(user, "Admin")
    await store.add_to_role(user, "Admin")  # already a member

    assert await store.get_roles(user) == ["Admin", "Editor"]
    assert await store.is_in_role(user, "Admin") is True

    await store.remove_from_role(user, "Admin")
    assert await store.is_in_role(user, "Admin") is False
    assert await store.get_roles(user) == ["Editor"]

    await store.remove_from_role(user, "Admin")


@pytest.mark.asyncio
async def test_add_to_unknown_role_raises(store, user_factory):
    user = user_factory("rupert")
    with pytest.raises(RoleNotFoundError) as exc:
        await store.add_to_role(user, "Missing")
    assert exc.value.role_name == "Missing"


@pytest.mark.asyncio
async def test_add_to_role_resolves_role_in_user_tenant(store, user_factory, role_factory, tenant_factory):
    acme = tenant_factory("acme")
    role_factory("Admin")
    tenant_admin = role_factory("Admin", tenant=acme)
    user = user_factory("uma", tenant=acme)

    await store.add_to_role(user, "Admin")

    db = SessionLocal()
    try:
        memberships = db.query(models.UserRole).filter(models.UserRole.user_id == user.id).all()
        assert [m.role_id for m in memberships] == [tenant_admin.id]
    finally:
        db.close()


@pytest.mark.asyncio
async def test_get_roles_without_memberships(store, user_factory):
    assert await store.get_roles(user_factory("nobody")) == []


# Queryable store

@pytest.mark.asyncio
async def test_users_query_is_composable(store, user_factory):
    user_factory("anna", confirmed=True)
    user_factory("bert", confirmed=False)
    user_factory("cleo", confirmed=True)

    stmt = store.users.where(models.User.is_email_confirmed.is_(True)).order_by(models.User.user_name)
    confirmed = await store.list_users(stmt)
    assert [u.user_name for u in confirmed] == ["anna", "cleo"]


@pytest.mark.asyncio
async def test_list_users_paging(store, user_factory):
    for name in ("u1", "u2", "u3", "u4"):
        user_factory(name)

    page = await store.list_users(skip=1, limit=2)
    assert [u.user_name for u in page] == ["u2", "u3"]
    assert len(await store.list_users()) == 4
