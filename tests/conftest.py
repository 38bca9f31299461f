from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import Session

from zero_identity.db import models
from zero_identity.db.database import SessionLocal, engine, init_schema
from zero_identity.session import IdentitySession
from zero_identity.stores import UserStore


@pytest.fixture(scope="session", autouse=True)
def create_schema_once():
    """Create all tables once per test session (SQLite in-memory resets per process)."""
    init_schema(engine)
    yield
    models.Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_data():
    """Delete all rows between tests without dropping metadata (faster)."""
    with engine.begin() as connection:
        for table in reversed(models.Base.metadata.sorted_tables):
            connection.execute(table.delete())
    yield


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def tenant_factory(db_session: Session):
    def _create(tenancy_name: str):
        tenant = models.Tenant(tenancy_name=tenancy_name, name=tenancy_name.title())
        db_session.add(tenant)
        db_session.commit()
        return tenant
    return _create


@pytest.fixture
def user_factory(db_session: Session):
    def _create(
        user_name: str,
        email: str = None,
        tenant=None,
        confirmed: bool = True,
        password: str = None,
    ):
        user = models.User(
            user_name=user_name,
            email_address=email or f"{user_name}@example.com",
            tenant_id=tenant.id if tenant is not None else None,
            is_email_confirmed=confirmed,
            password=password,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _create


@pytest.fixture
def role_factory(db_session: Session):
    def _create(name: str, tenant=None):
        role = models.Role(name=name, display_name=name.title(), tenant_id=tenant.id if tenant is not None else None)
        db_session.add(role)
        db_session.commit()
        return role
    return _create


@pytest.fixture
def identity_session():
    return IdentitySession()


@pytest.fixture
def store(identity_session):
    # One worker: the in-memory SQLite connection is shared through StaticPool
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="test-user-store")
    user_store = UserStore(session_factory=SessionLocal, session=identity_session, executor=executor)
    try:
        yield user_store
    finally:
        user_store.close()
        executor.shutdown(wait=True)
