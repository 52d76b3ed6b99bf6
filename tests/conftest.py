"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hub.core.rbac import resolve_subject
from hub.core.rbac.subject import Subject
from hub.db.base import Base
from hub.db.models import Menu, User
from hub.db.seed import get_role_by_name, seed_rbac


@pytest.fixture
def engine():
    """In-memory SQLite engine with foreign keys enforced."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def seeded_db(db_session):
    """Session with the permission registry and default roles loaded."""
    seed_rbac(db_session)
    return db_session


@pytest.fixture
def make_user(seeded_db):
    """Create a user holding the named default roles."""
    def _make(name: str, *role_names: str) -> User:
        user = User(name=name, email=f"{name}@example.com", is_active=True)
        user.roles = [get_role_by_name(seeded_db, r) for r in role_names]
        seeded_db.add(user)
        seeded_db.commit()
        return user
    return _make


@pytest.fixture
def super_admin_user(make_user):
    return make_user("root", "super_admin")


@pytest.fixture
def admin_user(make_user):
    return make_user("alice", "admin")


@pytest.fixture
def plain_user(make_user):
    return make_user("bob", "user")


@pytest.fixture
def actor_of():
    """Resolve a User row into a Subject."""
    return resolve_subject


@pytest.fixture
def subject():
    """Build an in-memory Subject without touching the database."""
    def _build(id=1, roles=(), permissions=()) -> Subject:
        return Subject.build(id, roles=roles, permissions=permissions)
    return _build


@pytest.fixture
def menu_rows(seeded_db):
    """
    A small navigation tree:

        Dashboard            (open)
        Reports              [analytics.view]
          Sales              [analytics.export]
            Monthly          (open)
          Traffic            (open)
        Admin                [admin]
          Users              [users.manage]
    """
    def add(name, parent=None, order=0, required=None):
        menu = Menu(
            name=name,
            type="list_menu",
            parent_id=parent.id if parent else None,
            order=order,
            role_permissions_required=required or [],
        )
        seeded_db.add(menu)
        seeded_db.flush()
        return menu

    dashboard = add("Dashboard", order=0)
    reports = add("Reports", order=1, required=["analytics.view"])
    sales = add("Sales", reports, order=0, required=["analytics.export"])
    add("Monthly", sales, order=0)
    traffic = add("Traffic", reports, order=1)
    admin = add("Admin", order=2, required=["admin"])
    add("Users", admin, order=0, required=["users.manage"])
    seeded_db.commit()
    return {"dashboard": dashboard, "reports": reports, "sales": sales, "traffic": traffic, "admin": admin}


@pytest.fixture
def client(seeded_db):
    """TestClient bound to the test session."""
    from hub.api.deps import get_db
    from hub.api.main import create_app

    app = create_app()

    def override_get_db():
        yield seeded_db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer headers for a User row."""
    from hub.core.security import create_access_token

    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers
