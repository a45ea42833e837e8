import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import roomdesk.main as main_module
from roomdesk.api.deps import get_db
from roomdesk.core.config import get_settings
from roomdesk.db.base import Base
from roomdesk.db.bootstrap import ensure_runtime_schema_compatibility
from roomdesk.models.profile import Profile, ProfileRole
from roomdesk.models.room import Room
from roomdesk.services.ownership_cache import clear_block_cache

GH_TEST_ROOMS = ["GH 101", "GH 102", "GH 103", "GH 1420", "GH 1430"]


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    clear_block_cache()
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
        clear_block_cache()


@pytest.fixture()
def client(engine, session_factory, monkeypatch):
    clear_block_cache()
    monkeypatch.setattr(main_module, "ensure_runtime_schema_compatibility", lambda: ensure_runtime_schema_compatibility(engine))

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    main_module.app.dependency_overrides[get_db] = override_get_db

    with TestClient(main_module.app) as test_client:
        yield test_client

    main_module.app.dependency_overrides.clear()
    clear_block_cache()


def make_token(profile_id: str) -> str:
    settings = get_settings()
    return jwt.encode({"sub": profile_id}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def auth_headers(profile_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(profile_id)}"}


@pytest.fixture()
def seeded(session_factory):
    """Admin, scheduler and two staff members plus a small room catalog."""
    with session_factory() as session:
        session.add_all(
            [
                Profile(id="admin", name="Ada Admin", email="admin@example.com", role=ProfileRole.admin),
                Profile(id="sched", name="Sam Scheduler", email="sched@example.com", role=ProfileRole.scheduler),
                Profile(id="alice", name="Alice", email="alice@example.com", role=ProfileRole.staff),
                Profile(id="bob", name="Bob", email="bob@example.com", role=ProfileRole.staff),
            ]
        )
        session.add_all(Room(name=name) for name in GH_TEST_ROOMS)
        session.commit()
    return {
        "admin": auth_headers("admin"),
        "sched": auth_headers("sched"),
        "alice": auth_headers("alice"),
        "bob": auth_headers("bob"),
    }
