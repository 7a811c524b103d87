import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Keep main's create_all away from the development database file
os.environ.setdefault("DATABASE_PATH", ":memory:")

from main import app
from database import Base, get_db
from models import Member

# Setup in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def client(db_session):
    """Create a FastAPI TestClient with overridden database dependency."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.pop(get_db, None)

@pytest.fixture
def members(db_session):
    """Create Alice, Bob and Carol, in that order."""
    created = []
    for name in ("Alice", "Bob", "Carol"):
        member = Member(display_name=name, email=f"{name.lower()}@example.com")
        db_session.add(member)
        db_session.commit()
        db_session.refresh(member)
        created.append(member)
    return created

@pytest.fixture
def group_id(client, members):
    """A group with Alice, Bob and Carol as members."""
    response = client.post("/groups", json={
        "name": "Trip",
        "member_ids": [m.id for m in members]
    })
    assert response.status_code == 200
    return response.json()["id"]
