"""
Shared fixtures: in-memory SQLite, a logged-in learner, and a TestClient.
DATABASE_URL must be set before anything imports app.config.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine, init_db
from app.main import app
from app.models import Learner
from app.routers.auth import create_token


@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def learner(db):
    row = Learner(name="Amani", pin="1234")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def other_learner(db):
    row = Learner(name="Zuri", pin="5678")
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def auth_headers(learner):
    return {"Authorization": f"Bearer {create_token(learner.id, 'learner')}"}


@pytest.fixture
def other_headers(other_learner):
    return {"Authorization": f"Bearer {create_token(other_learner.id, 'learner')}"}
