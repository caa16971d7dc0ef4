# tests/conftest.py
"""Shared fixtures: a fresh in-memory SQLite database per test, account factories, an API client."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from datetime import datetime, timedelta
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import Base, build_engine, create_tables
from app.models.admin import Admin
from app.models.parking_slot import ParkingSlot
from app.models.user import User
from app.services.security import create_access_token, hash_password

PASSWORD = "secret123"


@pytest.fixture
def db():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_tables(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(status="approved", verified=True, email=None, name="Test Driver", plate="RAB123A"):
        counter["n"] += 1
        user = User(
            name=name,
            email=email or f"driver{counter['n']}@example.com",
            password=hash_password(PASSWORD),
            plate_number=plate,
            status=status,
            is_email_verified=verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_admin(db):
    def _make(email="admin@example.com", verified=True):
        admin = Admin(name="Site Admin", email=email, password=hash_password(PASSWORD),
                      role="admin", is_email_verified=verified)
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin

    return _make


@pytest.fixture
def make_slot(db):
    def _make(slot_number, status="available", location=None):
        slot = ParkingSlot(slot_number=slot_number, status=status, location=location)
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return _make


@pytest.fixture
def window():
    """A valid future (entry, exit) pair, 2.5 hours long."""
    entry = datetime.utcnow() + timedelta(hours=1)
    return entry, entry + timedelta(hours=2, minutes=30)


@pytest.fixture
def client(db):
    from fastapi.testclient import TestClient
    from app.database import get_db
    from app.main import app

    def _override():
        yield db

    app.dependency_overrides[get_db] = _override
    try:
        # not used as a context manager, so the startup hook never touches the real engine
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_header(account, role):
    return {"Authorization": f"Bearer {create_access_token(account.id, account.email, role)}"}
