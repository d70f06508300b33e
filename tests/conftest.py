"""Shared fixtures: in-memory database, fixed clock and fake QR renderer"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CAMPAIGN_EXPIRATION_ENABLED", "false")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.database import Base, get_db
from app.core.clock import get_clock
from app.main import app
from app.modules.payments.qrcode_renderer import get_qr_renderer

NOW = datetime(2024, 1, 10, 12, 0, 0)


class FixedClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class FakeQRRenderer:
    def __init__(self):
        self.rendered = []

    def render(self, text: str) -> str:
        self.rendered.append(text)
        return "data:image/png;base64,ZmFrZQ=="


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def qr_renderer():
    return FakeQRRenderer()


@pytest.fixture
def client(db_session, clock, qr_renderer):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_qr_renderer] = lambda: qr_renderer
    yield TestClient(app)
    app.dependency_overrides.clear()
