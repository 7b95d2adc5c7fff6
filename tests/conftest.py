"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import os

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS", "0")

from frailearn.db.base import Base  # noqa: E402  (registers every model)


@pytest.fixture()
def engine():
    engine = create_engine("sqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine) -> Session:
    SessionLocal = sessionmaker(bind=engine, future=True, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
