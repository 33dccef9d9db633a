"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessbot.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of the store independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def second_db_session(db_session_repo: Session) -> Generator[Session, None, None]:
    """Another connection to the same tables. Mocks two request handlers racing on the same record."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
