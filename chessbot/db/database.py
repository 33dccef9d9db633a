"""Generate database session"""

from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessbot.core.config import Settings
from chessbot.db.schema import Base


def make_engine(settings: Optional[Settings] = None) -> Engine:
    """Engine for the configured database. All tables are created if missing."""
    settings = settings or Settings.from_env()
    engine = create_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine)


def get_db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
