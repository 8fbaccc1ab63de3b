"""Generate database session"""

from functools import lru_cache
from typing import Iterator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessrules.core.config import Settings, get_settings
from chessrules.db.schema import Base


@lru_cache
def get_engine(database_url: str) -> Engine:
    """One engine per database, tables created on first use."""
    engine = create_engine(database_url)
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return engine


def get_db(settings: Optional[Settings] = None) -> Iterator[Session]:
    settings = settings or get_settings()
    session_factory = sessionmaker(bind=get_engine(settings.database_url))
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
