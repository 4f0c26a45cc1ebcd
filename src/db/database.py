"""Generate database session"""

from typing import Generator, Optional

from loguru import logger
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import Settings, load_settings
from src.db.schema import Base


def create_db_engine(settings: Optional[Settings] = None) -> Engine:
    settings = settings or load_settings()
    connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
    return create_engine(settings.database_url, connect_args=connect_args)


def init_db(engine: Engine) -> sessionmaker[Session]:
    """Ensure all tables are created and hand out the session factory"""
    Base.metadata.create_all(bind=engine)
    logger.debug(f"Database tables ready on {engine.url}")
    return sessionmaker(bind=engine)


def get_db(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
