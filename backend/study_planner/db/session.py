import logging
from collections.abc import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from study_planner.core.config import get_settings

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        # request handlers run on a threadpool
        return create_engine(database_url, connect_args={"check_same_thread": False})
    logger.debug("Database connection: %s", database_url.split("://", 1)[0])
    return create_engine(database_url, pool_pre_ping=True)


def make_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


engine = make_engine(get_settings().database_url)
SessionLocal = make_sessionmaker(engine)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
