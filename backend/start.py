"""Bring the schema up to date, then serve the API.

A database without a ``users`` table is built from the models and stamped at
the latest revision; any other database goes through ``alembic upgrade``.
"""

import logging
import os
from pathlib import Path

import uvicorn
from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from study_planner.db.base import Base
from study_planner.db.session import engine
import study_planner.models  # noqa: F401

logger = logging.getLogger("study_planner.start")

BACKEND_DIR = Path(__file__).resolve().parent


def alembic_config() -> Config:
    config = Config(str(BACKEND_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(BACKEND_DIR / "alembic"))
    return config


def prepare_database(db_engine: Engine, config: Config) -> None:
    if inspect(db_engine).has_table("users"):
        logger.info("Applying pending migrations")
        command.upgrade(config, "head")
        return
    logger.info("Empty database, creating tables from models")
    Base.metadata.create_all(bind=db_engine)
    command.stamp(config, "head")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    prepare_database(engine, alembic_config())
    uvicorn.run(
        "study_planner.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
