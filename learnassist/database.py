"""Database connection, migration and sessions."""

from __future__ import annotations

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from learnassist.schema import Base

log = logging.getLogger(__name__)

CONNECT_FAILED_MESSAGE = "连接数据库失败"
MIGRATE_FAILED_MESSAGE = "数据库表更新失败"


class RecordNotFound(LookupError):
    """Raised when a requested record does not exist."""


def build_mysql_url(user: str, password: str, host: str, port, dbname: str) -> URL:
    """Build the MySQL connection URL with the utf8mb4 character set."""
    return URL.create(
        drivername="mysql+pymysql",
        username=user,
        password=password,
        host=host,
        port=int(port),
        database=dbname,
        query={"charset": "utf8mb4"},
    )


def migrate(engine: Engine) -> None:
    """Create every table that does not exist yet.

    Raises RuntimeError if the schema cannot be brought up to date.
    """
    log.info("init migrate")
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        raise RuntimeError(MIGRATE_FAILED_MESSAGE) from exc


def connect(url) -> Engine:
    """Open an engine for ``url``, check the connection and migrate the schema.

    Raises RuntimeError if the database cannot be reached or migrated.
    """
    try:
        engine = create_engine(url)
        with engine.connect():
            pass
    except SQLAlchemyError as exc:
        raise RuntimeError(CONNECT_FAILED_MESSAGE) from exc
    migrate(engine)
    return engine


def make_session(engine: Engine) -> Session:
    """A session whose objects stay readable after commit."""
    return Session(engine, expire_on_commit=False)