"""Relational schema for pending login states, and the migration entry point."""

from sqlalchemy import Column, Float, Integer, MetaData, String, Table, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from lochub.logging import get_logger

logger = get_logger("db")

metadata = MetaData()

login_state = Table(
    "login_state",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("state", String(64), nullable=False, unique=True),
    # Unix timestamp (seconds)
    Column("created_at", Float, nullable=False, index=True),
)


def _is_memory_sqlite(db_url: str) -> bool:
    return db_url in {"sqlite://", "sqlite:///:memory:"} or "mode=memory" in db_url


def make_engine(db_url: str) -> Engine:
    if not db_url.startswith("sqlite"):
        return create_engine(db_url, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if _is_memory_sqlite(db_url):
        # One shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    engine = create_engine(db_url, **kwargs)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def migrate(engine: Engine, refresh: bool = False) -> None:
    """Create the schema. ``refresh`` drops existing tables first."""
    if refresh:
        logger.info("dropping login_state table")
        metadata.drop_all(engine)
    metadata.create_all(engine)
    logger.info("schema up to date")
