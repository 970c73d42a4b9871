"""Database connection and schema creation."""

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from .models import Base


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _create_engine(database_url):
    if not database_url:
        raise ValueError("database URL is empty")
    if database_url.startswith("postgres://"):
        database_url = "postgresql://" + database_url[len("postgres://"):]
    engine = create_engine(database_url)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def connect(database_url):
    """Open the database, create any missing tables and return a session factory."""
    engine = _create_engine(database_url)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


def run_migrations(database_url):
    """Bring the schema up to date by creating any tables that are missing."""
    engine = _create_engine(database_url)
    try:
        Base.metadata.create_all(engine)
    finally:
        engine.dispose()