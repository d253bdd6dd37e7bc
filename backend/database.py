# backend/database.py
from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def normalize_database_url(url: str) -> str:
    # Hosted Postgres hands out postgres://, SQLAlchemy only accepts postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str):
    url = normalize_database_url(url)

    if "sqlite" in url:
        connect_args = {"check_same_thread": False}  # SQLite only
    else:
        connect_args = {}

    # In-memory SQLite lives on a single connection
    if url in IN_MEMORY_URLS:
        engine = create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    else:
        engine = create_engine(url, connect_args=connect_args)

    # SQLite ignores foreign keys (and ON DELETE actions) unless asked per connection
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(engine):
    # Register every table on Base.metadata before creating them
    import models.users  # noqa: F401
    import models.log  # noqa: F401
    import models.app_data  # noqa: F401

    Base.metadata.create_all(bind=engine)
