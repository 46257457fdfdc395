"""
Database engine and session factory.

The engine is built once per process and shared by every request through
`core.deps.get_db`. Call `dispose_engine()` on shutdown to close pooled
connections.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from eventphoto.core.config import settings


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # SQLite ignores ON DELETE rules unless foreign keys are switched on per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine with backend-specific connection settings."""
    backend = make_url(database_url).get_backend_name()
    connect_args = kwargs.pop("connect_args", {})
    if backend.startswith("postgresql"):
        connect_args.setdefault("options", "-c timezone=utc")
        kwargs.setdefault("pool_pre_ping", True)
    elif backend == "sqlite":
        connect_args.setdefault("check_same_thread", False)

    engine = create_engine(database_url, connect_args=connect_args, **kwargs)
    if backend == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = create_session_factory(engine)


def dispose_engine() -> None:
    """Release pooled connections (application shutdown hook)."""
    engine.dispose()
