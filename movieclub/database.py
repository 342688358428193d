from sqlalchemy import create_engine, pool, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from fastapi import Request
import logging

from movieclub.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def is_memory_sqlite(url: str) -> bool:
    """True for sqlite://, sqlite:///:memory: and shared-cache memory URIs."""
    database = make_url(url).database
    return not database or database == ":memory:" or "mode=memory" in url


def build_engine(settings: Settings) -> Engine:
    """
    Create the engine for the configured DATABASE_URL.

    PostgreSQL gets a QueuePool shared by all request workers.
    SQLite gets foreign keys switched on so ON DELETE CASCADE behaves the
    same way. An in-memory SQLite database only exists on one connection,
    so it gets a StaticPool; a file database keeps one connection per session.
    """
    url = settings.database_url

    if url.startswith("sqlite"):
        engine_args = {"connect_args": {"check_same_thread": False}, "echo": settings.db_echo}
        if is_memory_sqlite(url):
            engine_args["poolclass"] = pool.StaticPool
        engine = create_engine(url, **engine_args)

        @event.listens_for(engine, "connect")
        def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    engine = create_engine(
        url,
        poolclass=pool.QueuePool,
        pool_size=settings.db_pool_size,  # Number of connections to keep open
        max_overflow=settings.db_max_overflow,  # Max connections beyond pool_size
        pool_timeout=settings.db_pool_timeout,  # Seconds to wait for connection
        pool_recycle=settings.db_pool_recycle,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Test connections before using them
        connect_args={"options": f"-c statement_timeout={settings.db_statement_timeout_ms}"},
        echo=settings.db_echo,
    )

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_conn, connection_record):
        """Log when a new connection is created"""
        logger.debug("Database connection established")

    @event.listens_for(engine, "checkout")
    def receive_checkout(dbapi_conn, connection_record, connection_proxy):
        """Log when a connection is checked out from the pool"""
        logger.debug(f"Connection checked out from pool. Pool size: {engine.pool.size()}")

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency for FastAPI routes
def get_db(request: Request):
    """
    Database session dependency for FastAPI.
    One session per request, taken from the factory created at startup.

    Usage:
        @router.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            # Use db here
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
