from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.core.config import settings


def build_engine(database_url: str) -> Engine:
    """
    Create the database engine for a connection URL.

    SQLite gets foreign key enforcement switched on for every connection,
    and in-memory SQLite shares a single connection so every session sees
    the same database. Other backends use a pre-pinged connection pool
    bounded by DB_POOL_TIMEOUT.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        sqlite_engine = create_engine(database_url, **kwargs)

        @event.listens_for(sqlite_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return sqlite_engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )


# Database engine - manages connection pool
engine = build_engine(settings.DATABASE_URL)

# Create session factory - each request gets a new session
# autocommit=False: Changes require explicit commit (prevents accidental commits)
# autoflush=False: Don't auto-flush before queries
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Primary keys are 32-bit INTEGER columns; larger ids cannot exist
MAX_ID = 2**31 - 1

# Base class for all database models
Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes, even if the
    handler raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
