"""
Engine, session factory and declarative base for the bookkeeping models.

Every model inherits from Base. Every request gets a session from
get_db(); services flush into it and the caller commits.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from bookkeeping.config import get_settings

settings = get_settings()

# --- Engine ---
# One engine per process holds the connection pool.
# pool_pre_ping=True tests a pooled connection before handing it
# out, so a restarted database or a stale connection is replaced
# instead of failing the first statement of a reprocess run.
# SQLite connections are shared across FastAPI's worker threads,
# which needs check_same_thread=False.
_connect_args = (
    {"check_same_thread": False}
    if settings.DATABASE_URL.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

# --- Session Factory ---
# Each call to SessionLocal() opens a new session.
# autocommit=False: nothing is saved until the caller commits. A
# journal entry with its lines, or a whole period reprocess, lands
# in one commit or not at all.
# autoflush=False: services flush explicitly. A status change made
# in memory stays in memory until a flush, so a rejected operation
# leaves nothing behind in the database.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


# --- Base Model Class ---
# Organizations, accounts, transactions, journal entries and the
# audit log all register their tables here.
class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The session is closed when the request finishes, even if the
    endpoint raised. Uncommitted work is discarded on close.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
