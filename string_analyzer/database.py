from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
import os
from dotenv import load_dotenv
import logging

load_dotenv()
logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# DATABASE URL HANDLING
# ------------------------------------------------------------------------------

DEFAULT_DATABASE_URL = "sqlite:///./main.db"

DATABASE_URL = os.getenv("DATABASE_URL")

if not DATABASE_URL:
    logger.info(f"DATABASE_URL not set, using local SQLite database ({DEFAULT_DATABASE_URL})")
    DATABASE_URL = DEFAULT_DATABASE_URL

if DATABASE_URL.startswith("postgres://"):
    # SQLAlchemy only accepts the "postgresql://" scheme
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)


# ------------------------------------------------------------------------------
# DATABASE ENGINE & SESSION
# ------------------------------------------------------------------------------
def _enable_sqlite_pragmas(dbapi_connection, connection_record):
    """LIKE is case-insensitive in SQLite unless told otherwise."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA case_sensitive_like = ON")
    cursor.close()


def build_engine(url: str, **kwargs):
    """Create an engine for ``url`` with the per-backend settings the store needs."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
        kwargs.setdefault("pool_recycle", 280)

    new_engine = create_engine(url, **kwargs)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine, "connect", _enable_sqlite_pragmas)
    return new_engine


try:
    engine = build_engine(DATABASE_URL)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base = declarative_base()
except Exception as e:
    logger.error(f"Failed to create SQLAlchemy engine: {e}")
    raise


# ------------------------------------------------------------------------------
# DB DEPENDENCY
# ------------------------------------------------------------------------------
def get_db():
    """Dependency to provide a DB session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ------------------------------------------------------------------------------
# INITIALIZATION
# ------------------------------------------------------------------------------
def init_db(bind=None):
    """Create the strings table if it does not exist yet."""
    from string_analyzer.models import string_record  # noqa: F401  ensure models are registered
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Table 'strings' created or already exists.")
