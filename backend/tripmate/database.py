from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from tripmate.config import get_settings
import logging

logger = logging.getLogger(__name__)
settings = get_settings()

db_url = settings.database_url
is_sqlite = db_url.startswith("sqlite")

engine = create_engine(
    db_url,
    connect_args={"check_same_thread": False} if is_sqlite else {},
)


def enable_sqlite_foreign_keys(target: Engine):
    """Turn on FK enforcement so ON DELETE CASCADE / SET NULL actually run."""

    @event.listens_for(target, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if is_sqlite:
    enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables():
    """Create missing tables for local SQLite setups; Postgres goes through Alembic."""
    import tripmate.models  # noqa: F401  registers every model on Base.metadata

    Base.metadata.create_all(bind=engine)
    logger.info(f"Ensured {len(Base.metadata.sorted_tables)} tables exist")
