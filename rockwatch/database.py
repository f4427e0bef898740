# rockwatch/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy against any URL-addressable SQL store (the managed Postgres
in production, SQLite in tests). All models are auto-imported here so
create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from rockwatch.config import get_settings

Base = declarative_base()


def build_engine(database_url: str, connect_timeout: int = 5) -> Engine:
    """Create an engine for the given URL with a bounded connect timeout."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": connect_timeout},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,          # Auto-reconnect if DB connection drops
        pool_size=10,
        max_overflow=20,
        connect_args={"connect_timeout": connect_timeout},
        echo=False,                  # Set True to log all SQL queries (debug only)
    )


_settings = get_settings()
engine = build_engine(_settings.DATABASE_URL, _settings.DB_CONNECT_TIMEOUT_SECONDS)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine = None):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from rockwatch.models.mine import Mine                    # noqa
    from rockwatch.models.sensor_data import SensorData       # noqa
    from rockwatch.models.alert import Alert                  # noqa
    from rockwatch.models.delivery_log import DeliveryLog     # noqa

    Base.metadata.create_all(bind=bind or engine)
