import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool


def get_database_url() -> str:
    url = os.getenv("DATABASE_URL", "sqlite:///./resume_generator.db")
    # Normalize postgres:// -> postgresql:// for SQLAlchemy
    if url.startswith("postgres://"):
        url = "postgresql://" + url[10:]
    return url


def build_engine(url: str):
    """Create an engine for the given URL.

    SQLite is used for local runs and tests: connections are shared across
    threads and writers wait on the database lock instead of failing fast.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
            pool_pre_ping=True,
        )
    # Configure connection pooling to prevent connection exhaustion
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=10,  # Number of connections to maintain persistently
        max_overflow=20,  # Maximum number of connections to create beyond pool_size
        pool_timeout=30,  # Seconds to wait before giving up on getting a connection
        pool_pre_ping=True,  # Verify connections before using them
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=False
    )


SQLALCHEMY_DATABASE_URL = get_database_url()
engine = build_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
