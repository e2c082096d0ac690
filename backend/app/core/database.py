from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings

# The URL is required at request time, not import time; an unset DATABASE_URL
# falls back to an in-memory engine and is reported as a configuration error.
engine = create_engine(settings.DATABASE_URL or "sqlite://", pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dependency for getting a request-scoped database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
