from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from teamboard.config import settings

connect_args = {}
if settings.is_sqlite:
    # SQLite connections are shared across FastAPI's threadpool
    connect_args["check_same_thread"] = False
elif settings.DB_SSLMODE:
    # If you're using PostgreSQL on Render or similar, set DB_SSLMODE=require
    connect_args["sslmode"] = settings.DB_SSLMODE

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Session factory for work that outlives the request (background tasks)"""
    return SessionLocal
