# core/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import DATABASE_URL

# Disable check_same_thread only for SQLite: the session monitor and socket
# callbacks touch storage from worker threads.
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, future=True, connect_args=connect_args)

# expire_on_commit=False avoids needing refresh() after every write
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)

Base = declarative_base()


def init_db(bind=None):
    """Create the client storage tables if they do not exist yet."""
    # Import models so their tables are registered on Base.metadata
    from models.client_setting import ClientSetting  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
