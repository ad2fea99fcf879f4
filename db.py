# db.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from config import load_config
from models import Base


def make_engine(database_url: str):
    # Create engine with sqlite-specific args if needed
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True)


engine = make_engine(load_config().database_url)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(bind=None) -> None:
    Base.metadata.create_all(bind=bind or engine)


def configure(database_url: str) -> None:
    """Point SessionLocal at another database (used by create_app and tests)."""
    global engine
    engine = make_engine(database_url)
    SessionLocal.configure(bind=engine)
    init_db(engine)
