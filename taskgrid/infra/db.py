from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from taskgrid.config import SETTINGS

connect_args = {"check_same_thread": False} if SETTINGS.database_url.startswith("sqlite") else {}

engine = create_engine(SETTINGS.database_url, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db() -> None:
    """Check the connection and create the key-value table if it is missing."""
    from . import models  # noqa: F401

    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    Base.metadata.create_all(bind=engine)
