"""
Database handle: one SQLAlchemy engine + session factory, built by the process
entry point and stored on app.state. Request handlers get a session via get_db.
"""
import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


class Database:
    """Owns the engine for the lifetime of the process."""

    def __init__(self, database_url: str, *, echo: bool = False):
        # SQLite needs check_same_thread=False for FastAPI
        connect_args = {}
        engine_kwargs = {}
        if database_url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
            if ":memory:" in database_url or database_url == "sqlite://":
                # in-memory DB must be shared by every session
                engine_kwargs["poolclass"] = StaticPool

        self.url = database_url
        self.engine = create_engine(
            database_url,
            connect_args=connect_args,
            echo=echo,
            **engine_kwargs,
        )
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        # models must be imported so their tables are registered on Base
        import wellbeing_chat.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self):
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def get_db(request: Request):
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
