"""SQLAlchemy setup for the local override name lookup table"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    # SQLite connections are used from FastAPI's threadpool as well as the event loop
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind: Engine) -> None:
    """Create the mapping table if it is missing"""
    from . import models  # noqa: F401 - registers tables on Base

    Base.metadata.create_all(bind=bind, checkfirst=True)
    logger.info(f"✅ Mapping table ready on {bind.url.render_as_string(hide_password=True)}")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
