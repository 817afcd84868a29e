from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from charityhub.core.config import settings


engine = create_engine(settings.DATABASE_URL, future=True, pool_pre_ping=True)
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
    future=True,
)
Base = declarative_base()


def get_db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """Case-folded ``LIKE`` pattern matching ``term`` literally; use with ``escape=LIKE_ESCAPE``."""
    escaped = (
        term.lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
