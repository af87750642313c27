# ccube/database.py
from sqlmodel import SQLModel, create_engine, Session

from ccube.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Engine setup
#
# SQLite (default, local dev):
#   - check_same_thread=False : FastAPI runs sync endpoints in a threadpool
#
# Postgres (hosted):
#   - sslmode=require   : enforce SSL when running in the cloud
#   - pool_size=1       : keep only 1 connection to the pooler
#   - max_overflow=0    : do not open extra connections beyond the pool
#   - pool_pre_ping=True: validate connections before using them
# ---------------------------------------------------------

db_url = settings.DATABASE_URL


def _build_engine(url: str):
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
        )

    # Append sslmode=require if it is not already present
    if "sslmode=" not in url:
        if "?" in url:
            url = url + "&sslmode=require"
        else:
            url = url + "?sslmode=require"

    return create_engine(
        url,
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        pool_size=1,
        max_overflow=0,
    )


engine = _build_engine(db_url)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
