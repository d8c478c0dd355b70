import os
from pathlib import Path
from typing import Any, Generator, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bracketeer.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")


def build_engine(database_url: str, echo: bool = False, **engine_kwargs: Any) -> Engine:
    """
    Create an engine for database_url.

    SQLite engines are shared across request threads, and a file database gets
    its parent directory created. Extra keyword arguments (poolclass etc.) are
    passed to create_engine.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if ":memory:" not in database_url:
            db_path = database_url.replace("sqlite:///", "", 1)
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, echo=echo, connect_args=connect_args, **engine_kwargs)


engine: Engine = build_engine(DATABASE_URL, echo=SQL_ECHO)


def get_session() -> Generator[Session, None, None]:
    """Get database session"""
    with Session(engine) as session:
        yield session


def init_db(bind: Optional[Engine] = None) -> None:
    """Create every bracket table on bind (the app engine by default)"""
    from bracketeer.models.event import Event  # noqa: F401
    from bracketeer.models.match import EventMatch  # noqa: F401
    from bracketeer.models.registration import EventRegistration  # noqa: F401

    SQLModel.metadata.create_all(bind if bind is not None else engine)
