# inkstudio/db.py

from sqlmodel import SQLModel, create_engine, Session

from inkstudio.config import settings


def make_engine(url: str = settings.DATABASE_URL):
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False  # required for SQLite + FastAPI
    return create_engine(url, echo=settings.SQL_ECHO, connect_args=connect_args)


# Engine = connection to the database
engine = make_engine()


def init_db(bind=None):
    # models must be imported so their tables are registered on the metadata
    from inkstudio import models  # noqa: F401

    SQLModel.metadata.create_all(bind if bind is not None else engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
