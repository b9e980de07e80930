from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session


def make_engine(url: str):
    # The store is written from worker threads, so SQLite must allow it.
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(url, echo=False)

def create_db_and_tables(engine):
    SQLModel.metadata.create_all(engine)

def get_session(engine):
    return Session(engine)
