from datetime import datetime, timezone

from sqlalchemy.pool import StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine

from floragen.config import DB_URL


def make_engine(db_url: str = DB_URL):
    if db_url in ("sqlite://", "sqlite:///:memory:"):
        # every connection to an in-memory database is a new database
        return create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url, echo=False, connect_args={"check_same_thread": False}
        )
    return create_engine(db_url, echo=False)


engine = make_engine()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(SQLModel):
    __abstract__ = True

    created_at: datetime = Field(
        default_factory=utcnow,
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column_kwargs={"onupdate": utcnow},
    )


def get_db():
    with Session(engine) as session:
        yield session


def create_db_and_tables(bind=None):
    from floragen import models  # noqa: F401

    SQLModel.metadata.create_all(bind if bind is not None else engine)
