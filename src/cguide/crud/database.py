from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

# Registers the tables on SQLModel.metadata.
import cguide.crud.tables  # noqa: F401


def make_engine(db_url: str) -> Engine:
    return create_engine(db_url, echo=False)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)
