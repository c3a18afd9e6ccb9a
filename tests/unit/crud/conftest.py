"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import Session, SQLModel

from cguide.core.models import Guidelines
from cguide.crud.memory_store import MemoryStore
from cguide.crud.sql_store import SQLStore
from cguide.crud.tables import GuidelinesRecord


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture(name="record")
def record_fixture(session):
    """An empty guidelines record persisted to the session."""
    r = GuidelinesRecord()
    session.add(r)
    session.flush()
    return r


@pytest.fixture(name="store", params=["memory", "sql"])
def store_fixture(request, session):
    """Each store implementation, keeping at most 3 history entries."""
    if request.param == "memory":
        return MemoryStore(max_history=3)
    return SQLStore(session, max_history=3)


@pytest.fixture(name="doc_a")
def doc_a_fixture() -> Guidelines:
    return Guidelines.model_validate({"notes": "A", "copy_rules": {"dos": ["Be clear"]}})


@pytest.fixture(name="doc_b")
def doc_b_fixture() -> Guidelines:
    return Guidelines.model_validate({"notes": "B", "blocks": {"core/quote": {"notes": "Cite"}}})
