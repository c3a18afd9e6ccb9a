"""Unit tests for crud/database.py and crud/tables.py"""

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from cguide.crud.database import init_db, make_engine
from cguide.crud.tables import GuidelinesRecord


SQLITE_MEM = "sqlite://"


def test_make_engine_returns_engine():
    assert isinstance(make_engine(SQLITE_MEM), Engine)


def test_init_db_creates_tables():
    engine = make_engine(SQLITE_MEM)
    init_db(engine)
    assert {"guidelines", "guidelines_revisions"} <= set(inspect(engine).get_table_names())


def test_record_round_trips_json(session):
    r = GuidelinesRecord(active={"notes": "a", "copy_rules": {"dos": ["x"]}})
    session.add(r)
    session.commit()
    session.expire_all()
    stored = session.get(GuidelinesRecord, r.id)
    assert stored.active == {"notes": "a", "copy_rules": {"dos": ["x"]}}
    assert stored.draft is None
    assert stored.created_at is not None
