"""Unit tests for crud/history.py"""

import pytest

from cguide.core.utils.hashing import json_hash
from cguide.crud.history import (
    get_revision,
    latest_revision,
    list_revisions,
    prune_revisions,
    save_revision,
)
from cguide.crud.tables import GuidelinesRevision
from cguide.errors import RevisionNotFoundError


def _save(session, record, n: int, max_history: int = 0) -> GuidelinesRevision:
    return save_revision(session, record.id, {"notes": f"v{n}"}, author_id=n, max_history=max_history)


# --- save_revision ---

def test_save_revision_creates_record(session, record):
    r = _save(session, record, 1)
    stored = session.get(GuidelinesRevision, r.id)
    assert stored.guidelines == {"notes": "v1"}
    assert stored.author_id == 1
    assert stored.hash == json_hash({"notes": "v1"})


def test_save_revision_ids_increase(session, record):
    r1 = _save(session, record, 1)
    r2 = _save(session, record, 2)
    assert r2.id > r1.id


def test_save_revision_prunes_on_overflow(session, record):
    for n in range(5):
        _save(session, record, n, max_history=3)
    assert [r.guidelines["notes"] for r in list_revisions(session, record.id)] == ["v4", "v3", "v2"]


def test_save_revision_no_prune_when_disabled(session, record):
    for n in range(5):
        _save(session, record, n)
    assert len(list_revisions(session, record.id)) == 5


# --- prune_revisions ---

@pytest.mark.parametrize("n_saves,max_h,expected_remaining,expected_deleted", [
    (5, 3, 3, 2),
    (3, 5, 3, 0),
    (5, 0, 5, 0),
])
def test_prune_revisions(session, record, n_saves, max_h, expected_remaining, expected_deleted):
    """prune_revisions keeps the N newest revisions and deletes the oldest."""
    for n in range(n_saves):
        _save(session, record, n)
    deleted = prune_revisions(session, record.id, max_h)
    assert deleted == expected_deleted
    assert len(list_revisions(session, record.id)) == expected_remaining


# --- listing and lookup ---

def test_list_revisions_newest_first_with_limit(session, record):
    for n in range(3):
        _save(session, record, n)
    assert [r.author_id for r in list_revisions(session, record.id)] == [2, 1, 0]
    assert [r.author_id for r in list_revisions(session, record.id, limit=2)] == [2, 1]


def test_list_revisions_scoped_to_document(session, record):
    _save(session, record, 1)
    assert list_revisions(session, record.id + 1) == []


def test_latest_revision(session, record):
    assert latest_revision(session, record.id) is None
    _save(session, record, 1)
    r2 = _save(session, record, 2)
    assert latest_revision(session, record.id).id == r2.id


def test_get_revision(session, record):
    r = _save(session, record, 1)
    assert get_revision(session, record.id, r.id).guidelines == {"notes": "v1"}


def test_get_revision_missing_raises(session, record):
    r = _save(session, record, 1)
    with pytest.raises(RevisionNotFoundError):
        get_revision(session, record.id + 1, r.id)
    with pytest.raises(RevisionNotFoundError):
        get_revision(session, record.id, r.id + 100)
