"""Published history persistence: save, prune, list, and lookup of revisions"""

from typing import Any

from sqlmodel import Session, select

from cguide.core.utils.hashing import json_hash
from cguide.crud.tables import GuidelinesRevision
from cguide.errors import RevisionNotFoundError


def list_revisions(session: Session, document_id: int, limit: int | None = None) -> list[GuidelinesRevision]:
    """Return revisions for a document, newest first."""
    query = (
        select(GuidelinesRevision)
        .where(GuidelinesRevision.document_id == document_id)
        .order_by(GuidelinesRevision.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return list(session.exec(query).all())


def latest_revision(session: Session, document_id: int) -> GuidelinesRevision | None:
    revisions = list_revisions(session, document_id, limit=1)
    return revisions[0] if revisions else None


def get_revision(session: Session, document_id: int, revision_id: int) -> GuidelinesRevision:
    """Raises RevisionNotFoundError if revision_id is not a revision of this document."""
    revision = session.exec(
        select(GuidelinesRevision)
        .where(GuidelinesRevision.document_id == document_id)
        .where(GuidelinesRevision.id == revision_id)
    ).one_or_none()
    if revision is None:
        raise RevisionNotFoundError(revision_id)
    return revision


def prune_revisions(session: Session, document_id: int, max_history: int) -> int:
    """Delete oldest revisions beyond max_history. Returns count deleted. No-op if max_history=0."""
    if max_history == 0:
        return 0

    revisions = list_revisions(session, document_id)
    stale = revisions[max_history:]
    for r in stale:
        session.delete(r)
    session.flush()
    return len(stale)


def save_revision(
    session: Session,
    document_id: int,
    guidelines: dict[str, Any],
    author_id: int = 0,
    max_history: int = 0,
    ) -> GuidelinesRevision:
    """Snapshot a published document as a new revision, then prune if max_history > 0.

    Flushes but does not commit; caller controls the transaction.
    """
    revision = GuidelinesRevision(
        document_id=document_id,
        author_id=author_id,
        guidelines=guidelines,
        hash=json_hash(guidelines),
    )
    session.add(revision)
    session.flush()

    if max_history > 0:
        prune_revisions(session, document_id, max_history)

    return revision
