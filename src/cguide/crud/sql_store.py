from __future__ import annotations
import logging
from typing import Any, Iterable

from sqlmodel import Session, select

from cguide.core.models import Guidelines, default_document
from cguide.core.packet import PacketSource
from cguide.core.utils.hashing import json_hash
from cguide.crud.history import get_revision, latest_revision, list_revisions, save_revision
from cguide.crud.serialize import DEFAULT_NAMESPACES, dump_guidelines, load_guidelines
from cguide.crud.store import DocumentStore, HistoryEntry
from cguide.crud.tables import GuidelinesRecord, GuidelinesRevision, utcnow
from cguide.errors import InvalidDocumentError, NoDraftError, RevisionNotFoundError


logger = logging.getLogger(__name__)


class SQLStore(DocumentStore):
    """Guidelines store on a SQLModel session. Every mutating call commits."""

    def __init__(self, session: Session, max_history: int = 0, namespaces: Iterable[str] = DEFAULT_NAMESPACES):
        self.session = session
        self.max_history = max_history
        self.namespaces = tuple(namespaces)

    def _record(self, create: bool = False) -> GuidelinesRecord | None:
        row = self.session.exec(select(GuidelinesRecord).order_by(GuidelinesRecord.id)).first()
        if row is None and create:
            row = GuidelinesRecord()
            self.session.add(row)
            self.session.flush()
        return row

    def _load(self, data: dict[str, Any] | None, what: str) -> Guidelines | None:
        if data is None:
            return None
        try:
            return load_guidelines(data, self.namespaces)
        except InvalidDocumentError as e:
            logger.warning("Stored %s guidelines are malformed, using defaults: %s", what, e)
            return default_document()

    def _entry(self, r: GuidelinesRevision) -> HistoryEntry:
        return HistoryEntry(
            id=r.id,
            author_id=r.author_id,
            date_gmt=r.created_at,
            guidelines=self._load(r.guidelines, f"revision {r.id}"),
        )

    def get_active(self) -> Guidelines | None:
        row = self._record()
        return self._load(row.active, "active") if row else None

    def get_draft(self) -> Guidelines | None:
        row = self._record()
        return self._load(row.draft, "draft") if row else None

    def save_draft(self, document: Guidelines) -> Guidelines:
        row = self._record(create=True)
        row.draft = dump_guidelines(document)
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.commit()
        return document

    def publish_draft(self, author_id: int = 0) -> HistoryEntry:
        row = self._record()
        if row is None or row.draft is None:
            raise NoDraftError()

        content = row.draft
        content_hash = json_hash(content)
        latest = latest_revision(self.session, row.id)
        if latest is not None and latest.hash == content_hash == row.hash:
            # unchanged: nothing new to record
            logger.info("Draft matches active guidelines; publishing without a new history entry")
            revision = latest
        else:
            revision = save_revision(self.session, row.id, content, author_id, self.max_history)

        row.active = content
        row.hash = content_hash
        row.draft = None
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.commit()
        self.session.refresh(revision)
        return self._entry(revision)

    def discard_draft(self) -> bool:
        row = self._record()
        if row is None or row.draft is None:
            return False
        row.draft = None
        row.updated_at = utcnow()
        self.session.add(row)
        self.session.commit()
        return True

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        row = self._record()
        if row is None:
            return []
        return [self._entry(r) for r in list_revisions(self.session, row.id, limit)]

    def get_history_entry(self, entry_id: int) -> HistoryEntry:
        row = self._record()
        if row is None:
            raise RevisionNotFoundError(entry_id)
        return self._entry(get_revision(self.session, row.id, entry_id))

    def source_info(self) -> PacketSource:
        row = self._record()
        if row is None:
            return PacketSource()
        latest = latest_revision(self.session, row.id)
        return PacketSource(
            document_id=row.id,
            revision_id=latest.id if latest else None,
            updated_at=row.updated_at,
        )
