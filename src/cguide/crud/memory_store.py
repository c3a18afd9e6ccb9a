from dataclasses import dataclass, field
from datetime import datetime, timezone

from cguide.core.models import Guidelines
from cguide.core.packet import PacketSource
from cguide.crud.store import DocumentStore, HistoryEntry
from cguide.errors import NoDraftError, RevisionNotFoundError


@dataclass
class MemoryStore(DocumentStore):
    """Process-local store, mainly for tests and one-shot CLI runs."""
    active: Guidelines | None = None
    draft: Guidelines | None = None
    max_history: int = 0
    document_id: int = 1
    _history: list[HistoryEntry] = field(default_factory=list)
    _next_id: int = 1
    updated_at: datetime | None = None

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def get_active(self) -> Guidelines | None:
        return self.active

    def get_draft(self) -> Guidelines | None:
        return self.draft

    def save_draft(self, document: Guidelines) -> Guidelines:
        self.draft = document
        self._touch()
        return document

    def publish_draft(self, author_id: int = 0) -> HistoryEntry:
        if self.draft is None:
            raise NoDraftError()
        self._touch()
        if self._history and self._history[-1].guidelines == self.draft:
            # unchanged: nothing new to record
            self.active, self.draft = self.draft, None
            return self._history[-1]
        entry = HistoryEntry(id=self._next_id, author_id=author_id, date_gmt=self.updated_at, guidelines=self.draft)
        self._next_id += 1
        self._history.append(entry)
        if self.max_history > 0:
            del self._history[:-self.max_history]
        self.active, self.draft = self.draft, None
        return entry

    def discard_draft(self) -> bool:
        had_draft, self.draft = self.draft is not None, None
        return had_draft

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        entries = self._history[::-1]
        return entries[:limit] if limit else entries

    def get_history_entry(self, entry_id: int) -> HistoryEntry:
        for entry in self._history:
            if entry.id == entry_id:
                return entry
        raise RevisionNotFoundError(entry_id)

    def source_info(self) -> PacketSource:
        latest = self._history[-1].id if self._history else None
        return PacketSource(document_id=self.document_id, revision_id=latest, updated_at=self.updated_at)
