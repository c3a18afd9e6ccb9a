from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel

from cguide.core.models import Guidelines
from cguide.core.packet import PacketSource


class HistoryEntry(BaseModel):
    """Read-only snapshot of a published document."""
    id: int
    author_id: int = 0
    date_gmt: datetime
    guidelines: Guidelines


class DocumentStore(ABC):
    """Active/draft/history storage for the site's single guidelines document."""

    @abstractmethod
    def get_active(self) -> Guidelines | None:
        raise NotImplementedError

    @abstractmethod
    def get_draft(self) -> Guidelines | None:
        raise NotImplementedError

    @abstractmethod
    def save_draft(self, document: Guidelines) -> Guidelines:
        raise NotImplementedError

    @abstractmethod
    def publish_draft(self, author_id: int = 0) -> HistoryEntry:
        """Promote the draft to active and record it in history. Raises NoDraftError without a draft."""
        raise NotImplementedError

    @abstractmethod
    def discard_draft(self) -> bool:
        """Drop the draft. Returns whether there was one."""
        raise NotImplementedError

    @abstractmethod
    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        """History entries, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get_history_entry(self, entry_id: int) -> HistoryEntry:
        """Raises RevisionNotFoundError for an unknown id."""
        raise NotImplementedError

    @abstractmethod
    def source_info(self) -> PacketSource:
        raise NotImplementedError

    def get(self, use: str = "active") -> Guidelines | None:
        """The draft when use is 'draft' and one exists, else the active document."""
        if use == "draft":
            draft = self.get_draft()
            if draft is not None:
                return draft
        return self.get_active()

    def restore_history_entry(self, entry_id: int) -> Guidelines:
        """Copy a history snapshot into the draft and return it."""
        entry = self.get_history_entry(entry_id)
        return self.save_draft(entry.guidelines)
