"""Typed errors raised across the store and orchestration boundary"""


class GuidelinesError(Exception):
    """Base class for guidelines errors."""


class RevisionNotFoundError(GuidelinesError, LookupError):
    """A history entry id does not exist for the guidelines document."""

    def __init__(self, revision_id):
        super().__init__(f"History entry {revision_id} not found")
        self.revision_id = revision_id


class FixtureNotFoundError(GuidelinesError, LookupError):
    """The fixture post requested for a playground run does not exist."""

    def __init__(self, fixture):
        super().__init__(f"Fixture not found: {fixture}")
        self.fixture = fixture


class NoDraftError(GuidelinesError):
    def __init__(self):
        super().__init__("No draft changes to publish")


class InvalidDocumentError(GuidelinesError, ValueError):
    """Stored or imported data is not a valid guidelines document."""
