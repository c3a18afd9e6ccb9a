"""Shared fixtures for core unit tests"""

import pytest

from cguide.core.models import Guidelines


FULL_DOC = {
    "version": 1,
    "brand_context": {
        "site_description": "A blog about indoor gardening.",
        "audience": "Apartment dwellers new to plants",
        "primary_goal": "inform",
        "topics": ["houseplants", "lighting"],
    },
    "voice_tone": {
        "tone_traits": ["friendly", "practical"],
        "pov": "we_you",
        "readability": "general",
    },
    "copy_rules": {
        "dos": ["Use concrete examples"],
        "donts": ["Avoid jargon"],
        "formatting": ["h2s", "bullets"],
    },
    "vocabulary": {
        "prefer": [{"term": "houseplant", "note": "not 'indoor plant'"}],
        "avoid": [{"term": "utilize", "note": "say use"}],
    },
    "images": {
        "dos": ["Natural light"],
        "donts": ["Stock photo poses"],
        "text_policy": "never",
    },
    "notes": "Always credit photographers.",
    "blocks": {
        "core/paragraph": {
            "copy_rules": {"dos": ["Keep under 3 sentences"], "donts": ["No exclamation marks"]},
            "notes": "Lead with the benefit.",
        },
        "core/button": {"copy_rules": {"dos": [], "donts": []}, "notes": ""},
    },
}


@pytest.fixture(name="full_doc")
def full_doc_fixture() -> Guidelines:
    return Guidelines.model_validate(FULL_DOC)


@pytest.fixture(name="empty_doc")
def empty_doc_fixture() -> Guidelines:
    return Guidelines()


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    """Build a Guidelines document from keyword sections."""
    def _make(**sections) -> Guidelines:
        return Guidelines.model_validate(sections)
    return _make
