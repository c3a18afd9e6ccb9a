"""Unit tests for core/models.py"""

import pytest
from pydantic import ValidationError

from cguide.core.models import (
    BlockGuidelines,
    Guidelines,
    PointOfView,
    PrimaryGoal,
    Readability,
    TermNote,
    coalesce,
    default_document,
    has_value,
)


def test_default_document_is_empty():
    doc = default_document()
    assert doc.version == 1
    assert doc.is_empty()
    assert doc.blocks == {}


def test_coalesce_none_gives_default():
    assert coalesce(None) == default_document()


def test_coalesce_keeps_document(full_doc):
    assert coalesce(full_doc) is full_doc


def test_full_document_parses(full_doc):
    assert full_doc.brand_context.primary_goal is PrimaryGoal.inform
    assert full_doc.voice_tone.pov is PointOfView.we_you
    assert full_doc.voice_tone.readability is Readability.general
    assert full_doc.vocabulary.avoid[0] == TermNote(term="utilize", note="say use")
    assert not full_doc.is_empty()


def test_enum_empty_string_is_none(make_doc):
    doc = make_doc(brand_context={"primary_goal": ""}, voice_tone={"pov": "", "readability": ""})
    assert doc.brand_context.primary_goal is None
    assert doc.voice_tone.pov is None
    assert doc.voice_tone.readability is None


def test_enum_unknown_value_passes_through(make_doc):
    doc = make_doc(brand_context={"primary_goal": "entertain"}, copy_rules={"formatting": ["h2s", "tables"]})
    assert doc.brand_context.primary_goal == "entertain"
    assert doc.copy_rules.formatting == ["h2s", "tables"]


def test_term_note_from_plain_string(make_doc):
    doc = make_doc(vocabulary={"prefer": ["houseplant"]})
    assert doc.vocabulary.prefer == [TermNote(term="houseplant")]


def test_lists_keep_order_and_duplicates(make_doc):
    doc = make_doc(copy_rules={"dos": ["b", "a", "b"]})
    assert doc.copy_rules.dos == ["b", "a", "b"]


def test_unknown_keys_ignored(make_doc):
    doc = make_doc(brand_context={"site_description": "x", "mystery": 1}, extra_section={"a": 1})
    assert doc.brand_context.site_description == "x"
    assert not hasattr(doc, "extra_section")


def test_legacy_image_style_maps_to_images(make_doc):
    doc = make_doc(image_style={"dos": ["Bright"], "text_policy": "ok"})
    assert doc.images.dos == ["Bright"]
    assert doc.images.text_policy == "ok"


def test_images_wins_over_legacy_image_style(make_doc):
    doc = make_doc(images={"dos": ["New"]}, image_style={"dos": ["Old"]})
    assert doc.images.dos == ["New"]


def test_block_key_requires_namespace(make_doc):
    with pytest.raises(ValidationError, match="namespace/name"):
        make_doc(blocks={"paragraph": {"notes": "x"}})


def test_document_is_frozen(full_doc):
    with pytest.raises(ValidationError):
        full_doc.notes = "changed"


def test_section_lookup(full_doc):
    assert full_doc.section("notes") == "Always credit photographers."
    assert full_doc.section("brand_context") is full_doc.brand_context
    assert full_doc.section("nonexistent") is None


def test_block_lookup(full_doc):
    assert full_doc.block("core/paragraph").notes == "Lead with the benefit."
    assert full_doc.block("core/image") is None


def test_empty_block_is_empty():
    assert BlockGuidelines.model_validate({"copy_rules": {"dos": [], "donts": []}, "notes": ""}).is_empty()


@pytest.mark.parametrize("value,expected", [
    (None, False),
    ("", False),
    ([], False),
    ({}, False),
    ("x", True),
    (["x"], True),
    (0, True),
    (Guidelines().brand_context, False),
])
def test_has_value(value, expected):
    assert has_value(value) is expected


def test_heuristics_nullable(make_doc):
    doc = make_doc(heuristics={"words_per_sentence": 18, "reading_level": ""})
    assert doc.heuristics.words_per_sentence == 18
    assert doc.heuristics.reading_level is None
    assert doc.heuristics.max_syllables is None


def test_empty_list_sections_read_as_empty(make_doc):
    doc = make_doc(brand_context=[], blocks=[], heuristics={"max_syllables": ""})
    assert doc.brand_context.is_empty()
    assert doc.blocks == {}
    assert doc.heuristics.max_syllables is None
