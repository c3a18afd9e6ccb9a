"""Context packet builder: task-scoped section selection, block merge, text rendering, truncation"""

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, Field, field_validator

from cguide.core.models import Guidelines, has_value
from cguide.core.tables import (
    DEFAULT_TASK,
    FORMATTING_LABELS,
    GOAL_LABELS,
    POV_LABELS,
    READABILITY_LABELS,
    TASK_SECTIONS,
    TEXT_POLICY_LABELS,
    Task,
    label,
    resolve_task,
)


logger = logging.getLogger(__name__)

MIN_CHARS = 100
MAX_CHARS = 10000
DEFAULT_MAX_CHARS = 2000
ELLIPSIS = "..."
HEADER = "## SITE CONTENT GUIDELINES"


class PacketOptions(BaseModel):
    """Packet request options. Unknown tasks fall back to writing; max_chars outside [100, 10000] is rejected."""
    task:       Task = DEFAULT_TASK
    max_chars:  int = Field(default=DEFAULT_MAX_CHARS, ge=MIN_CHARS, le=MAX_CHARS)
    block_name: Optional[str] = None
    post_id:    Optional[int] = None
    locale:     Optional[str] = None

    @field_validator("task", mode="before")
    @classmethod
    def _fallback_task(cls, value):
        return resolve_task(value)

    @field_validator("block_name", "locale", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return value or None


class PacketSource(BaseModel):
    """Where a document came from: store id, latest history entry id, last update time."""
    document_id: Optional[int] = None
    revision_id: Optional[int] = None
    updated_at:  Optional[datetime] = None


class ContextPacket(BaseModel):
    packet_text:       str = ""
    packet_structured: dict[str, Any] = Field(default_factory=dict)
    document_id:       Optional[int] = None
    revision_id:       Optional[int] = None
    updated_at:        Optional[datetime] = None


def select_sections(document: Guidelines, task: Task) -> dict[str, Any]:
    """Copy the non-empty sections listed for task, in table order, as plain JSON-ready values."""
    relevant: dict[str, Any] = {}
    for name in TASK_SECTIONS[resolve_task(task)]:
        value = document.section(name)
        if not has_value(value):
            continue
        relevant[name] = value.model_dump(mode="json") if isinstance(value, BaseModel) else value
    return relevant


def merge_block(relevant: dict[str, Any], document: Guidelines, block_name: str) -> dict[str, Any]:
    """Append a block's dos/donts to the site-level copy rules and attach its notes as block_notes.

    Returns a new dict; relevant is left untouched. Site rules always come first.
    """
    block = document.block(block_name)
    if block is None or block.is_empty():
        return relevant

    merged = dict(relevant)
    rules = block.copy_rules
    if not rules.is_empty():
        copy_rules = dict(merged.get("copy_rules", {}))
        if rules.dos:
            copy_rules["dos"] = [*copy_rules.get("dos", []), *rules.dos]
        if rules.donts:
            copy_rules["donts"] = [*copy_rules.get("donts", []), *rules.donts]
        merged["copy_rules"] = copy_rules
    if block.notes:
        merged["block_notes"] = block.notes
    return merged


def _bullets(items) -> list[str]:
    return [f"- {item}" for item in items]


def _terms(items) -> list[str]:
    lines = []
    for item in items:
        term, note = (item.get("term", ""), item.get("note", "")) if isinstance(item, dict) else (item, "")
        lines.append(f'- "{term}"' + (f" ({note})" if note else ""))
    return lines


def _render_brand_context(bc: Mapping[str, Any]) -> list[str]:
    lines = []
    if bc.get("site_description"):
        lines.append(f"About this site: {bc['site_description']}")
    if bc.get("audience"):
        lines.append(f"Target audience: {bc['audience']}")
    if bc.get("primary_goal"):
        lines.append(f"Primary goal: {label(GOAL_LABELS, bc['primary_goal'])}")
    if bc.get("topics"):
        lines.append(f"Topics: {', '.join(bc['topics'])}")
    return lines + [""]


def _render_voice_tone(vt: Mapping[str, Any]) -> list[str]:
    lines = ["### Voice & Tone"]
    if vt.get("description"):
        lines.append(f"Voice: {vt['description']}")
    if vt.get("tone_traits"):
        lines.append(f"Tone: {', '.join(vt['tone_traits'])}")
    if vt.get("tone_notes"):
        lines.append(f"Tone notes: {vt['tone_notes']}")
    if vt.get("pov"):
        lines.append(f"Point of view: {label(POV_LABELS, vt['pov'])}")
    if vt.get("readability"):
        lines.append(f"Readability: {label(READABILITY_LABELS, vt['readability'])}")
    return lines + [""]


def _render_copy_rules(cr: Mapping[str, Any]) -> list[str]:
    lines = ["### Copy Rules"]
    if cr.get("dos"):
        lines += ["DO:", *_bullets(cr["dos"])]
    if cr.get("donts"):
        lines += ["DON'T:", *_bullets(cr["donts"])]
    if cr.get("formatting"):
        lines.append("Formatting: " + ", ".join(label(FORMATTING_LABELS, f) for f in cr["formatting"]))
    return lines + [""]


def _render_vocabulary(vocab: Mapping[str, Any]) -> list[str]:
    lines = ["### Vocabulary"]
    if vocab.get("prefer"):
        lines += ["PREFER these terms:", *_terms(vocab["prefer"])]
    if vocab.get("avoid"):
        lines += ["AVOID these terms:", *_terms(vocab["avoid"])]
    return lines + [""]


def _render_images(img: Mapping[str, Any]) -> list[str]:
    lines = ["### Image Style"]
    if img.get("dos"):
        lines += ["Image style:", *_bullets(img["dos"])]
    if img.get("donts"):
        lines += ["Avoid in images:", *_bullets(img["donts"])]
    if img.get("text_policy"):
        lines.append(f"Text in images: {label(TEXT_POLICY_LABELS, img['text_policy'])}")
    return lines + [""]


def _render_notes(notes: str) -> list[str]:
    return ["### Additional Notes", notes, ""]


# Render order of packet sections; block_notes is handled separately for its label.
RENDERERS: tuple[tuple[str, Callable[[Any], list[str]]], ...] = (
    ("brand_context", _render_brand_context),
    ("voice_tone",    _render_voice_tone),
    ("copy_rules",    _render_copy_rules),
    ("vocabulary",    _render_vocabulary),
    ("images",        _render_images),
    ("notes",         _render_notes),
)


def render_text(relevant: Mapping[str, Any], block_name: Optional[str] = None) -> str:
    """Render a structured packet to prompt text. Empty sub-fields are skipped, never shown as placeholders."""
    lines = [HEADER]
    if block_name:
        lines.append(f"(Context: {block_name} block)")
    lines.append("")

    for key, render in RENDERERS:
        if relevant.get(key):
            lines += render(relevant[key])

    if relevant.get("block_notes"):
        lines += [f"### {block_name or 'Block'} Notes", relevant["block_notes"], ""]

    return "\n".join(lines)


def truncate(text: str, max_chars: int) -> str:
    """Cut text to exactly max_chars characters, ending in '...', when it is longer than max_chars."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars - len(ELLIPSIS)] + ELLIPSIS


def build_packet(
    document: Optional[Guidelines],
    options: Union[PacketOptions, Mapping[str, Any], None] = None,
    source: Optional[PacketSource] = None,
    ) -> ContextPacket:
    """Build the structured and text context packet for a task.

    With no document at all, every field of the packet is empty. Raises
    pydantic.ValidationError (a ValueError) when max_chars is out of range.
    """
    if not isinstance(options, PacketOptions):
        options = PacketOptions.model_validate(options or {})
    if document is None:
        return ContextPacket()

    relevant = select_sections(document, options.task)
    if options.block_name:
        relevant = merge_block(relevant, document, options.block_name)

    full_text = render_text(relevant, options.block_name)
    text = truncate(full_text, options.max_chars)
    logger.debug(
        "Packet built: task=%s block=%s sections=%s chars=%d truncated=%s",
        options.task.value, options.block_name, list(relevant), len(text), len(text) < len(full_text),
    )

    source = source or PacketSource()
    return ContextPacket(
        packet_text=text,
        packet_structured=relevant,
        document_id=source.document_id,
        revision_id=source.revision_id,
        updated_at=source.updated_at,
    )
