"""Block-aware guidelines: block names in post markup, per-block packets, post packets, block listing"""

import re
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, Field

from cguide.core.models import BlockGuidelines, Guidelines
from cguide.core.packet import ContextPacket, PacketOptions, PacketSource, build_packet


DEFAULT_NAMESPACE = "core"
LEGACY_PREFIX = "core/legacy-"
BLOCK_PACKET_HEADER = "## CONTENT GUIDELINES"
BLOCK_RULES_HEADER = "### Block-Specific Rules"

# Opening (or self-closing) block delimiters; closers are `<!-- /wp:... -->` and never match.
BLOCK_OPEN_RE = re.compile(r"<!--\s+wp:([a-z][a-z0-9_-]*(?:/[a-z][a-z0-9_-]*)?)(?=[\s/])")


class BlockPacket(BaseModel):
    """Site copy rules plus the rules for each requested block (None when a block has none)."""
    site_rules:  dict[str, Any] = Field(default_factory=dict)
    blocks:      dict[str, Optional[dict[str, Any]]] = Field(default_factory=dict)
    packet_text: str = ""
    document_id: Optional[int] = None


class PostPacket(ContextPacket):
    blocks_in_post:   list[str] = Field(default_factory=list)
    block_guidelines: dict[str, dict[str, Any]] = Field(default_factory=dict)


class BlockType(BaseModel):
    """A registered block type as reported by a block registry."""
    name:        str
    title:       str = ""
    description: str = ""
    category:    str = ""


class BlockListing(BlockType):
    has_guidelines: bool = False


def block_has_content(block: Union[BlockGuidelines, Mapping[str, Any], None]) -> bool:
    """True when a block carries dos, donts or notes."""
    if not block:
        return False
    if not isinstance(block, BlockGuidelines):
        block = BlockGuidelines.model_validate(block)
    return bool(block.copy_rules.dos or block.copy_rules.donts or block.notes)


def parse_block_names(markup: str) -> list[str]:
    """Return the unique block names used in serialized post markup, in document order.

    Nested blocks are included; bare names get the core namespace.
    """
    names: list[str] = []
    for m in BLOCK_OPEN_RE.finditer(markup or ""):
        name = m.group(1)
        if "/" not in name:
            name = f"{DEFAULT_NAMESPACE}/{name}"
        if name not in names:
            names.append(name)
    return names


def block_rule_lines(block_name: str, block: BlockGuidelines) -> list[str]:
    lines = [f"**{block_name}:**"]
    if block.copy_rules.dos:
        lines += ["DO:", *(f"- {rule}" for rule in block.copy_rules.dos)]
    if block.copy_rules.donts:
        lines += ["DON'T:", *(f"- {rule}" for rule in block.copy_rules.donts)]
    if block.notes:
        lines.append(f"Note: {block.notes}")
    return lines


def build_block_packet(
    document: Optional[Guidelines],
    block_names: Union[str, Iterable[str]],
    source: Optional[PacketSource] = None,
    ) -> BlockPacket:
    """Site-level copy rules and per-block rules for the given block names, with rendered text."""
    if isinstance(block_names, str):
        block_names = [block_names]
    if document is None:
        return BlockPacket()

    site_rules = document.copy_rules
    blocks = {name: document.block(name) for name in block_names}

    lines = [BLOCK_PACKET_HEADER]
    if site_rules.dos or site_rules.donts:
        lines += ["", "### Site Rules"]
        if site_rules.dos:
            lines += ["DO:", *(f"- {rule}" for rule in site_rules.dos)]
        if site_rules.donts:
            lines += ["DON'T:", *(f"- {rule}" for rule in site_rules.donts)]

    configured = [(name, block) for name, block in blocks.items() if block_has_content(block)]
    if configured:
        lines += ["", BLOCK_RULES_HEADER]
        for name, block in configured:
            lines += ["", *block_rule_lines(name, block)]

    return BlockPacket(
        site_rules=site_rules.model_dump(mode="json"),
        blocks={name: b.model_dump(mode="json") if b is not None else None for name, b in blocks.items()},
        packet_text="\n".join(lines),
        document_id=(source or PacketSource()).document_id,
    )


def build_post_packet(
    document: Optional[Guidelines],
    markup: str,
    options: Union[PacketOptions, Mapping[str, Any], None] = None,
    source: Optional[PacketSource] = None,
    ) -> PostPacket:
    """Task packet for a post with an appendix of rules for every configured block the post uses.

    The appendix is added after truncation of the base packet.
    """
    names = parse_block_names(markup)
    if document is None:
        return PostPacket(blocks_in_post=names)

    base = build_packet(document, options, source)
    configured = {name: document.blocks[name] for name in names if block_has_content(document.block(name))}

    text = base.packet_text
    if configured:
        text += f"\n{BLOCK_RULES_HEADER}\n"
        for name, block in configured.items():
            text += "\n" + "\n".join(block_rule_lines(name, block)) + "\n"

    return PostPacket(
        **base.model_dump(exclude={"packet_text"}),
        packet_text=text,
        blocks_in_post=names,
        block_guidelines={name: block.model_dump(mode="json") for name, block in configured.items()},
    )


def list_blocks(
    document: Optional[Guidelines],
    registry: Optional[Iterable[BlockType]] = None,
    configured_only: bool = False,
    search: str = "",
    ) -> list[BlockListing]:
    """List block types with a flag for whether the document configures them.

    Without a registry, the document's own block keys are listed. Legacy core
    blocks are skipped; results are sorted by title, case-insensitively.
    """
    blocks = document.blocks if document is not None else {}
    if registry is None:
        registry = [BlockType(name=name) for name in blocks]

    needle = search.lower()
    listings = []
    for block_type in registry:
        if block_type.name.startswith(LEGACY_PREFIX):
            continue
        has_guidelines = block_has_content(blocks.get(block_type.name))
        if configured_only and not has_guidelines:
            continue
        title = block_type.title or block_type.name
        if needle and needle not in title.lower() and needle not in block_type.name.lower():
            continue
        listings.append(BlockListing(
            **block_type.model_dump(exclude={"title"}),
            title=title,
            has_guidelines=has_guidelines,
        ))
    return sorted(listings, key=lambda b: b.title.lower())
