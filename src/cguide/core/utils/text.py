"""Plain-text helpers: tag stripping, tokenization, word trimming, markdown rendering"""

import re
from typing import Any

import yaml
from markdown_it import MarkdownIt


TAG_RE = re.compile(r"<[^>]*>")
BLOCK_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)
# Letters with inner apostrophes/hyphens; digits are not words.
WORD_RE = re.compile(r"[^\W\d_]+(?:['’-][^\W\d_]+)*")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+(?:\s|$)")


def strip_tags(text: str) -> str:
    """Remove HTML comments (including block delimiters) and tags."""
    return TAG_RE.sub("", BLOCK_COMMENT_RE.sub("", text))


def words(text: str) -> list[str]:
    return WORD_RE.findall(text)


def word_count(text: str) -> int:
    return len(words(text))


def split_sentences(text: str) -> list[str]:
    """Split on runs of . ! ? followed by whitespace or end of text; blank fragments are dropped."""
    return [s for s in SENTENCE_SPLIT_RE.split(strip_tags(text)) if s.strip()]


def trim_words(text: str, limit: int, more: str = "...") -> str:
    """Return the first limit whitespace-separated words of text, appending more if anything was cut."""
    parts = strip_tags(text).split()
    if len(parts) <= limit:
        return " ".join(parts)
    return " ".join(parts[:limit]) + more


def strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with a leading YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        fm = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm, text[m.end():]


def _inline_text(token) -> str:
    parts = []
    for child in token.children or []:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append("\n" if child.type == "hardbreak" else " ")
    return "".join(parts)


def markdown_to_text(markdown: str, preset: str = "commonmark") -> str:
    """Render markdown to plain text: one paragraph per block, markup and raw HTML dropped."""
    tokens = MarkdownIt(preset).parse(markdown)
    blocks = []
    for tok in tokens:
        if tok.type == "inline":
            text = _inline_text(tok).strip()
        elif tok.type in ("fence", "code_block"):
            text = tok.content.rstrip()
        else:
            continue
        if text:
            blocks.append(text)
    return "\n\n".join(blocks)
