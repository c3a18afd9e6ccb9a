"""Lint checker: vocabulary, readability, and keyword-activated copy-rule checks against a document"""

import logging
import re
from enum import Enum
from typing import Iterable, Optional, Union

from pydantic import BaseModel, Field

from cguide.core.models import Guidelines
from cguide.core.tables import DEFAULT_READABILITY, READABILITY_CEILINGS
from cguide.core.utils.text import split_sentences, strip_tags, word_count


logger = logging.getLogger(__name__)


class CheckCategory(str, Enum):
    urgency = "urgency"
    superlatives = "superlatives"


# Substrings in a don't-rule that switch a category on (matched case-insensitively).
ACTIVATION_KEYWORDS: dict[CheckCategory, tuple[str, ...]] = {
    CheckCategory.urgency:      ("urgency", "pressure"),
    CheckCategory.superlatives: ("best", "#1", "superlative"),
}

URGENCY_PHRASES = (
    "act now",
    "limited time",
    "don't miss",
    "hurry",
    "last chance",
    "expires soon",
    "urgent",
)

SUPERLATIVE_PATTERNS = (
    re.compile(r"\bbest\b", re.IGNORECASE),
    re.compile(r"(?<!\w)#1\b"),
    re.compile(r"\bnumber one\b", re.IGNORECASE),
    re.compile(r"\btop-rated\b", re.IGNORECASE),
    re.compile(r"\bunbeatable\b", re.IGNORECASE),
)


class LintIssue(BaseModel):
    """A hard violation; any issue fails the check."""
    type:    str
    message: str
    rule:    Optional[str] = None
    term:    Optional[str] = None
    count:   Optional[int] = None
    note:    Optional[str] = None
    actual:  Optional[float] = None
    target:  Optional[int] = None
    pattern: Optional[str] = None


class LintSuggestion(BaseModel):
    """A soft nudge; never affects pass/fail."""
    type:    str
    message: str
    term:    Optional[str] = None
    note:    Optional[str] = None
    count:   Optional[int] = None


class LintResult(BaseModel):
    issues:      list[LintIssue] = Field(default_factory=list)
    suggestions: list[LintSuggestion] = Field(default_factory=list)
    stats:       dict[str, Union[int, float]] = Field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not self.issues

    @property
    def issue_count(self) -> int:
        return len(self.issues)


def infer_activated_checks(donts: Iterable[str]) -> set[CheckCategory]:
    """Return the pattern-check categories that the free-text don't-rules ask for."""
    activated = set()
    for rule in donts:
        lowered = rule.lower()
        for category, keywords in ACTIVATION_KEYWORDS.items():
            if any(k in lowered for k in keywords):
                activated.add(category)
    return activated


def _term_pattern(term: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


def check_vocabulary(content: str, document: Guidelines, result: LintResult) -> None:
    """One issue per avoided term found (with its count); one suggestion per preferred term missing."""
    vocab = document.vocabulary
    for item in vocab.avoid:
        term = item.term.lower()
        if not term:
            continue
        count = len(_term_pattern(term).findall(content))
        if count:
            noun = "occurrence" if count == 1 else "occurrences"
            result.issues.append(LintIssue(
                type="vocabulary_avoid",
                term=term,
                count=count,
                message=f'Found "{term}" ({count} {noun})',
                note=item.note,
            ))

    for item in vocab.prefer:
        term = item.term.lower()
        if not term or not item.note:
            continue
        if not _term_pattern(term).search(content):
            result.suggestions.append(LintSuggestion(
                type="vocabulary_prefer",
                term=term,
                message=f'Consider using "{term}"',
                note=item.note,
            ))


def readability_ceiling(document: Guidelines) -> tuple[str, int]:
    """Return (level, max average words per sentence) for the document's readability target."""
    level = document.voice_tone.readability or DEFAULT_READABILITY
    level = getattr(level, "value", level)
    if level not in READABILITY_CEILINGS:
        level = DEFAULT_READABILITY
    return level, READABILITY_CEILINGS[level]


def check_readability(content: str, document: Guidelines, result: LintResult) -> None:
    text = strip_tags(content)
    sentences = split_sentences(text)
    words = word_count(text)
    avg = round(words / len(sentences), 1) if sentences else 0

    level, ceiling = readability_ceiling(document)
    long_sentences = [s for s in sentences if word_count(s) > ceiling * 2]

    result.stats.update({
        "word_count": words,
        "sentence_count": len(sentences),
        "avg_words_per_sentence": avg,
        "long_sentence_count": len(long_sentences),
    })

    if avg > ceiling:
        result.issues.append(LintIssue(
            type="readability",
            message=(
                f"Average sentence length is {avg} words. "
                f'Target for "{level}" readability is around {ceiling} words.'
            ),
            actual=avg,
            target=ceiling,
        ))

    if long_sentences:
        n = len(long_sentences)
        verb = "sentence is" if n == 1 else "sentences are"
        result.suggestions.append(LintSuggestion(
            type="long_sentences",
            message=f"{n} {verb} very long and may be hard to read.",
            count=n,
        ))


def check_copy_rules(content: str, document: Guidelines, result: LintResult) -> None:
    activated = infer_activated_checks(document.copy_rules.donts)
    if not activated:
        return

    if CheckCategory.urgency in activated:
        lowered = content.lower()
        for phrase in URGENCY_PHRASES:
            if phrase in lowered:
                result.issues.append(LintIssue(
                    type="copy_rule",
                    rule="no_urgency",
                    message=f'Found urgency phrase: "{phrase}"',
                    pattern=phrase,
                ))

    if CheckCategory.superlatives in activated:
        for pattern in SUPERLATIVE_PATTERNS:
            if m := pattern.search(content):
                result.issues.append(LintIssue(
                    type="copy_rule",
                    rule="no_superlatives",
                    message=f'Found superlative claim: "{m.group(0)}"',
                    pattern=m.group(0),
                ))


def check(content: Optional[str], document: Optional[Guidelines]) -> LintResult:
    """Lint content against document. Empty content or no document yields an empty result."""
    result = LintResult()
    if not content or document is None:
        return result

    check_vocabulary(content, document, result)
    check_readability(content, document, result)
    check_copy_rules(content, document, result)
    logger.debug(
        "Lint complete: issues=%d suggestions=%d words=%s",
        len(result.issues), len(result.suggestions), result.stats.get("word_count"),
    )
    return result
