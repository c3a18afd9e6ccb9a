"""Playground orchestration: lint + packet + optional AI generation, with draft/active comparison"""

import logging
from typing import Any, Callable, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from cguide.core.lint import LintResult, check
from cguide.core.models import Guidelines, coalesce
from cguide.core.packet import DEFAULT_MAX_CHARS, ContextPacket, PacketOptions, PacketSource, build_packet
from cguide.core.tables import PlaygroundTask, resolve_playground_task
from cguide.core.utils.text import strip_tags, trim_words
from cguide.errors import FixtureNotFoundError


logger = logging.getLogger(__name__)

AI_UNAVAILABLE_MESSAGE = "No AI provider connected. Showing lint checks and context preview only."

# Excerpt budgets per playground task.
INTRO_CHARS = 500
HEADLINE_WORDS = 150
CTA_WORDS = 300
DEFAULT_WORDS = 200
SUMMARY_WORDS = 100


class Fixture(BaseModel):
    """Source post a playground run works from."""
    title:   str = ""
    content: str = ""


class GenerationRequest(BaseModel):
    task:               str
    excerpt:            str
    document:           Guidelines
    packet:             ContextPacket
    extra_instructions: str = ""


class GenerationResult(BaseModel):
    output:       str
    alternatives: list[str] = Field(default_factory=list)
    metadata:     dict[str, Any] = Field(default_factory=dict)


# Returns None when the hook does not handle the request.
GenerationHook = Callable[[GenerationRequest], Union[GenerationResult, Mapping[str, Any], None]]


class PlaygroundRun(BaseModel):
    lint_results:   LintResult
    context_packet: ContextPacket
    ai_result:      Optional[GenerationResult] = None


class FixtureSummary(BaseModel):
    title:   str = ""
    excerpt: str = ""


class PlaygroundReport(PlaygroundRun):
    task:         str
    fixture:      FixtureSummary
    ai_available: bool = True
    ai_message:   Optional[str] = None
    compare:      Optional[PlaygroundRun] = None


class PlaygroundRequest(BaseModel):
    task:               str = PlaygroundTask.rewrite_intro.value
    fixture_id:         Optional[str] = None
    fixture:            Optional[Fixture] = None
    document:           Optional[Guidelines] = None
    use:                Literal["draft", "active"] = "draft"
    compare:            bool = False
    active_document:    Optional[Guidelines] = None
    extra_instructions: str = ""
    max_chars:          int = DEFAULT_MAX_CHARS


def extract_excerpt(task: str, fixture: Fixture) -> str:
    """Cut the fixture down to the budget its playground task works with."""
    content = strip_tags(fixture.content)
    if task == PlaygroundTask.rewrite_intro:
        return content[:INTRO_CHARS]
    if task == PlaygroundTask.generate_headlines:
        return f"{fixture.title}\n\n{trim_words(content, HEADLINE_WORDS)}"
    if task == PlaygroundTask.write_cta:
        return trim_words(content, CTA_WORDS)
    return trim_words(content, DEFAULT_WORDS)


def invoke_hook(hook: Optional[GenerationHook], request: GenerationRequest) -> Optional[GenerationResult]:
    """Call the generation hook. A missing, declining, or failing hook all count as not handled."""
    if hook is None:
        return None
    try:
        raw = hook(request)
        if raw is None or isinstance(raw, GenerationResult):
            return raw
        return GenerationResult.model_validate(raw)
    except ValidationError as e:
        logger.warning("AI generation hook returned an invalid result: %s", e)
    except Exception:
        logger.warning("AI generation hook failed; treating as not handled", exc_info=True)
    return None


def _run_once(
    task: str,
    excerpt: str,
    document: Guidelines,
    options: PacketOptions,
    extra_instructions: str,
    hook: Optional[GenerationHook],
    source: Optional[PacketSource],
    ) -> PlaygroundRun:
    lint_results = check(excerpt, document)
    packet = build_packet(document, options, source)
    ai_result = invoke_hook(hook, GenerationRequest(
        task=task,
        excerpt=excerpt,
        document=document,
        packet=packet,
        extra_instructions=extra_instructions,
    ))
    return PlaygroundRun(lint_results=lint_results, context_packet=packet, ai_result=ai_result)


def run_test(
    request: PlaygroundRequest,
    hook: Optional[GenerationHook] = None,
    source: Optional[PacketSource] = None,
    active_source: Optional[PacketSource] = None,
    ) -> PlaygroundReport:
    """Run one playground test and, when comparing a draft, the same test against the active document.

    Raises FixtureNotFoundError when no fixture is given. A missing document
    falls back to the default document; a missing active document omits the
    comparison.
    """
    if request.fixture is None:
        raise FixtureNotFoundError(request.fixture_id or "<none>")

    document = coalesce(request.document)
    options = PacketOptions(task=resolve_playground_task(request.task), max_chars=request.max_chars)
    excerpt = extract_excerpt(request.task, request.fixture)

    run = _run_once(request.task, excerpt, document, options, request.extra_instructions, hook, source)
    report = PlaygroundReport(
        **dict(run),
        task=request.task,
        fixture=FixtureSummary(title=request.fixture.title, excerpt=trim_words(excerpt, SUMMARY_WORDS)),
    )
    if run.ai_result is None:
        report.ai_available = False
        report.ai_message = AI_UNAVAILABLE_MESSAGE

    if request.compare and request.use == "draft" and request.active_document is not None:
        report.compare = _run_once(
            request.task, excerpt, request.active_document, options,
            request.extra_instructions, hook, active_source,
        )

    logger.debug(
        "Playground run: task=%s packet_task=%s issues=%d ai=%s compare=%s",
        request.task, options.task.value, run.lint_results.issue_count,
        report.ai_available, report.compare is not None,
    )
    return report
