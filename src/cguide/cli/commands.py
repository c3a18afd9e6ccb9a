"""CLI command implementations"""

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer
from sqlmodel import Session, SQLModel

from cguide.config import Settings, load_config
from cguide.core.blocks import build_block_packet, build_post_packet, list_blocks
from cguide.core.fixtures import load_fixture, read_post
from cguide.core.lint import check
from cguide.core.merge import seed_draft, with_block
from cguide.core.models import BlockCopyRules, BlockGuidelines, coalesce
from cguide.core.packet import PacketOptions, build_packet
from cguide.core.playground import PlaygroundRequest, run_test
from cguide.crud.database import init_db, make_engine
from cguide.crud.serialize import dumps, export_envelope, read_import
from cguide.crud.sql_store import SQLStore
from cguide.errors import GuidelinesError


UseDraft = Annotated[bool, typer.Option("--draft", help="Use the draft instead of the active guidelines")]
AsJson = Annotated[bool, typer.Option("--json", help="Print machine-readable JSON")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


@contextmanager
def _open_store(settings: Settings) -> Iterator[SQLStore]:
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        yield SQLStore(session, settings.max_history, settings.block_namespaces)


def _echo_json(data) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def show_cmd(draft: UseDraft = False):
    """Print the guidelines document (the default document if none is stored)."""
    settings = _settings()
    with _open_store(settings) as store:
        document = store.get("draft" if draft else "active")
    typer.echo(dumps(coalesce(document)))


def import_cmd(
    path: Annotated[Path, typer.Argument(help="JSON export envelope or bare guidelines document")],
    merge: Annotated[bool, typer.Option("--merge", help="Merge into the current draft instead of replacing it")] = False,
    ):
    """Import guidelines into the draft."""
    settings = _settings()
    if not path.is_file():
        _fail(f"File not found: {path}")
    with _open_store(settings) as store:
        existing = seed_draft(store.get_draft(), store.get_active()) if merge else None
        try:
            document = read_import(path.read_text(encoding="utf-8"), existing, settings.block_namespaces)
        except GuidelinesError as e:
            _fail("Import failed", e)
        store.save_draft(document)
    typer.echo("Guidelines merged and saved as draft." if merge else "Guidelines imported and saved as draft.")


def export_cmd(
    out: Annotated[Optional[Path], typer.Option("--out", help="Write to this file instead of stdout")] = None,
    draft: UseDraft = False,
    no_meta: Annotated[bool, typer.Option("--no-meta", help="Omit version, timestamp, and site URL")] = False,
    ):
    """Export guidelines as a JSON envelope."""
    settings = _settings()
    with _open_store(settings) as store:
        document = coalesce(store.get("draft" if draft else "active"))
    envelope = export_envelope(document, settings.site_url, include_meta=not no_meta)
    text = json.dumps(envelope, indent=2, ensure_ascii=False)
    if out is None:
        typer.echo(text)
        return
    out.write_text(text + "\n", encoding="utf-8")
    typer.echo(f"Exported guidelines to {out}")


def publish_cmd(
    author: Annotated[Optional[int], typer.Option("--author", help="Author id recorded in history")] = None,
    ):
    """Promote the draft to active and record it in history."""
    settings = _settings(overrides={"author_id": author})
    with _open_store(settings) as store:
        try:
            entry = store.publish_draft(settings.author_id)
        except GuidelinesError as e:
            _fail(str(e))
    typer.echo(f"Published draft as history entry {entry.id}")


def discard_cmd():
    """Discard the draft."""
    settings = _settings()
    with _open_store(settings) as store:
        discarded = store.discard_draft()
    typer.echo("Draft discarded." if discarded else "No draft to discard.")


def history_cmd(
    limit: Annotated[Optional[int], typer.Option("--limit", help="Show at most this many entries")] = None,
    as_json: AsJson = False,
    ):
    """List published history, newest first."""
    settings = _settings()
    with _open_store(settings) as store:
        entries = store.get_history(limit)
    if as_json:
        _echo_json([e.model_dump(mode="json") for e in entries])
        return
    if not entries:
        typer.echo("No history entries.")
        return
    for e in entries:
        typer.echo(f"  {e.id}  {e.date_gmt:%Y-%m-%d %H:%M:%S}  author={e.author_id}")


def restore_cmd(
    entry_id: Annotated[int, typer.Argument(help="History entry id")],
    ):
    """Copy a history entry into the draft."""
    settings = _settings()
    with _open_store(settings) as store:
        try:
            store.restore_history_entry(entry_id)
        except GuidelinesError as e:
            _fail(str(e))
    typer.echo(f"Restored history entry {entry_id} as draft.")


def packet_cmd(
    task: Annotated[Optional[str], typer.Option("--task", help="writing, headline, cta, image, or coach")] = None,
    max_chars: Annotated[Optional[int], typer.Option("--max-chars", help="Packet text budget (100-10000)")] = None,
    block: Annotated[Optional[str], typer.Option("--block", help="Merge rules for this block, e.g. core/paragraph")] = None,
    post: Annotated[Optional[Path], typer.Option("--post", help="Post file whose blocks add block-specific rules")] = None,
    draft: UseDraft = False,
    as_json: AsJson = False,
    ):
    """Build the context packet for a task."""
    settings = _settings(overrides={"max_chars": max_chars})
    try:
        options = PacketOptions(task=task or settings.default_task, max_chars=settings.max_chars, block_name=block)
    except ValueError as e:
        _fail("Invalid packet options", e)

    with _open_store(settings) as store:
        document = store.get("draft" if draft else "active")
        source = store.source_info()
    if post is not None:
        try:
            _, markup = read_post(post)
        except (GuidelinesError, ValueError) as e:
            _fail(str(e))
        packet = build_post_packet(document, markup, options, source)
    else:
        packet = build_packet(document, options, source)

    if as_json:
        _echo_json(packet.model_dump(mode="json"))
    else:
        typer.echo(packet.packet_text)


def lint_cmd(
    path: Annotated[Path, typer.Argument(help="Markdown, HTML, or text file to check")],
    draft: UseDraft = False,
    strict: Annotated[bool, typer.Option("--strict", help="Exit 1 when any issue is found")] = False,
    as_json: AsJson = False,
    ):
    """Check content against the guidelines."""
    settings = _settings()
    try:
        fixture = load_fixture(path)
    except (GuidelinesError, ValueError) as e:
        _fail(str(e))
    with _open_store(settings) as store:
        document = coalesce(store.get("draft" if draft else "active"))
    result = check(fixture.content, document)

    if as_json:
        _echo_json({
            **result.model_dump(mode="json", exclude_none=True),
            "passed": result.passed,
            "issue_count": result.issue_count,
        })
    else:
        for issue in result.issues:
            typer.echo(f"  issue: {issue.message}")
        for s in result.suggestions:
            typer.echo(f"  suggestion: {s.message}")
        stats = result.stats
        typer.echo(
            f"{'Passed' if result.passed else 'Failed'} - "
            f"{result.issue_count} issue(s), {len(result.suggestions)} suggestion(s), "
            f"{stats.get('word_count', 0)} words, "
            f"{stats.get('avg_words_per_sentence', 0)} avg words/sentence"
        )
    if strict and not result.passed:
        raise typer.Exit(1)


def playground_cmd(
    fixture: Annotated[Path, typer.Argument(help="Fixture post file")],
    task: Annotated[str, typer.Option("--task", help="rewrite_intro, generate_headlines, or write_cta")] = "rewrite_intro",
    active: Annotated[bool, typer.Option("--active", help="Test the active guidelines instead of the draft")] = False,
    compare: Annotated[bool, typer.Option("--compare", help="Also run against the active guidelines")] = False,
    instructions: Annotated[str, typer.Option("--instructions", help="Extra instructions for the generator")] = "",
    as_json: AsJson = False,
    ):
    """Run a playground test: lint checks and context preview for a fixture."""
    settings = _settings()
    try:
        post = load_fixture(fixture)
    except (GuidelinesError, ValueError) as e:
        _fail(str(e))

    with _open_store(settings) as store:
        active_doc = store.get_active()
        draft_doc = None if active else store.get_draft()
        active_source = store.source_info()
    # a draft has no history entry of its own
    if draft_doc is not None:
        use, document, source = "draft", draft_doc, active_source.model_copy(update={"revision_id": None})
    else:
        use, document, source = "active", active_doc, active_source

    request = PlaygroundRequest(
        task=task,
        fixture_id=str(fixture),
        fixture=post,
        document=document,
        use=use,
        compare=compare,
        active_document=active_doc,
        extra_instructions=instructions,
        max_chars=settings.max_chars,
    )
    report = run_test(request, source=source, active_source=active_source)

    if as_json:
        _echo_json(report.model_dump(mode="json", exclude_none=True))
        return
    typer.echo(f"Fixture: {report.fixture.title}")
    typer.echo(f"Task: {report.task}")
    typer.echo(f"Lint: {'passed' if report.lint_results.passed else 'failed'} ({report.lint_results.issue_count} issue(s))")
    for issue in report.lint_results.issues:
        typer.echo(f"  issue: {issue.message}")
    if report.compare is not None:
        typer.echo(f"Active guidelines: {report.compare.lint_results.issue_count} issue(s)")
    if report.ai_message:
        typer.echo(report.ai_message)
    typer.echo("")
    typer.echo(report.context_packet.packet_text)


def blocks_cmd(
    names: Annotated[Optional[list[str]], typer.Argument(help="Show the rules packet for these blocks")] = None,
    configured: Annotated[bool, typer.Option("--configured", help="Only blocks that have guidelines")] = False,
    search: Annotated[str, typer.Option("--search", help="Filter by name or title")] = "",
    draft: UseDraft = False,
    ):
    """List blocks with guidelines, or show the rules packet for specific blocks."""
    settings = _settings()
    with _open_store(settings) as store:
        document = store.get("draft" if draft else "active")
        source = store.source_info()
    if names:
        typer.echo(build_block_packet(document, names, source).packet_text)
        return
    listings = list_blocks(document, configured_only=configured, search=search)
    if not listings:
        typer.echo("No blocks found.")
        return
    for b in listings:
        typer.echo(f"  {b.name}{'' if b.has_guidelines else ' (empty)'}")


def set_block_cmd(
    name: Annotated[str, typer.Argument(help="Block name, e.g. core/paragraph")],
    do: Annotated[Optional[list[str]], typer.Option("--do", help="Block-specific DO rule (repeatable)")] = None,
    dont: Annotated[Optional[list[str]], typer.Option("--dont", help="Block-specific DON'T rule (repeatable)")] = None,
    notes: Annotated[str, typer.Option("--notes", help="Notes for this block")] = "",
    ):
    """Replace the draft's rules for one block."""
    settings = _settings()
    block = BlockGuidelines(copy_rules=BlockCopyRules(dos=do or [], donts=dont or []), notes=notes)
    with _open_store(settings) as store:
        draft = seed_draft(store.get_draft(), store.get_active())
        try:
            store.save_draft(with_block(draft, name, block))
        except ValueError as e:
            _fail(f"Invalid block name: {name}", e)
    typer.echo(f"Guidelines for {name} updated.")
