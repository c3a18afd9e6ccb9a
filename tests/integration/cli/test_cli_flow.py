"""Integration tests for the guidelines lifecycle through the CLI"""

import json

import pytest
from typer.testing import CliRunner

from cguide.cli.cli import app


GUIDELINES = {
    "brand_context": {"site_description": "Indoor gardening tips", "primary_goal": "inform"},
    "voice_tone": {"tone_traits": ["friendly"], "readability": "simple"},
    "copy_rules": {"dos": ["Use examples"], "donts": ["Avoid urgency"]},
    "vocabulary": {"avoid": [{"term": "utilize", "note": "say use"}]},
    "blocks": {"core/paragraph": {"copy_rules": {"dos": ["Keep it short"]}, "notes": "One idea each"}},
}


@pytest.fixture(name="cli")
def cli_fixture(tmp_path, monkeypatch):
    """Run CLI commands against a throwaway database in tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CGUIDE_DB_URL", f"sqlite:///{tmp_path}/test.db")
    runner = CliRunner()

    def _invoke(*args):
        return runner.invoke(app, list(args))
    return _invoke


@pytest.fixture(name="published")
def published_fixture(cli, tmp_path):
    (tmp_path / "guidelines.json").write_text(json.dumps({"guidelines": GUIDELINES, "version": "1.0"}))
    assert cli("import", "guidelines.json").exit_code == 0
    assert cli("publish").exit_code == 0
    return cli


def test_init(cli):
    result = cli("init")
    assert result.exit_code == 0, result.output
    assert "Database initialized" in result.output


def test_show_defaults_when_empty(cli):
    result = cli("show")
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["version"] == 1


def test_import_publish_show(published):
    shown = json.loads(published("show").output)
    assert shown["brand_context"]["site_description"] == "Indoor gardening tips"
    history = published("history")
    assert history.exit_code == 0
    assert "author=0" in history.output


def test_import_missing_file(cli):
    result = cli("import", "nope.json")
    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_import_invalid_json(cli, tmp_path):
    (tmp_path / "bad.json").write_text("{oops")
    result = cli("import", "bad.json")
    assert result.exit_code == 1
    assert "Import failed" in result.output


def test_import_merge(published, tmp_path):
    (tmp_path / "extra.json").write_text(json.dumps({"copy_rules": {"dos": ["Cite sources"]}}))
    assert published("import", "extra.json", "--merge").exit_code == 0
    draft = json.loads(published("show", "--draft").output)
    assert draft["copy_rules"]["dos"] == ["Use examples", "Cite sources"]


def test_publish_without_draft_fails(cli):
    result = cli("publish")
    assert result.exit_code == 1
    assert "No draft changes to publish" in result.output


def test_discard(published):
    published("set-block", "core/quote", "--notes", "Cite the source")
    assert "Draft discarded." in published("discard").output
    assert "No draft to discard." in published("discard").output


def test_restore_unknown_entry_fails(published):
    result = published("restore", "999")
    assert result.exit_code == 1
    assert "History entry 999 not found" in result.output


def test_restore_entry_to_draft(published):
    entries = json.loads(published("history", "--json").output)
    result = published("restore", str(entries[0]["id"]))
    assert result.exit_code == 0, result.output
    draft = json.loads(published("show", "--draft").output)
    assert draft["notes"] == ""
    assert draft["copy_rules"]["dos"] == ["Use examples"]


def test_packet_text_and_json(published):
    text = published("packet", "--task", "headline")
    assert text.exit_code == 0, text.output
    assert text.output.startswith("## SITE CONTENT GUIDELINES")
    assert "About this site" not in text.output

    data = json.loads(published("packet", "--json", "--block", "core/paragraph").output)
    assert data["packet_structured"]["copy_rules"]["dos"] == ["Use examples", "Keep it short"]
    assert data["revision_id"] is not None


def test_packet_max_chars_out_of_range(published):
    result = published("packet", "--max-chars", "50")
    assert result.exit_code == 1
    assert result.output.startswith("Error:")


def test_packet_for_post(published, tmp_path):
    (tmp_path / "post.html").write_text("<!-- wp:paragraph --><p>Hi</p><!-- /wp:paragraph -->")
    result = published("packet", "--post", "post.html")
    assert result.exit_code == 0, result.output
    assert "### Block-Specific Rules" in result.output
    assert "**core/paragraph:**" in result.output


def test_lint(published, tmp_path):
    (tmp_path / "post.md").write_text("---\ntitle: Soil\n---\n# Soil\n\nAct now and utilize fresh soil.\n")
    result = published("lint", "post.md", "--strict")
    assert result.exit_code == 1
    assert 'Found "utilize" (1 occurrence)' in result.output
    assert 'Found urgency phrase: "act now"' in result.output

    data = json.loads(published("lint", "post.md", "--json").output)
    assert data["passed"] is False
    assert data["issue_count"] == 2


def test_playground_run(published, tmp_path):
    (tmp_path / "post.md").write_text("---\ntitle: Repotting\n---\nUse fresh soil every spring.\n")
    published("set-block", "core/quote", "--notes", "Cite")
    result = published("test", "post.md", "--task", "generate_headlines", "--compare", "--json")
    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["fixture"]["title"] == "Repotting"
    assert report["ai_available"] is False
    assert "compare" in report
    assert report["context_packet"]["packet_structured"].keys() == {"voice_tone", "copy_rules", "vocabulary"}


def test_playground_compare_skipped_without_draft(published, tmp_path):
    (tmp_path / "post.md").write_text("Use fresh soil every spring.\n")
    report = json.loads(published("test", "post.md", "--compare", "--json").output)
    assert "compare" not in report
    assert report["context_packet"]["revision_id"] is not None


def test_playground_draft_run_has_no_revision(published, tmp_path):
    (tmp_path / "post.md").write_text("Use fresh soil every spring.\n")
    published("set-block", "core/quote", "--notes", "Cite")
    latest = json.loads(published("history", "--json").output)[0]["id"]
    report = json.loads(published("test", "post.md", "--compare", "--json").output)
    assert "revision_id" not in report["context_packet"]
    assert report["compare"]["context_packet"]["revision_id"] == latest


def test_playground_missing_fixture(published):
    result = published("test", "missing.md")
    assert result.exit_code == 1
    assert "Fixture not found" in result.output


def test_blocks_listing_and_packet(published):
    listing = published("blocks")
    assert "core/paragraph" in listing.output
    packet = published("blocks", "core/paragraph")
    assert "**core/paragraph:**" in packet.output
    assert "Note: One idea each" in packet.output


def test_set_block_rejects_bad_name(published):
    result = published("set-block", "quote", "--notes", "x")
    assert result.exit_code == 1
    assert "Invalid block name" in result.output


def test_export_to_file(published, tmp_path):
    result = published("export", "--out", "export.json")
    assert result.exit_code == 0, result.output
    envelope = json.loads((tmp_path / "export.json").read_text())
    assert envelope["version"] == "1.0"
    assert envelope["guidelines"]["vocabulary"]["avoid"][0]["term"] == "utilize"
    assert "site_url" not in envelope
