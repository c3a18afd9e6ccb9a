"""Fixture posts for playground runs: markdown or HTML files with optional YAML frontmatter"""

from pathlib import Path

from cguide.core.playground import Fixture
from cguide.core.utils.text import markdown_to_text, strip_frontmatter
from cguide.errors import FixtureNotFoundError


MD_EXTENSIONS = {".md", ".mdx", ".markdown"}


def read_post(path: Path) -> tuple[dict, str]:
    """Return (frontmatter, body) of a post file. Raises FixtureNotFoundError if it does not exist."""
    if not path.is_file():
        raise FixtureNotFoundError(path)
    return strip_frontmatter(path.read_text(encoding="utf-8"))


def load_fixture(path: Path, preset: str = "commonmark") -> Fixture:
    """Load a fixture post. Markdown bodies are rendered to plain text; other files are kept as markup.

    The title comes from the `title` frontmatter key, else the file stem.
    """
    frontmatter, body = read_post(path)
    content = markdown_to_text(body, preset) if path.suffix in MD_EXTENSIONS else body
    return Fixture(title=str(frontmatter.get("title") or path.stem), content=content)
