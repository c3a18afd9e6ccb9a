"""Root test configuration: session-level cleanup of runtime artifacts"""

from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["cguide.db", "test.db"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep CGUIDE_* variables from the developer's shell out of tests."""
    for name in ("DB_URL", "MAX_CHARS", "DEFAULT_TASK", "MAX_HISTORY", "BLOCK_NAMESPACES",
                 "AUTHOR_ID", "SITE_URL", "LOG_LEVEL", "APP_NAME"):
        monkeypatch.delenv(f"CGUIDE_{name}", raising=False)
