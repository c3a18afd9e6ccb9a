"""Unit tests for core/tables.py"""

import pytest

from cguide.core.models import PrimaryGoal
from cguide.core.tables import (
    GOAL_LABELS,
    TASK_SECTIONS,
    Task,
    label,
    resolve_playground_task,
    resolve_task,
)


@pytest.mark.parametrize("value,expected", [
    ("headline", Task.headline),
    (Task.coach, Task.coach),
    ("", Task.writing),
    (None, Task.writing),
    ("poetry", Task.writing),
])
def test_resolve_task(value, expected):
    assert resolve_task(value) is expected


@pytest.mark.parametrize("value,expected", [
    ("rewrite_intro", Task.writing),
    ("generate_headlines", Task.headline),
    ("write_cta", Task.cta),
    ("summarize", Task.writing),
])
def test_resolve_playground_task(value, expected):
    assert resolve_playground_task(value) is expected


def test_every_task_has_sections():
    assert set(TASK_SECTIONS) == set(Task)


def test_tables_are_read_only():
    with pytest.raises(TypeError):
        TASK_SECTIONS[Task.writing] = ()


@pytest.mark.parametrize("value,expected", [
    (PrimaryGoal.sell, "Sell products/services"),
    ("community", "Build community"),
    ("entertain", "entertain"),
])
def test_label(value, expected):
    assert label(GOAL_LABELS, value) == expected
