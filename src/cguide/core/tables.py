"""Static lookup tables: task sections, playground tasks, enum labels, lint thresholds"""

from enum import Enum
from types import MappingProxyType


class Task(str, Enum):
    """Packet task types."""
    writing = "writing"
    headline = "headline"
    cta = "cta"
    image = "image"
    coach = "coach"


class PlaygroundTask(str, Enum):
    rewrite_intro = "rewrite_intro"
    generate_headlines = "generate_headlines"
    write_cta = "write_cta"


DEFAULT_TASK = Task.writing

# Ordered top-level sections copied into a packet for each task.
TASK_SECTIONS: MappingProxyType = MappingProxyType({
    Task.writing:  ("brand_context", "voice_tone", "copy_rules", "vocabulary", "notes"),
    Task.headline: ("voice_tone", "copy_rules", "vocabulary"),
    Task.cta:      ("brand_context", "copy_rules", "vocabulary"),
    Task.image:    ("brand_context", "images"),
    Task.coach:    ("voice_tone", "copy_rules", "vocabulary"),
})

PLAYGROUND_TASKS: MappingProxyType = MappingProxyType({
    PlaygroundTask.rewrite_intro:      Task.writing,
    PlaygroundTask.generate_headlines: Task.headline,
    PlaygroundTask.write_cta:          Task.cta,
})

GOAL_LABELS: MappingProxyType = MappingProxyType({
    "subscribe": "Get email subscribers",
    "sell":      "Sell products/services",
    "inform":    "Inform and educate",
    "community": "Build community",
    "other":     "Other",
})

POV_LABELS: MappingProxyType = MappingProxyType({
    "we_you":       'Write as "we" speaking to "you"',
    "i_you":        'Write as "I" speaking to "you"',
    "third_person": "Write in third person",
})

READABILITY_LABELS: MappingProxyType = MappingProxyType({
    "simple":  "Simple (elementary level)",
    "general": "General audience",
    "expert":  "Expert/technical",
})

FORMATTING_LABELS: MappingProxyType = MappingProxyType({
    "h2s":              "Use H2 headings",
    "bullets":          "Use bullet points",
    "short_paragraphs": "Keep paragraphs short",
    "single_cta":       "Single CTA at end",
})

TEXT_POLICY_LABELS: MappingProxyType = MappingProxyType({
    "never":             "Never include text in images",
    "only_if_requested": "Only include text if explicitly requested",
    "ok":                "Text in images is acceptable",
})

# Target ceiling for average words per sentence, by readability level.
READABILITY_CEILINGS: MappingProxyType = MappingProxyType({
    "simple":  12,
    "general": 20,
    "expert":  30,
})
DEFAULT_READABILITY = "general"


def resolve_task(task) -> Task:
    """Return the Task for task, falling back to writing for unknown or empty values."""
    try:
        return Task(task)
    except ValueError:
        return DEFAULT_TASK


def resolve_playground_task(task) -> Task:
    """Map a playground task name to its packet task; unknown names map to writing."""
    try:
        return PLAYGROUND_TASKS[PlaygroundTask(task)]
    except ValueError:
        return DEFAULT_TASK


def label(table: MappingProxyType, value) -> str:
    """Human-readable label for an enum value; unknown values pass through verbatim."""
    key = value.value if isinstance(value, Enum) else value
    return table.get(key, str(key))
