"""Grammar configuration read from YAML.

Recognized keys::

    todo-keywords: TODO NEXT | DONE     # or a list: [TODO, NEXT, DONE]
    comment-marker: "#"

Unknown keys are ignored; missing keys keep the defaults.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from .exceptions import ConfigError, InvariantError
from .grammar import DEFAULT_COMMENT_MARKER, Grammar
from .keywords import TodoKeywords


@dataclass
class GrammarConfig:
    todo_keywords: TodoKeywords | None = None
    comment_marker: str = DEFAULT_COMMENT_MARKER

    def grammar(self) -> Grammar:
        """A Grammar built from this configuration."""
        return Grammar(todo_keywords=self.todo_keywords, comment_marker=self.comment_marker)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_config(text: str) -> GrammarConfig:
    """Parse a YAML configuration document."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in grammar configuration: {e}") from e

    if data is None:
        return GrammarConfig()
    if not isinstance(data, dict):
        raise ConfigError("Grammar configuration must be a mapping")

    config = GrammarConfig()
    keywords = data.get("todo-keywords")
    if keywords is not None:
        config.todo_keywords = _parse_keywords(keywords)
    marker = data.get("comment-marker")
    if marker is not None:
        marker = str(marker)
        if not marker or any(ch.isspace() for ch in marker):
            raise ConfigError(f"Invalid comment-marker: {marker!r}")
        config.comment_marker = marker
    return config


def load_config(path: Path | str) -> GrammarConfig:
    try:
        content = Path(path).read_text()
    except OSError as e:
        raise ConfigError(f"Cannot read grammar configuration {path}: {e}") from e
    return parse_config(content)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _parse_keywords(value: object) -> TodoKeywords | None:
    if isinstance(value, list):
        value = " ".join(str(v) for v in value)
    if not isinstance(value, str):
        raise ConfigError(f"todo-keywords must be a string or a list, got {value!r}")
    if not value.strip():
        return None
    try:
        return TodoKeywords.parse(value)
    except InvariantError as e:
        raise ConfigError(f"Invalid todo-keywords: {e}") from e
