"""Outline assembly -- turns a stream of lines into a heading tree.

Each heading line opens a new node under the nearest open heading with a
smaller level; every other line goes to the body of the most recent node.
Lines before the first heading belong to the level-0 root.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .exceptions import FormatError
from .grammar import DEFAULT_GRAMMAR, Grammar
from .heading import Heading

logger = logging.getLogger(__name__)


class OutlineAssembler:
    """Incremental line-driven builder of a heading tree."""

    def __init__(self, grammar: Grammar | None = None) -> None:
        self.grammar = grammar or DEFAULT_GRAMMAR
        self.root = Heading(level=0, grammar=self.grammar)
        # Open headings from the root down to the current one.
        self._stack: list[Heading] = [self.root]
        self.line_count = 0

    @property
    def current(self) -> Heading:
        return self._stack[-1]

    def feed(self, line: str) -> None:
        """Route one line, without its terminator, into the tree."""
        if "\n" in line or "\r" in line:
            raise FormatError(
                f"Line {self.line_count + 1} contains a line terminator: {line!r}"
            )
        fields = self.grammar.match_heading(line)
        if fields is None:
            self.current.add_body_line(line)
            self.line_count += 1
            return

        heading = Heading(
            level=fields.level,
            title=fields.title,
            todo=fields.todo,
            tags=list(fields.tags),
            grammar=self.grammar,
        )
        _drop_separator(self.current)
        while self._stack[-1].level >= heading.level:
            self._stack.pop()
        self._stack[-1].add_child(heading)
        self._stack.append(heading)
        self.line_count += 1
        logger.debug(
            "Line %d: level %d heading %r under %r",
            self.line_count, heading.level, heading.title, self._stack[-2].title,
        )

    def feed_lines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.feed(line)

    def finish(self) -> Heading:
        """The document root."""
        return self.root


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_lines(lines: Iterable[str], grammar: Grammar | None = None) -> Heading:
    """Build a heading tree from lines without terminators."""
    assembler = OutlineAssembler(grammar)
    assembler.feed_lines(lines)
    return assembler.finish()


def loads(text: str, grammar: Grammar | None = None) -> Heading:
    return parse_lines(split_lines(text), grammar)


def load(path: Path | str, grammar: Grammar | None = None, encoding: str = "utf-8") -> Heading:
    path = Path(path)
    root = loads(path.read_text(encoding=encoding), grammar)
    logger.debug("Loaded %s: %d heading(s)", path, sum(1 for _ in root.walk()) - 1)
    return root


def dumps(root: Heading) -> str:
    return root.render_tree()


def dump(root: Heading, path: Path | str, encoding: str = "utf-8") -> None:
    path = Path(path)
    path.write_text(dumps(root), encoding=encoding)
    logger.debug("Wrote %s", path)


def split_lines(text: str) -> list[str]:
    """Split on LF and CRLF line endings only.

    Form feeds and Unicode line separators stay inside their line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _drop_separator(heading: Heading) -> None:
    """Remove the blank line that separates a heading from the next one.

    Rendering writes that line back, so a render/parse cycle is stable.
    """
    body = heading.body
    if body == "\n":
        heading.body = ""
    elif body.endswith("\n\n"):
        heading.body = body[:-1]
