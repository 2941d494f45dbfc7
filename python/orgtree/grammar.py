"""Line grammar -- classifies single outline lines and extracts named fields.

Recognizes four kinds of special line::

    ** TODO Write report :work:urgent:          heading
    # a comment                                  comment
    SCHEDULED: <2013-12-31 Tue 12:21-14:59 ++1w -2d>   timestamp
    <2013-12-31 Tue 12:21>--<2014-02-28 Fri 19:21>     timestamp range

Anything else is plain body text. A line that does not match a recognizer
yields ``None``; no recognizer raises.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .exceptions import InvariantError
from .keywords import TodoKeywords, check_keyword

HEADING_MARKER = "*"
TAG_SEPARATOR = ":"
DEFAULT_COMMENT_MARKER = "#"

# Fallback when no vocabulary is registered: a leading all-caps word.
_HEURISTIC_TODO = r"[A-Z]{2,}"

_LABEL = r"(?:(?P<label>[A-Z][A-Z_]*):\s*)?"


def _timestamp_body(prefix: str = "") -> str:
    """Bracketed timestamp pattern with group names carrying ``prefix``."""
    return (
        rf"<(?P<{prefix}date>\d{{4}}-\d{{2}}-\d{{2}})"
        rf"(?:\s+(?P<{prefix}day>[^\W\d_]+\.?))?"
        rf"(?:\s+(?P<{prefix}time>\d{{1,2}}:\d{{2}})"
        rf"(?:-(?P<{prefix}time_end>\d{{1,2}}:\d{{2}}))?)?"
        rf"(?:\s+(?P<{prefix}repeat>(?:\+\+|\.\+|\+)\d+[hdwmy]))?"
        rf"(?:\s+(?P<{prefix}warning>-\d+[hdwmy]))?"
        r"\s*>"
    )


_TIMESTAMP_RE = re.compile(r"\s*" + _LABEL + _timestamp_body() + r"\s*")
_RANGE_RE = re.compile(
    r"\s*" + _timestamp_body("start_") + "--" + _timestamp_body("end_") + r"\s*"
)
_TAG_BLOCK = r"(?P<tags>:(?:[^\s:]+:)+)"


class LineKind(Enum):
    HEADING = "heading"
    COMMENT = "comment"
    TIMESTAMP = "timestamp"
    TIMESTAMP_RANGE = "timestamp-range"
    TEXT = "text"


@dataclass(frozen=True)
class HeadingFields:
    stars: str
    title: str
    todo: str | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def level(self) -> int:
        return len(self.stars)


@dataclass(frozen=True)
class TimestampFields:
    """Raw captures of one bracketed timestamp; absent parts are None."""

    date: str
    day: str | None = None
    time: str | None = None
    time_end: str | None = None
    repeat: str | None = None
    warning: str | None = None
    label: str | None = None


@dataclass(frozen=True)
class RangeFields:
    start: TimestampFields
    end: TimestampFields


class Grammar:
    """Recognizers for one outline dialect.

    ``todo_keywords`` selects the todo keyword rule: with no keywords any
    leading all-caps word is a todo keyword, otherwise only the registered
    ones are.
    """

    def __init__(
        self,
        todo_keywords: TodoKeywords | Iterable[str] | None = None,
        comment_marker: str = DEFAULT_COMMENT_MARKER,
    ) -> None:
        if isinstance(todo_keywords, TodoKeywords):
            keywords = todo_keywords.all()
        elif todo_keywords is None:
            keywords = []
        else:
            keywords = list(todo_keywords)
            for keyword in keywords:
                check_keyword(keyword)
        if not comment_marker or any(ch.isspace() for ch in comment_marker):
            raise InvariantError(f"Invalid comment marker: {comment_marker!r}")

        self.todo_keywords: tuple[str, ...] = tuple(keywords)
        self.comment_marker = comment_marker

        if keywords:
            # Longest first so that TODO does not shadow TODOLATER.
            todo = "|".join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
        else:
            todo = _HEURISTIC_TODO
        self._heading_re = re.compile(
            rf"(?P<stars>{re.escape(HEADING_MARKER)}+)[ \t]+"
            rf"(?:(?P<todo>{todo})[ \t]+)?"
            r"(?P<title>.*?)"
            rf"(?:[ \t]+{_TAG_BLOCK})?[ \t]*"
        )
        self._comment_re = re.compile(rf"\s*{re.escape(comment_marker)}(?:\s|$)")

    def __repr__(self) -> str:
        return (
            f"Grammar(todo_keywords={list(self.todo_keywords)!r}, "
            f"comment_marker={self.comment_marker!r})"
        )

    # -----------------------------------------------------------------------
    # Recognizers
    # -----------------------------------------------------------------------

    def match_heading(self, line: str) -> HeadingFields | None:
        m = self._heading_re.fullmatch(line)
        if m is None:
            return None
        return HeadingFields(
            stars=m.group("stars"),
            todo=m.group("todo"),
            title=m.group("title"),
            tags=parse_tags(m.group("tags")),
        )

    def is_heading_line(self, line: str) -> bool:
        return self._heading_re.fullmatch(line) is not None

    def is_comment_line(self, line: str) -> bool:
        return self._comment_re.match(line) is not None

    def match_timestamp(self, line: str) -> TimestampFields | None:
        m = _TIMESTAMP_RE.fullmatch(line)
        if m is None:
            return None
        return _timestamp_fields(m, "", label=m.group("label"))

    def is_timestamp_line(self, line: str) -> bool:
        return _TIMESTAMP_RE.fullmatch(line) is not None

    def match_timestamp_range(self, line: str) -> RangeFields | None:
        m = _RANGE_RE.fullmatch(line)
        if m is None:
            return None
        return RangeFields(
            start=_timestamp_fields(m, "start_"),
            end=_timestamp_fields(m, "end_"),
        )

    def is_timestamp_range_line(self, line: str) -> bool:
        return _RANGE_RE.fullmatch(line) is not None

    def classify(self, line: str) -> LineKind:
        """Kind of ``line``; ``TEXT`` when no recognizer accepts it."""
        if self.is_heading_line(line):
            return LineKind.HEADING
        if self.is_comment_line(line):
            return LineKind.COMMENT
        if self.is_timestamp_line(line):
            return LineKind.TIMESTAMP
        if self.is_timestamp_range_line(line):
            return LineKind.TIMESTAMP_RANGE
        return LineKind.TEXT


def parse_tags(block: str | None) -> tuple[str, ...]:
    """Split a ``:a:b:`` tag block, dropping empty tokens."""
    if not block:
        return ()
    return tuple(tag for tag in block.split(TAG_SEPARATOR) if tag)


def _timestamp_fields(m: re.Match, prefix: str, label: str | None = None) -> TimestampFields:
    return TimestampFields(
        date=m.group(prefix + "date"),
        day=m.group(prefix + "day"),
        time=m.group(prefix + "time"),
        time_end=m.group(prefix + "time_end"),
        repeat=m.group(prefix + "repeat"),
        warning=m.group(prefix + "warning"),
        label=label,
    )


DEFAULT_GRAMMAR = Grammar()
