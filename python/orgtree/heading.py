"""Heading nodes of the outline tree.

Each heading owns its children; the link back to the parent is a weak
reference. Level 0 is reserved for the document root, which renders no
heading line.
"""

from __future__ import annotations

import weakref
from enum import Enum
from typing import Iterator

from .exceptions import FormatError, InvariantError
from .grammar import DEFAULT_GRAMMAR, HEADING_MARKER, TAG_SEPARATOR, Grammar
from .keywords import TodoKeywords
from .timerange import TimestampRange
from .timestamp import Timestamp


class BodyState(Enum):
    """Where the next body line goes.

    While the body holds only whitespace, comment and timestamp lines are
    lifted out of it; after that every line is plain body text.
    """

    LEADING_METADATA = "leading-metadata"
    BODY = "body"


class Heading:
    """One node of the outline: heading line, leading metadata and body.

    ``parent`` is a weak reference. Keep the root alive while walking up the
    tree; a node whose ancestors were freed sees ``parent`` as None.
    """

    def __init__(
        self,
        level: int = 0,
        title: str = "",
        todo: str | None = None,
        tags: list[str] | None = None,
        grammar: Grammar | None = None,
    ) -> None:
        self._level = 0
        self._title = ""
        self._todo: str | None = None
        self._body = ""
        self._comments = ""
        self._parent: weakref.ReferenceType[Heading] | None = None

        self.level = level
        self.title = title
        self.todo = todo
        self.grammar = grammar or DEFAULT_GRAMMAR
        self.tags: list[str] = []
        self.timestamps: list[Timestamp] = []
        self.timestamp_ranges: list[TimestampRange] = []
        self.children: list[Heading] = []
        if tags:
            self.add_tags(*tags)

    def __repr__(self) -> str:
        return f"Heading(level={self._level}, todo={self._todo!r}, title={self._title!r})"

    # -----------------------------------------------------------------------
    # Validated attributes
    # -----------------------------------------------------------------------

    @property
    def level(self) -> int:
        return self._level

    @level.setter
    def level(self, level: int) -> None:
        if isinstance(level, bool) or not isinstance(level, int):
            raise InvariantError(f"Level must be an integer, got {level!r}")
        if level < 0:
            raise InvariantError("Level may not be negative; only the document root is level 0")
        parent = self.parent
        if parent is not None and parent.level >= level:
            raise InvariantError("Level must stay greater than the parent's level")
        if any(child.level <= level for child in getattr(self, "children", ())):
            raise InvariantError("Level must stay less than every child's level")
        self._level = level

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, title: str) -> None:
        if title is None:
            raise InvariantError("Title may not be None")
        if "\n" in title or "\r" in title:
            raise InvariantError("Title may not contain a line terminator")
        self._title = title

    @property
    def todo(self) -> str | None:
        return self._todo

    @todo.setter
    def todo(self, todo: str | None) -> None:
        if todo is not None and (not todo or any(ch.isspace() for ch in todo)):
            raise InvariantError(f"Invalid todo keyword: {todo!r}")
        self._todo = todo

    @property
    def body(self) -> str:
        return self._body

    @body.setter
    def body(self, body: str) -> None:
        """Replace the body text; it is not re-parsed."""
        if body is None:
            raise InvariantError("Body may not be None")
        self._body = body

    @property
    def comments(self) -> str:
        return self._comments

    @comments.setter
    def comments(self, comments: str) -> None:
        if comments is None:
            raise InvariantError("Comments may not be None")
        self._comments = comments

    @property
    def parent(self) -> Heading | None:
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, parent: Heading | None) -> None:
        if parent is None:
            self._parent = None
            return
        if parent.level >= self._level:
            raise InvariantError("Parent's level must be less than this heading's level")
        self._parent = weakref.ref(parent)

    @property
    def body_state(self) -> BodyState:
        if self._body.strip():
            return BodyState.BODY
        return BodyState.LEADING_METADATA

    # -----------------------------------------------------------------------
    # Mutation
    # -----------------------------------------------------------------------

    def add_tags(self, *tags: str | None) -> None:
        """Append own tags; None arguments are ignored."""
        new_tags = [tag for tag in tags if tag is not None]
        for tag in new_tags:
            if not tag or TAG_SEPARATOR in tag or any(ch.isspace() for ch in tag):
                raise InvariantError(f"Invalid tag: {tag!r}")
        self.tags.extend(new_tags)

    def add_timestamp(self, *timestamps: Timestamp) -> None:
        self.timestamps.extend(timestamps)

    def add_timestamp_range(self, *ranges: TimestampRange) -> None:
        self.timestamp_ranges.extend(ranges)

    def add_child(self, child: Heading) -> None:
        """Attach ``child`` as the last sub-heading."""
        previous = child.parent
        child.parent = self
        if previous is not None and previous is not self:
            previous.children.remove(child)
        self.children.append(child)

    def add_body_line(self, line: str) -> None:
        """Add one line, without its terminator, to this heading's body.

        Comments, timestamps and timestamp ranges are lifted out while the
        body is still blank; once it has text, lines are kept verbatim.
        """
        if "\n" in line or "\r" in line:
            raise FormatError(f"Body line may not contain a line terminator: {line!r}")

        if self.body_state is BodyState.LEADING_METADATA:
            if self.grammar.is_comment_line(line):
                self._comments += line + "\n"
                self._body = ""
                return
            fields = self.grammar.match_timestamp(line)
            if fields is not None:
                timestamp = Timestamp.from_fields(fields)
                # Blank lines before metadata are dropped.
                self._body = ""
                self.timestamps.append(timestamp)
                return
            range_fields = self.grammar.match_timestamp_range(line)
            if range_fields is not None:
                timestamp_range = TimestampRange.from_fields(range_fields)
                self._body = ""
                self.timestamp_ranges.append(timestamp_range)
                return

        self._body += line + "\n"

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def get_all_tags(self) -> list[str]:
        """Own tags, then each ancestor's tags, nearest first.

        Only ancestors that are still alive are visited, so hold a reference
        to the root (for example the result of ``loads``) while calling this.
        """
        tags = list(self.tags)
        ancestor = self.parent
        while ancestor is not None:
            tags.extend(ancestor.tags)
            ancestor = ancestor.parent
        return tags

    def is_done(self, vocabulary: TodoKeywords | None = None) -> bool:
        return (vocabulary or TodoKeywords.default()).is_done(self._todo)

    def walk(self) -> Iterator[Heading]:
        """This heading and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------

    def header(self) -> str:
        """The heading line without newline; empty for the root."""
        if self._level < 1:
            return ""
        parts = [HEADING_MARKER * self._level, " "]
        if self._todo is not None:
            parts.append(self._todo + " ")
        parts.append(self._title)
        if self.tags:
            parts.append(" " + TAG_SEPARATOR + TAG_SEPARATOR.join(self.tags) + TAG_SEPARATOR)
        return "".join(parts)

    def body_text(self) -> str:
        """Comments, timestamps, ranges and body, in that order."""
        parts = [self._comments]
        parts.extend(f"{timestamp}\n" for timestamp in self.timestamps)
        parts.extend(f"{timestamp_range}\n" for timestamp_range in self.timestamp_ranges)
        parts.append(self._body)
        return "".join(parts)

    def render(self) -> str:
        if self._level < 1:
            return self.body_text()
        return self.header() + "\n" + self.body_text()

    def render_tree(self) -> str:
        """This heading and its sub-tree, siblings separated by a blank line.

        An empty root gets no separator before its first child.
        """
        parts = [self.render()]
        for child in self.children:
            if any(parts):
                parts.append("\n")
            parts.append(child.render_tree())
        return "".join(parts)

    def __str__(self) -> str:
        return self.render()
