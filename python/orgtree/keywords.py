"""TodoKeywords -- ordered vocabulary of active and done todo keywords.

Uses the in-buffer convention ``TODO NEXT | DONE``: keywords left of the bar
are open states, keywords right of it are finished states.
"""

from __future__ import annotations

from .exceptions import InvariantError


class TodoKeywords:
    """Active and done keyword lists, in declaration order."""

    def __init__(
        self,
        active: list[str],
        done: list[str],
    ) -> None:
        for keyword in [*active, *done]:
            check_keyword(keyword)
        if not active and not done:
            raise InvariantError("At least one todo keyword is required")
        self.active = list(active)
        self.done = list(done)

    def all(self) -> list[str]:
        """Every keyword, active ones first."""
        return self.active + self.done

    def is_done(self, keyword: str | None) -> bool:
        return keyword is not None and keyword in self.done

    def is_active(self, keyword: str | None) -> bool:
        return keyword is not None and keyword in self.active

    def __contains__(self, keyword: object) -> bool:
        return keyword in self.active or keyword in self.done

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TodoKeywords):
            return NotImplemented
        return self.active == other.active and self.done == other.done

    def __repr__(self) -> str:
        return f"TodoKeywords({self.active!r}, {self.done!r})"

    def __str__(self) -> str:
        return " ".join(self.active + ["|"] + self.done)

    @staticmethod
    def parse(sequence: str) -> TodoKeywords:
        """Build a vocabulary from ``TODO NEXT | DONE`` style text.

        Without a bar the last keyword is the only done state.
        """
        if sequence.count("|") > 1:
            raise InvariantError(f"More than one '|' in keyword sequence: {sequence!r}")
        if "|" in sequence:
            left, right = sequence.split("|")
            return TodoKeywords(left.split(), right.split())
        words = sequence.split()
        if not words:
            raise InvariantError("Empty todo keyword sequence")
        if len(words) == 1:
            return TodoKeywords([], words)
        return TodoKeywords(words[:-1], words[-1:])

    @staticmethod
    def default() -> TodoKeywords:
        return TodoKeywords(["TODO"], ["DONE"])


def check_keyword(keyword: str) -> None:
    if not keyword or any(ch.isspace() for ch in keyword) or "|" in keyword:
        raise InvariantError(f"Invalid todo keyword: {keyword!r}")
