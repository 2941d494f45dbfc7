"""Timestamp ranges: ``<2013-12-31 Tue 12:21>--<2014-02-28 Fri 19:21>``."""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import FormatError
from .grammar import DEFAULT_GRAMMAR, Grammar, RangeFields
from .timestamp import Timestamp


@dataclass
class TimestampRange:
    """A start and end timestamp.

    Both dates are always written out. The halves share the time field:
    times are written only when both halves have one.
    """

    start: Timestamp
    end: Timestamp

    @classmethod
    def from_fields(cls, fields: RangeFields) -> TimestampRange:
        return cls(
            start=Timestamp.from_fields(fields.start),
            end=Timestamp.from_fields(fields.end),
        )

    @classmethod
    def from_string(cls, text: str, grammar: Grammar | None = None) -> TimestampRange:
        fields = (grammar or DEFAULT_GRAMMAR).match_timestamp_range(text)
        if fields is None:
            raise FormatError(f"Not a timestamp range: {text!r}")
        return cls.from_fields(fields)

    @property
    def has_time(self) -> bool:
        return self.start.time is not None and self.end.time is not None

    def __str__(self) -> str:
        include_time = self.has_time
        return (
            self.start.format(include_time=include_time)
            + "--"
            + self.end.format(include_time=include_time)
        )
