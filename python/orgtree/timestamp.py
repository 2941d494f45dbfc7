"""Timestamp values and repeater arithmetic.

A timestamp is a local calendar date with an optional start/end time, an
optional repeater and an optional warning delay::

    <2013-12-31 Tue 12:21-14:59 ++1w -2d>

Repeaters come in three kinds:

- ``+N``  simple: shift by one step from the stored value
- ``++N`` catch-up: shift by whole steps until the value is in the future
- ``.+N`` restart: one step from now, dropping the stored phase
"""

from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass
from enum import Enum

from dateutil.relativedelta import relativedelta

from .exceptions import FormatError, InvariantError
from .grammar import DEFAULT_GRAMMAR, Grammar, TimestampFields

logger = logging.getLogger(__name__)

_DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
_REPEATER_RE = re.compile(r"(\+\+|\.\+|\+)(\d+)([hdwmy])")
_INTERVAL_RE = re.compile(r"-(\d+)([hdwmy])")
_LABEL_RE = re.compile(r"[A-Z][A-Z_]*")


class TimeUnit(Enum):
    HOUR = "h"
    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"

    def delta(self, amount: int) -> relativedelta:
        """Calendar-aware shift of ``amount`` units."""
        return relativedelta(**{_DELTA_FIELDS[self]: amount})

    @property
    def is_fixed(self) -> bool:
        """True when every step has the same length in seconds."""
        return self in (TimeUnit.HOUR, TimeUnit.DAY, TimeUnit.WEEK)

    def timedelta(self, amount: int) -> datetime.timedelta:
        if not self.is_fixed:
            raise InvariantError(f"Unit {self.value!r} has no fixed length")
        return datetime.timedelta(**{_DELTA_FIELDS[self]: amount})


_DELTA_FIELDS = {
    TimeUnit.HOUR: "hours",
    TimeUnit.DAY: "days",
    TimeUnit.WEEK: "weeks",
    TimeUnit.MONTH: "months",
    TimeUnit.YEAR: "years",
}


class RepeaterKind(Enum):
    SIMPLE = "+"
    CATCH_UP = "++"
    RESTART = ".+"


@dataclass(frozen=True)
class Interval:
    """A warning delay such as ``-2d``."""

    amount: int
    unit: TimeUnit

    def __post_init__(self) -> None:
        _check_amount(self.amount)

    def delta(self) -> relativedelta:
        return self.unit.delta(self.amount)

    def __str__(self) -> str:
        return f"-{self.amount}{self.unit.value}"

    @staticmethod
    def parse(token: str) -> Interval:
        m = _INTERVAL_RE.fullmatch(token.strip())
        if m is None:
            raise FormatError(f"Not a warning delay: {token!r}")
        return Interval(_parse_amount(m.group(1), token), TimeUnit(m.group(2)))


@dataclass(frozen=True)
class Repeater:
    """A repeat rule such as ``++1w``."""

    kind: RepeaterKind
    amount: int
    unit: TimeUnit

    def __post_init__(self) -> None:
        _check_amount(self.amount)

    def step(self, count: int = 1) -> relativedelta:
        """Shift of ``count`` whole steps."""
        return self.unit.delta(self.amount * count)

    def __str__(self) -> str:
        return f"{self.kind.value}{self.amount}{self.unit.value}"

    @staticmethod
    def parse(token: str) -> Repeater:
        m = _REPEATER_RE.fullmatch(token.strip())
        if m is None:
            raise FormatError(f"Not a repeater: {token!r}")
        return Repeater(
            RepeaterKind(m.group(1)),
            _parse_amount(m.group(2), token),
            TimeUnit(m.group(3)),
        )


@dataclass
class Timestamp:
    """A local date with optional time range, repeater and warning delay.

    The day name is always derived from ``date``; a day name found in the
    source text is never stored.
    """

    date: datetime.date
    time: datetime.time | None = None
    end_time: datetime.time | None = None
    repeater: Repeater | None = None
    warning: Interval | None = None
    label: str | None = None

    def __post_init__(self) -> None:
        if self.end_time is not None and self.time is None:
            raise InvariantError("A timestamp with an end time needs a start time")
        if self.end_time is not None and self.end_time < self.time:
            raise InvariantError("End time may not be earlier than the start time")
        if self.label is not None and _LABEL_RE.fullmatch(self.label) is None:
            raise InvariantError(f"Invalid timestamp label: {self.label!r}")

    # -----------------------------------------------------------------------
    # Construction
    # -----------------------------------------------------------------------

    @classmethod
    def from_fields(cls, fields: TimestampFields) -> Timestamp:
        """Build a timestamp from raw grammar captures."""
        try:
            date = datetime.date.fromisoformat(fields.date)
            time = _parse_time(fields.time) if fields.time else None
            end_time = _parse_time(fields.time_end) if fields.time_end else None
        except ValueError as e:
            raise FormatError(f"Invalid date or time in timestamp: {e}") from e
        if end_time is not None and time is not None and end_time < time:
            raise FormatError(f"End time {fields.time_end} is earlier than start time {fields.time}")
        return cls(
            date=date,
            time=time,
            end_time=end_time,
            repeater=Repeater.parse(fields.repeat) if fields.repeat else None,
            warning=Interval.parse(fields.warning) if fields.warning else None,
            label=fields.label,
        )

    @classmethod
    def from_string(cls, text: str, grammar: Grammar | None = None) -> Timestamp:
        fields = (grammar or DEFAULT_GRAMMAR).match_timestamp(text)
        if fields is None:
            raise FormatError(f"Not a timestamp: {text!r}")
        return cls.from_fields(fields)

    # -----------------------------------------------------------------------
    # Derived values
    # -----------------------------------------------------------------------

    @property
    def day_name(self) -> str:
        return _DAY_NAMES[self.date.weekday()]

    @property
    def moment(self) -> datetime.datetime:
        """Start as a datetime; midnight for date-only timestamps."""
        return datetime.datetime.combine(self.date, self.time or datetime.time())

    @property
    def warning_time(self) -> datetime.datetime | None:
        if self.warning is None:
            return None
        return self.moment - self.warning.delta()

    def set_repeat(self, token: str | None) -> None:
        self.repeater = Repeater.parse(token) if token else None

    def set_warning(self, token: str | None) -> None:
        self.warning = Interval.parse(token) if token else None

    # -----------------------------------------------------------------------
    # Repeat
    # -----------------------------------------------------------------------

    def to_next_repeat(self, now: datetime.datetime | None = None) -> None:
        """Move this timestamp to its next occurrence.

        ``now`` defaults to the local current time. Hour steps on a
        date-only timestamp start from midnight and make it timed.
        Raises InvariantError when no repeater is set.
        """
        repeater = self.repeater
        if repeater is None:
            raise InvariantError("Timestamp has no repeater")
        if now is None:
            now = datetime.datetime.now()

        start = self.moment
        if repeater.kind is RepeaterKind.SIMPLE:
            target = start + repeater.step()
        elif repeater.kind is RepeaterKind.CATCH_UP:
            target = _catch_up(start, repeater, now)
        elif repeater.unit is TimeUnit.HOUR:
            target = now.replace(second=0, microsecond=0) + repeater.step()
        else:
            base = datetime.datetime.combine(now.date(), self.time or datetime.time())
            target = base + repeater.step()

        if repeater.unit is TimeUnit.HOUR and self.time is None:
            self.time = datetime.time()
        self._move_to(target)

    def _move_to(self, target: datetime.datetime) -> None:
        if self.end_time is not None and self.time is not None:
            span = max(
                datetime.datetime.combine(self.date, self.end_time) - self.moment,
                datetime.timedelta(),
            )
            end = target + span
            # End time stays on the start's day.
            self.end_time = end.time() if end.date() == target.date() else datetime.time(23, 59)
        self.date = target.date()
        if self.time is not None:
            self.time = target.time()

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------

    def format(self, include_time: bool = True) -> str:
        """The bracketed form, without label."""
        parts = [self.date.isoformat(), self.day_name]
        if include_time and self.time is not None:
            span = _format_time(self.time)
            if self.end_time is not None:
                span += "-" + _format_time(self.end_time)
            parts.append(span)
        if self.repeater is not None:
            parts.append(str(self.repeater))
        if self.warning is not None:
            parts.append(str(self.warning))
        return "<" + " ".join(parts) + ">"

    def __str__(self) -> str:
        if self.label:
            return f"{self.label}: {self.format()}"
        return self.format()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
        raise InvariantError(f"Amount must be a positive integer, got {amount!r}")


def _parse_amount(digits: str, token: str) -> int:
    amount = int(digits)
    if amount < 1:
        raise FormatError(f"Amount must be positive in {token!r}")
    return amount


def _parse_time(text: str) -> datetime.time:
    hours, minutes = text.split(":")
    return datetime.time(int(hours), int(minutes))


def _format_time(t: datetime.time) -> str:
    return f"{t.hour:02d}:{t.minute:02d}"


def _catch_up(
    start: datetime.datetime,
    repeater: Repeater,
    now: datetime.datetime,
) -> datetime.datetime:
    """First whole-step shift of ``start`` that lies strictly after ``now``."""
    if repeater.unit.is_fixed:
        step = repeater.unit.timedelta(repeater.amount)
        count = 1
        if start + step <= now:
            count = (now - start) // step + 1
        target = start + step * count
    else:
        # Counted from the anchor: Jan 31 ++1m lands on Mar 31, not Mar 28.
        count = 1
        while start + repeater.step(count) <= now:
            count += 1
        target = start + repeater.step(count)
    logger.debug("Catch-up repeat %s moved %s by %d step(s)", repeater, start, count)
    return target
