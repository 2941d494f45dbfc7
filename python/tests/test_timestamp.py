"""Tests for orgtree.timestamp -- parsing, rendering and repeater arithmetic."""

import datetime

import pytest

from orgtree.exceptions import FormatError, InvariantError
from orgtree.timestamp import Interval, Repeater, RepeaterKind, TimeUnit, Timestamp

NOW = datetime.datetime(2026, 10, 17, 14, 10)


@pytest.mark.parametrize("text,expected", [
    ("<2013-12-31>", "<2013-12-31 Tue>"),
    ("<2013-12-31 12:30>", "<2013-12-31 Tue 12:30>"),
    ("<2013-12-31 12:30 -1w>", "<2013-12-31 Tue 12:30 -1w>"),
    ("<2013-12-31 12:30 ++4y>", "<2013-12-31 Tue 12:30 ++4y>"),
    ("<2013-12-31 12:30 ++4m>", "<2013-12-31 Tue 12:30 ++4m>"),
    ("<2013-12-31 12:30 ++4w>", "<2013-12-31 Tue 12:30 ++4w>"),
    ("<2013-12-31 12:30 ++4d>", "<2013-12-31 Tue 12:30 ++4d>"),
    ("<2013-12-31 12:30 ++4h>", "<2013-12-31 Tue 12:30 ++4h>"),
    ("<2013-12-31 12:30-19:12 ++4d>", "<2013-12-31 Tue 12:30-19:12 ++4d>"),
    ("<2013-12-31 9:05 .+1d>", "<2013-12-31 Tue 09:05 .+1d>"),
])
def test_timestamp_to_string(text, expected):
    """Parsed timestamps render in canonical form."""
    assert str(Timestamp.from_string(text)) == expected


def test_day_name_is_recomputed():
    """The day name comes from the date, not from the text."""
    ts = Timestamp.from_string("<2013-12-31 Wed>")
    assert ts.day_name == "Tue"
    assert str(ts) == "<2013-12-31 Tue>"


def test_label_round_trip():
    """A labeled timestamp renders with its label."""
    text = "SCHEDULED: <2013-12-31 Tue 12:21-14:59 ++1w -2d>"
    ts = Timestamp.from_string(text)
    assert ts.label == "SCHEDULED"
    assert ts.format() == "<2013-12-31 Tue 12:21-14:59 ++1w -2d>"
    assert str(ts) == text


@pytest.mark.parametrize("text", [
    "<2013-12-31 Tue 12:21-14:59 ++1w -2d>",
    "<2000-02-29 Sat .+3m>",
    "DEADLINE: <2024-01-01 Mon 00:00 -5h>",
    "<1999-07-04 Sun +2y>",
])
def test_reparse_keeps_fields(text):
    """Parsing the rendered form gives an equal timestamp."""
    ts = Timestamp.from_string(text)
    again = Timestamp.from_string(str(ts))
    assert again == ts


def test_fields_are_typed():
    """Parsed fields are dates, times and value objects."""
    ts = Timestamp.from_string("<2013-12-31 Tue 12:21-14:59 ++1w -2d>")
    assert ts.date == datetime.date(2013, 12, 31)
    assert ts.time == datetime.time(12, 21)
    assert ts.end_time == datetime.time(14, 59)
    assert ts.repeater == Repeater(RepeaterKind.CATCH_UP, 1, TimeUnit.WEEK)
    assert ts.warning == Interval(2, TimeUnit.DAY)


@pytest.mark.parametrize("text", ["<2013-02-30>", "<2013-12-31 25:00>", "not a timestamp", "<>"])
def test_invalid_timestamp_text(text):
    """Impossible dates and times raise FormatError."""
    with pytest.raises(FormatError):
        Timestamp.from_string(text)


def test_end_time_requires_start_time():
    """An end time without a start time is rejected."""
    with pytest.raises(InvariantError):
        Timestamp(datetime.date(2013, 12, 31), end_time=datetime.time(12, 0))


def test_invalid_label():
    """Labels must be uppercase words."""
    with pytest.raises(InvariantError):
        Timestamp(datetime.date(2013, 12, 31), label="due date")


def test_timestamp_get_warning():
    """Warning time is the start minus the warning delay."""
    ts = Timestamp.from_string("<2013-12-31 12:30-19:12 -1d>")
    assert ts.warning_time == datetime.datetime(2013, 12, 30, 12, 30)


def test_warning_time_absent_without_warning():
    """No warning delay means no warning time."""
    assert Timestamp.from_string("<2013-12-31>").warning_time is None


def test_moment_of_date_only_is_midnight():
    """A date-only timestamp starts at midnight."""
    ts = Timestamp.from_string("<2013-12-31>")
    assert ts.moment == datetime.datetime(2013, 12, 31, 0, 0)


def test_repeater_and_interval_parse():
    """Repeater and interval tokens parse and render."""
    assert str(Repeater.parse("++4w")) == "++4w"
    assert Repeater.parse(".+2d").kind is RepeaterKind.RESTART
    assert Repeater.parse("+1y").kind is RepeaterKind.SIMPLE
    assert str(Interval.parse("-3m")) == "-3m"
    with pytest.raises(FormatError):
        Repeater.parse("+1x")
    with pytest.raises(FormatError):
        Interval.parse("2d")


@pytest.mark.parametrize("amount", [0, -1, True])
def test_amount_must_be_positive(amount):
    """Constructed repeaters and intervals need a positive amount."""
    with pytest.raises(InvariantError):
        Repeater(RepeaterKind.SIMPLE, amount, TimeUnit.DAY)
    with pytest.raises(InvariantError):
        Interval(amount, TimeUnit.DAY)


@pytest.mark.parametrize("text", ["<2013-12-31 +0d>", "<2013-12-31 -0d>", "<2013-12-31 ++00w>", "<2013-12-31 .+0h -0y>"])
def test_zero_amount_in_text_is_format_error(text):
    """A zero repeat or warning amount in text is a format error."""
    with pytest.raises(FormatError):
        Timestamp.from_string(text)


def test_zero_amount_tokens_are_format_errors():
    """Zero amounts are rejected when parsing single tokens."""
    with pytest.raises(FormatError):
        Repeater.parse("+0d")
    with pytest.raises(FormatError):
        Interval.parse("-0d")
    ts = Timestamp.from_string("<2013-12-31 +1d>")
    with pytest.raises(FormatError):
        ts.set_repeat("+0d")
    assert str(ts.repeater) == "+1d"


def test_end_time_before_start_in_text():
    """An end time earlier than the start time is a format error."""
    with pytest.raises(FormatError):
        Timestamp.from_string("<2013-12-31 14:00-12:00>")
    ts = Timestamp.from_string("<2013-12-31 12:00-12:00>")
    assert ts.end_time == ts.time


def test_end_time_before_start_on_construction():
    """Constructing a timestamp that ends before it starts is rejected."""
    with pytest.raises(InvariantError):
        Timestamp(
            datetime.date(2013, 12, 31),
            time=datetime.time(14, 0),
            end_time=datetime.time(12, 0),
        )


def test_set_repeat_and_warning():
    """Repeat and warning can be replaced or cleared."""
    ts = Timestamp.from_string("<2013-12-31 +1y -1d>")
    ts.set_repeat("++2w")
    ts.set_warning(None)
    assert str(ts) == "<2013-12-31 Tue ++2w>"
    ts.set_repeat(None)
    assert ts.repeater is None


def test_next_repeat_without_repeater_raises():
    """Repeating without a repeater raises and leaves the value alone."""
    ts = Timestamp.from_string("<2013-12-31 12:30>")
    with pytest.raises(InvariantError):
        ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2013, 12, 31)


def test_next_repeat_simple():
    """A simple repeater moves one step for every unit."""
    ts = Timestamp.from_string("<2013-12-31 12:30 +1y>")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2014, 12, 31)
    assert ts.time == datetime.time(12, 30)
    # month
    ts.set_repeat("+1m")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2015, 1, 31)
    # week
    ts.set_repeat("+1w")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2015, 2, 7)
    # day
    ts.set_repeat("+1d")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2015, 2, 8)
    # hour
    ts.set_repeat("+1h")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2015, 2, 8)
    assert ts.time == datetime.time(13, 30)


def test_next_repeat_simple_ignores_now():
    """A simple repeater may stay in the past."""
    ts = Timestamp.from_string("<2001-12-28 12:30 +1y>")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2002, 12, 28)


def test_simple_month_clamps_to_month_end():
    """Month steps clamp to the last day of a shorter month."""
    ts = Timestamp.from_string("<2013-01-31 +1m>")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2013, 2, 28)


def test_simple_hour_crosses_midnight_and_year():
    """Hour steps roll over the date."""
    ts = Timestamp.from_string("<2013-12-31 23:30 +1h>")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2014, 1, 1)
    assert ts.time == datetime.time(0, 30)


def test_hour_repeat_on_date_only_starts_at_midnight():
    """Hour steps make a date-only timestamp timed."""
    ts = Timestamp.from_string("<2013-12-31 +2h>")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2013, 12, 31)
    assert ts.time == datetime.time(2, 0)


def test_date_only_stays_date_only():
    """Day steps keep a date-only timestamp untimed."""
    ts = Timestamp.from_string("<2013-12-31 +1d>")
    ts.to_next_repeat(NOW)
    assert ts.time is None
    assert str(ts) == "<2014-01-01 Wed +1d>"


def test_end_time_keeps_duration():
    """The end time moves with the start time."""
    ts = Timestamp.from_string("<2013-12-31 12:30-14:00 +12h>")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2014, 1, 1)
    assert ts.time == datetime.time(0, 30)
    assert ts.end_time == datetime.time(2, 0)


def test_end_time_stays_on_same_day():
    """An end time pushed past midnight is clamped to 23:59."""
    ts = Timestamp.from_string("<2013-12-31 22:00-23:30 +1h>")
    ts.to_next_repeat(NOW)
    assert ts.time == datetime.time(23, 0)
    assert ts.end_time == datetime.time(23, 59)


def test_next_repeat_catch_up():
    """A catch-up repeater lands on the first step after now."""
    ts = Timestamp.from_string("<2001-12-28 12:30 ++1y>")
    ts.to_next_repeat(NOW)
    assert ts.moment == datetime.datetime(2026, 12, 28, 12, 30)

    ts = Timestamp.from_string("<2001-12-28 12:30 ++1m>")
    ts.to_next_repeat(NOW)
    assert ts.moment == datetime.datetime(2026, 10, 28, 12, 30)

    ts = Timestamp.from_string("<2001-12-28 12:30 ++1w>")
    weekday = ts.date.weekday()
    ts.to_next_repeat(NOW)
    assert ts.date.weekday() == weekday
    assert NOW < ts.moment <= NOW + datetime.timedelta(weeks=1)
    assert ts.time == datetime.time(12, 30)

    ts = Timestamp.from_string("<2001-12-28 12:30 ++1d>")
    ts.to_next_repeat(NOW)
    assert ts.moment == datetime.datetime(2026, 10, 18, 12, 30)

    ts = Timestamp.from_string("<2001-12-28 12:30 ++1h>")
    ts.to_next_repeat(NOW)
    assert ts.moment == datetime.datetime(2026, 10, 17, 14, 30)


def test_catch_up_against_real_clock():
    """Without an explicit now the local clock is used."""
    before = datetime.datetime.now()
    ts = Timestamp.from_string("<2001-12-28 12:30 ++1y>")
    ts.to_next_repeat()
    assert ts.moment > before
    assert (ts.date.month, ts.date.day) == (12, 28)
    assert ts.time == datetime.time(12, 30)


def test_catch_up_single_step_when_already_future():
    """A future timestamp moves exactly one step."""
    ts = Timestamp.from_string("<2030-01-01 ++1d>")
    ts.to_next_repeat(NOW)
    assert ts.date == datetime.date(2030, 1, 2)


def test_catch_up_month_keeps_original_day():
    """Catch-up month steps count from the original day."""
    ts = Timestamp.from_string("<2013-01-31 ++1m>")
    ts.to_next_repeat(datetime.datetime(2013, 3, 15))
    assert ts.date == datetime.date(2013, 3, 31)


def test_catch_up_exactly_now_moves_past_it():
    """A step landing exactly on now is not enough."""
    ts = Timestamp.from_string("<2026-10-16 14:10 ++1d>")
    ts.to_next_repeat(NOW)
    assert ts.moment == datetime.datetime(2026, 10, 18, 14, 10)


@pytest.mark.parametrize("repeat,expected", [
    (".+1y", datetime.datetime(2027, 10, 17, 12, 30)),
    (".+1m", datetime.datetime(2026, 11, 17, 12, 30)),
    (".+1w", datetime.datetime(2026, 10, 24, 12, 30)),
    (".+1d", datetime.datetime(2026, 10, 18, 12, 30)),
    (".+1h", datetime.datetime(2026, 10, 17, 15, 10)),
])
def test_next_repeat_restart(repeat, expected):
    """A restart repeater moves one step from today."""
    ts = Timestamp.from_string(f"<2001-12-28 12:30 {repeat}>")
    ts.to_next_repeat(NOW)
    assert ts.moment == expected


def test_restart_date_only_month_end():
    """Restart from a month end clamps and stays date-only."""
    ts = Timestamp.from_string("<2001-12-28 .+1m>")
    ts.to_next_repeat(datetime.datetime(2026, 1, 31, 9, 0))
    assert ts.date == datetime.date(2026, 2, 28)
    assert ts.time is None
