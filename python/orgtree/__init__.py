"""orgtree -- parse and write outline documents with headings, tags and timestamps."""

from .config import GrammarConfig, load_config, parse_config
from .exceptions import ConfigError, FormatError, InvariantError, OrgtreeError
from .grammar import (
    DEFAULT_GRAMMAR,
    Grammar,
    HeadingFields,
    LineKind,
    RangeFields,
    TimestampFields,
    parse_tags,
)
from .heading import BodyState, Heading
from .keywords import TodoKeywords
from .outline import OutlineAssembler, dump, dumps, load, loads, parse_lines, split_lines
from .timerange import TimestampRange
from .timestamp import Interval, Repeater, RepeaterKind, TimeUnit, Timestamp

__all__ = [
    "GrammarConfig",
    "load_config",
    "parse_config",
    "ConfigError",
    "FormatError",
    "InvariantError",
    "OrgtreeError",
    "DEFAULT_GRAMMAR",
    "Grammar",
    "HeadingFields",
    "LineKind",
    "RangeFields",
    "TimestampFields",
    "parse_tags",
    "BodyState",
    "Heading",
    "TodoKeywords",
    "OutlineAssembler",
    "dump",
    "dumps",
    "load",
    "loads",
    "parse_lines",
    "split_lines",
    "TimestampRange",
    "Interval",
    "Repeater",
    "RepeaterKind",
    "TimeUnit",
    "Timestamp",
]
