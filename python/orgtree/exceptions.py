"""Exceptions raised by orgtree."""


class OrgtreeError(Exception):
    """Base exception for orgtree operations."""


class FormatError(OrgtreeError, ValueError):
    """Input text violates a hard textual contract."""


class InvariantError(OrgtreeError, ValueError):
    """A value would break an invariant of the outline model."""


class ConfigError(OrgtreeError):
    """Grammar configuration could not be read."""
