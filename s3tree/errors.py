from __future__ import annotations

from dataclasses import dataclass


class S3TreeError(Exception):
    """Base class for errors raised while building or rendering a tree."""


class MalformedKeyError(S3TreeError, ValueError):
    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Malformed key {key!r}: {reason}")
        self.key = key
        self.reason = reason


class InvalidPatternError(S3TreeError, ValueError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class SinkWriteError(S3TreeError):
    """The output stream rejected a write; rendering stopped."""


@dataclass(frozen=True)
class StructuralConflict:
    """A key implied a directory where a leaf exists (or the reverse).

    The directory always wins; ``discarded`` names what was dropped.
    """

    path: str
    kept: str
    discarded: str
