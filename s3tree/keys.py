from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import MalformedKeyError

SEPARATOR = "/"


@dataclass(frozen=True)
class ParsedKey:
    segments: Tuple[str, ...]
    is_directory: bool

    @property
    def name(self) -> str:
        return self.segments[-1]


def split_path(value: str) -> Tuple[str, ...]:
    return tuple(part for part in value.split(SEPARATOR) if part)


def parse_key(key: str, root_label: Optional[str] = None) -> ParsedKey:
    """
    Split an object key into path segments.

    Repeated separators collapse. A trailing "/" marks a directory object
    (no leaf). When root_label is given it becomes the first segment; this is
    how keys listed without a prefix hang under the bucket name.
    """
    if not key:
        raise MalformedKeyError(key, "empty key")
    segments = split_path(key)
    if not segments:
        raise MalformedKeyError(key, "key has no path segments")
    if root_label:
        segments = (root_label,) + segments
    return ParsedKey(segments=segments, is_directory=key.endswith(SEPARATOR))
