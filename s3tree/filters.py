from __future__ import annotations

import fnmatch
import functools
import re
from typing import Optional, Pattern

from .errors import InvalidPatternError
from .options import TreeOptions
from .tree import Node

HIDDEN_MARKER = "."
ALTERNATIVE_SEPARATOR = "|"


def _check_brackets(pattern: str, alternative: str) -> None:
    i = 0
    n = len(alternative)
    while i < n:
        if alternative[i] == "[":
            j = i + 1
            if j < n and alternative[j] == "!":
                j += 1
            if j < n and alternative[j] == "]":
                j += 1
            while j < n and alternative[j] != "]":
                j += 1
            if j >= n:
                raise InvalidPatternError(pattern, f"unterminated '[' in {alternative!r}")
            i = j
        i += 1


def compile_pattern(pattern: str, ignore_case: bool = False) -> Pattern[str]:
    """
    Compile a tree-style glob into one regex.

    Alternatives are separated by "|" (``*.log|*.txt``); each one uses
    fnmatch syntax and must match the whole subject.
    """
    alternatives = pattern.split(ALTERNATIVE_SEPARATOR)
    for alternative in alternatives:
        if not alternative:
            raise InvalidPatternError(pattern, "empty alternative")
        _check_brackets(pattern, alternative)
    source = ALTERNATIVE_SEPARATOR.join(f"(?:{fnmatch.translate(alt)})" for alt in alternatives)
    try:
        return re.compile(source, re.IGNORECASE if ignore_case else 0)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc


class NodeFilter:
    """Per-node visibility rules for one run.

    Patterns are compiled up front so a bad pattern fails before anything
    is written.
    """

    def __init__(self, options: TreeOptions) -> None:
        self.options = options
        self.include: Optional[Pattern[str]] = None
        self.exclude: Optional[Pattern[str]] = None
        if options.include_pattern:
            self.include = compile_pattern(options.include_pattern, options.ignore_case)
        if options.exclude_pattern:
            self.exclude = compile_pattern(options.exclude_pattern, options.ignore_case)

    def includes(self, node: Node, path: str, depth: int) -> bool:
        opts = self.options
        if opts.depth_limit and depth > opts.depth_limit:
            return False
        if not opts.all_files and node.name.startswith(HIDDEN_MARKER):
            return False
        if opts.dirs_only and not node.is_dir:
            return False

        subject = path if opts.full_path else node.name
        if self.exclude is not None and self.exclude.match(subject):
            return False
        # -P only narrows files; directories stay so matches keep their context.
        if self.include is not None and not node.is_dir and not self.include.match(subject):
            return False
        return True


@functools.lru_cache(maxsize=32)
def _node_filter(options: TreeOptions) -> NodeFilter:
    return NodeFilter(options)


def includes(node: Node, path: str, depth: int, options: TreeOptions) -> bool:
    """Convenience wrapper around NodeFilter; compiled filters are cached per options value."""
    return _node_filter(options).includes(node, path, depth)
