from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .options import TreeOptions
from .tree import Node, Tree

_DIGITS = re.compile(r"(\d+)")


def version_key(name: str) -> Tuple[Any, ...]:
    # re.split with a group alternates text, digits, text, ... so positions
    # always hold the same type and tuples compare cleanly.
    return tuple(int(part) if i % 2 else part for i, part in enumerate(_DIGITS.split(name)))


def _name_key(node: Node, tree: Optional[Tree], options: TreeOptions) -> Any:
    return node.name


def _size_key(node: Node, tree: Optional[Tree], options: TreeOptions) -> Any:
    if not node.is_dir:
        return node.size
    if options.aggregate_sizes and tree is not None:
        return tree.aggregate_size(node.id)
    return 0


def _version_key(node: Node, tree: Optional[Tree], options: TreeOptions) -> Any:
    return version_key(node.name)


def _time_key(node: Node, tree: Optional[Tree], options: TreeOptions) -> Any:
    if node.modified_at is None:
        return (0, 0.0)
    return (1, node.modified_at.timestamp())


SORT_KEYS: Dict[str, Callable[[Node, Optional[Tree], TreeOptions], Any]] = {
    "name": _name_key,
    "size": _size_key,
    "version": _version_key,
    "time": _time_key,
}


def order(children: Iterable[Node], options: TreeOptions, tree: Optional[Tree] = None) -> List[Node]:
    """
    Order the children of one directory.

    ``no_sort`` keeps first-creation order and overrides ``dirs_first`` and
    ``reverse``. Otherwise the comparator runs (ties broken by name), then
    directories are grouped ahead of leaves, then ``reverse`` flips the
    whole sequence.
    """
    nodes = list(children)
    if options.no_sort:
        return nodes

    key_fn = SORT_KEYS[options.sort_by]
    nodes.sort(key=lambda node: (key_fn(node, tree, options), node.name))
    if options.dirs_first:
        nodes = [n for n in nodes if n.is_dir] + [n for n in nodes if not n.is_dir]
    if options.reverse:
        nodes.reverse()
    return nodes
