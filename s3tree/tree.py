from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import MalformedKeyError, StructuralConflict
from .keys import SEPARATOR, parse_key, split_path

logger = logging.getLogger(__name__)

ROOT_ID = 0


class NodeKind(enum.Enum):
    DIRECTORY = "directory"
    LEAF = "leaf"


@dataclass(frozen=True)
class ObjectRecord:
    """One entry of a bucket listing."""

    key: str
    size: int = 0
    modified_at: Optional[datetime] = None


@dataclass
class Node:
    id: int
    name: str
    kind: NodeKind
    parent: Optional[int] = None
    size: int = 0
    modified_at: Optional[datetime] = None
    children: Dict[str, int] = field(default_factory=dict)

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY


def _rank(size: int, modified_at: Optional[datetime]) -> Tuple[float, int]:
    return (modified_at.timestamp() if modified_at else float("-inf"), size)


class Tree:
    """
    Directory tree stored as an arena of nodes addressed by integer id.

    The root (id 0) is a directory named after the root label: the bucket
    name, or the prefix when listing under one. ``key_root`` holds the
    segments of the root that are part of every object key (the prefix);
    it is empty when the root is the bucket.
    """

    def __init__(self, root_label: str, key_root: Sequence[str] = ()) -> None:
        self.nodes: List[Node] = [Node(id=ROOT_ID, name=root_label, kind=NodeKind.DIRECTORY)]
        self.key_root: Tuple[str, ...] = tuple(key_root)
        self.conflicts: List[StructuralConflict] = []
        self.skipped: List[MalformedKeyError] = []

    @property
    def root(self) -> Node:
        return self.nodes[ROOT_ID]

    def node(self, node_id: int) -> Node:
        return self.nodes[node_id]

    def children(self, node: Node) -> List[Node]:
        """Children in first-creation order."""
        return [self.nodes[child_id] for child_id in node.children.values()]

    def _new_node(self, parent: Node, name: str, kind: NodeKind) -> Node:
        node = Node(id=len(self.nodes), name=name, kind=kind, parent=parent.id)
        self.nodes.append(node)
        parent.children[name] = node.id
        return node

    def _conflict(self, node: Node, discarded: str) -> None:
        conflict = StructuralConflict(path=self.path_of(node.id), kept="directory", discarded=discarded)
        self.conflicts.append(conflict)
        logger.warning("Conflict at %s: directory kept, %s discarded", conflict.path, discarded)

    def _ensure_directory(self, parent: Node, name: str) -> Node:
        child_id = parent.children.get(name)
        if child_id is None:
            return self._new_node(parent, name, NodeKind.DIRECTORY)
        child = self.nodes[child_id]
        if not child.is_dir:
            # Directory wins: the leaf turns into a directory in place.
            self._conflict(child, "leaf")
            child.kind = NodeKind.DIRECTORY
            child.size = 0
            child.modified_at = None
        return child

    def insert(
        self,
        segments: Sequence[str],
        size: int = 0,
        modified_at: Optional[datetime] = None,
        *,
        directory: bool = False,
    ) -> int:
        """
        Insert one object below the root and return the id of its node.

        Every segment but the last is a directory, created if missing. The
        last one becomes a leaf carrying size and modified_at, or a
        directory when ``directory`` is set (a "folder/" marker object).
        """
        node = self.root
        for name in segments[:-1]:
            node = self._ensure_directory(node, name)

        if not segments:
            if not directory:
                self._conflict(node, "leaf")
            return node.id

        name = segments[-1]
        if directory:
            target = self._ensure_directory(node, name)
            if modified_at and (target.modified_at is None or modified_at > target.modified_at):
                target.modified_at = modified_at
            return target.id

        existing_id = node.children.get(name)
        if existing_id is None:
            leaf = self._new_node(node, name, NodeKind.LEAF)
            leaf.size = size
            leaf.modified_at = modified_at
            return leaf.id

        existing = self.nodes[existing_id]
        if existing.is_dir:
            self._conflict(existing, "leaf")
            return existing.id
        if _rank(size, modified_at) > _rank(existing.size, existing.modified_at):
            existing.size = size
            existing.modified_at = modified_at
        return existing.id

    def path_of(self, node_id: int) -> str:
        """Display path from the root label down to the node."""
        names: List[str] = []
        node: Optional[Node] = self.nodes[node_id]
        while node is not None:
            names.append(node.name)
            node = self.nodes[node.parent] if node.parent is not None else None
        return SEPARATOR.join(reversed(names))

    def key_of(self, node_id: int) -> str:
        """Object key of a node, rebuilt from its ancestors."""
        names: List[str] = []
        node = self.nodes[node_id]
        while node.parent is not None:
            names.append(node.name)
            node = self.nodes[node.parent]
        return SEPARATOR.join(self.key_root + tuple(reversed(names)))

    def aggregate_size(self, node_id: int) -> int:
        node = self.nodes[node_id]
        if not node.is_dir:
            return node.size
        total = 0
        stack = list(node.children.values())
        while stack:
            child = self.nodes[stack.pop()]
            if child.is_dir:
                stack.extend(child.children.values())
            else:
                total += child.size
        return total

    def iter_leaves(self) -> Iterable[Node]:
        return (node for node in self.nodes if not node.is_dir)


def root_label_for(bucket: str, prefix: str = "") -> str:
    return SEPARATOR.join(split_path(prefix)) or bucket


def build_tree(records: Iterable[ObjectRecord], bucket: str, prefix: str = "") -> Tree:
    """
    Build the tree for one listing.

    Without a prefix the bucket name is the root and every key hangs below
    it. With a prefix the root is the prefix itself and keys outside it are
    skipped.
    """
    key_root = split_path(prefix)
    tree = Tree(root_label_for(bucket, prefix), key_root=key_root)
    for record in records:
        try:
            parsed = parse_key(record.key, root_label=None if key_root else bucket)
            if key_root:
                if parsed.segments[: len(key_root)] != key_root:
                    raise MalformedKeyError(record.key, f"outside of prefix {prefix!r}")
                relative = parsed.segments[len(key_root):]
            else:
                relative = parsed.segments[1:]
        except MalformedKeyError as exc:
            logger.warning("Skipping %s", exc)
            tree.skipped.append(exc)
            continue
        tree.insert(
            relative,
            size=record.size,
            modified_at=record.modified_at,
            directory=parsed.is_directory,
        )
    logger.debug("Built tree %r with %d nodes", tree.root.name, len(tree.nodes))
    return tree
