from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, TextIO

from .errors import SinkWriteError
from .filters import NodeFilter
from .options import TreeOptions
from .sorting import order
from .tree import Node, Tree

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "

UNITS = ["K", "M", "G", "T", "P", "E"]
MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

RESET = "\x1b[0m"
DIR_STYLE = "1;34"
EXEC_STYLE = "1;32"
ARCHIVE_STYLE = "1;31"
MEDIA_STYLE = "1;35"

EXEC_EXTS = {".bat", ".btm", ".cmd", ".com", ".dll", ".exe", ".sh"}
ARCHIVE_EXTS = {
    ".7z", ".arj", ".bz2", ".deb", ".gz", ".lzh", ".rar", ".rpm", ".tar", ".taz",
    ".tb2", ".tbz", ".tbz2", ".tgz", ".tz", ".tz2", ".xz", ".z", ".zip", ".zoo", ".zst",
}
MEDIA_EXTS = {
    ".asf", ".avi", ".bmp", ".flac", ".gif", ".jpeg", ".jpg", ".m2a", ".m2v", ".mkv",
    ".mov", ".mp3", ".mp4", ".mpeg", ".mpg", ".ogg", ".png", ".ppm", ".rm", ".tga",
    ".tif", ".tiff", ".wav", ".webm", ".webp", ".wmv", ".xbm", ".xpm",
}


@dataclass
class RenderResult:
    directories: int = 0
    files: int = 0


def format_size(size: int) -> str:
    """Scale a byte count the way ``tree -h`` does: 1023, 1.5K, 12M."""
    value = float(size)
    unit = ""
    for candidate in UNITS:
        if value <= 1024:
            break
        value /= 1024
        unit = candidate
    if not unit:
        return f"{size}"
    if value >= 10:
        return f"{value:.0f}{unit}"
    return f"{value:.1f}{unit}"


def format_mod_time(value: Optional[datetime]) -> str:
    if value is None:
        return " " * 12
    return f"{MONTHS[value.month - 1]} {value:%d %H:%M}"


def color_style(node: Node) -> Optional[str]:
    if node.is_dir:
        return DIR_STYLE
    ext = os.path.splitext(node.name)[1].lower()
    if ext in EXEC_EXTS:
        return EXEC_STYLE
    if ext in ARCHIVE_EXTS:
        return ARCHIVE_STYLE
    if ext in MEDIA_EXTS:
        return MEDIA_STYLE
    return None


def colorize(node: Node, text: str) -> str:
    style = color_style(node)
    if style is None:
        return text
    return f"\x1b[{style}m{text}{RESET}"


def render_footer(result: RenderResult, options: TreeOptions) -> str:
    footer = f"\n{result.directories} directories"
    if not options.dirs_only:
        footer += f", {result.files} files"
    return footer


def _emit(sink: TextIO, line: str) -> None:
    try:
        sink.write(line + "\n")
    except (OSError, ValueError) as exc:
        raise SinkWriteError(f"Failed to write tree output: {exc}") from exc


class _Renderer:
    def __init__(self, tree: Tree, options: TreeOptions, sink: TextIO) -> None:
        self.tree = tree
        self.options = options
        self.sink = sink
        self.node_filter = NodeFilter(options)
        self.result = RenderResult()

    def label(self, node: Node, path: str) -> str:
        name = path if self.options.full_path else node.name
        if self.options.quote_names:
            name = f'"{name}"'
        if self.options.colorize:
            name = colorize(node, name)
        return name

    def annotations(self, node: Node) -> str:
        opts = self.options
        props: List[str] = []
        if opts.human_size or opts.byte_size:
            size = node.size
            if node.is_dir:
                size = self.tree.aggregate_size(node.id) if opts.aggregate_sizes else 0
            props.append(f"{format_size(size):>4}" if opts.human_size else f"{size:11d}")
        if opts.show_mod_time:
            props.append(format_mod_time(node.modified_at))
        if not props:
            return ""
        return "[" + " ".join(props) + "]  "

    def visit(self, node: Node, path: str, depth: int, indent: str) -> None:
        visible = []
        for child in self.tree.children(node):
            child_path = f"{path}/{child.name}"
            if self.node_filter.includes(child, child_path, depth):
                visible.append(child)

        children = order(visible, self.options, self.tree)
        for i, child in enumerate(children):
            child_path = f"{path}/{child.name}"
            if self.options.no_indent:
                connector, extension = "", ""
            elif i == len(children) - 1:
                connector, extension = LAST_BRANCH, SPACE
            else:
                connector, extension = BRANCH, PIPE
            _emit(self.sink, indent + connector + self.annotations(child) + self.label(child, child_path))
            if child.is_dir:
                self.result.directories += 1
                self.visit(child, child_path, depth + 1, indent + extension)
            else:
                self.result.files += 1

    def run(self) -> RenderResult:
        root = self.tree.root
        _emit(self.sink, self.label(root, root.name))
        self.visit(root, root.name, 1, "")
        return self.result


def render(tree: Tree, options: TreeOptions, sink: TextIO) -> RenderResult:
    """
    Write the tree to ``sink`` and return how many directories and files
    were shown (the root is not counted).

    Raises InvalidPatternError before anything is written, and
    SinkWriteError if the sink fails mid-way.
    """
    return _Renderer(tree, options, sink).run()


def write_footer(sink: TextIO, result: RenderResult, options: TreeOptions) -> None:
    _emit(sink, render_footer(result, options))
