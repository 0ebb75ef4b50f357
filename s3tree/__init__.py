from __future__ import annotations

from .errors import InvalidPatternError, MalformedKeyError, S3TreeError, SinkWriteError, StructuralConflict
from .options import TreeOptions
from .render import RenderResult, render, render_footer
from .tree import ObjectRecord, Tree, build_tree

__version__ = "0.1.0"

__all__ = [
    "InvalidPatternError",
    "MalformedKeyError",
    "ObjectRecord",
    "RenderResult",
    "S3TreeError",
    "SinkWriteError",
    "StructuralConflict",
    "Tree",
    "TreeOptions",
    "build_tree",
    "render",
    "render_footer",
]
