from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

SortKey = Literal["name", "size", "version", "time"]


class TreeOptions(BaseModel):
    """Everything the builder, filters, sorter and renderer are allowed to read.

    One frozen instance is created per run and passed explicitly down the
    pipeline.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Listing
    all_files: bool = False
    dirs_only: bool = False
    full_path: bool = False
    depth_limit: int = Field(default=0, ge=0)  # 0 = unlimited
    include_pattern: Optional[str] = None
    exclude_pattern: Optional[str] = None
    ignore_case: bool = False

    # File annotations
    byte_size: bool = False
    human_size: bool = False
    quote_names: bool = False
    show_mod_time: bool = False
    aggregate_sizes: bool = False

    # Sorting
    sort_by: SortKey = "name"
    no_sort: bool = False
    reverse: bool = False
    dirs_first: bool = False

    # Graphics
    colorize: bool = False
    no_indent: bool = False
