from __future__ import annotations

import argparse
import contextlib
import logging
import os
import sys
from typing import Iterator, Optional, Sequence, TextIO

from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings, load_settings
from .errors import SinkWriteError
from .filters import NodeFilter
from .options import TreeOptions
from .render import render, write_footer
from .services import s3_service
from .tree import build_tree

logger = logging.getLogger(__name__)

SORT_CHOICES = ["name", "size", "version", "time"]
COLOR_CHOICES = ["auto", "always", "never"]


def _non_negative(value: str) -> int:
    level = int(value)
    if level < 0:
        raise argparse.ArgumentTypeError(f"level must be >= 0, got {level}")
    return level


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    # -h is taken by human-readable sizes, as in tree(1).
    parser = argparse.ArgumentParser(
        prog="s3tree",
        description="List the contents of an S3 bucket in a tree-like format.",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit.")

    s3 = parser.add_argument_group("S3 options")
    s3.add_argument("-b", "--bucket", required=True, help="S3 bucket (required).")
    s3.add_argument("-p", "--prefix", default="", help="S3 prefix.")
    s3.add_argument("--region", help="AWS region (default: S3TREE_AWS_REGION or us-east-1).")
    s3.add_argument("--profile", help="AWS profile name.")
    s3.add_argument("--endpoint-url", help="Custom S3 endpoint URL.")

    listing = parser.add_argument_group("Listing options")
    listing.add_argument("-a", dest="all_files", action="store_true", help="All files are listed.")
    listing.add_argument("-d", dest="dirs_only", action="store_true", help="List directories only.")
    listing.add_argument("-f", dest="full_path", action="store_true", help="Print the full path prefix for each file.")
    listing.add_argument("-L", dest="level", type=_non_negative, default=0, help="Descend only level directories deep.")
    listing.add_argument("-P", dest="pattern", help="List only those files that match the pattern given.")
    listing.add_argument("-I", dest="ignore_pattern", help="Do not list files that match the given pattern.")
    listing.add_argument("--ignore-case", action="store_true", help="Ignore case when pattern matching.")
    listing.add_argument("-o", dest="output", help="Output to file instead of stdout.")

    files = parser.add_argument_group("File options")
    files.add_argument("-Q", dest="quote", action="store_true", help="Quote filenames with double quotes.")
    files.add_argument("-s", dest="byte_size", action="store_true", help="Print the size in bytes of each file.")
    files.add_argument("-h", dest="human_size", action="store_true", help="Print the size in a more human readable way.")
    files.add_argument("-D", dest="mod_time", action="store_true", help="Print the date of last modification.")
    files.add_argument("--du", action="store_true", help="Print directory sizes as the sum of their contents.")

    sorting = parser.add_argument_group("Sorting options")
    sorting.add_argument("-v", dest="version_sort", action="store_true", help="Sort files alphanumerically by version.")
    sorting.add_argument("-t", dest="time_sort", action="store_true", help="Sort files by last modification time.")
    sorting.add_argument("-U", dest="unsorted", action="store_true", help="Leave files unsorted.")
    sorting.add_argument("-r", dest="reverse", action="store_true", help="Reverse the order of the sort.")
    sorting.add_argument("--dirsfirst", action="store_true", help="List directories before files (-U disables).")
    sorting.add_argument("--sort", choices=SORT_CHOICES, help="Select sort: name,size,version,time.")

    graphics = parser.add_argument_group("Graphics options")
    graphics.add_argument("-i", dest="no_indent", action="store_true", help="Don't print indentation lines.")
    graphics.add_argument("-C", dest="color_always", action="store_true", help="Turn colorization on always.")
    graphics.add_argument("--color", choices=COLOR_CHOICES, help="When to colorize (default: S3TREE_COLOR or never).")

    misc = parser.add_argument_group("Logging")
    misc.add_argument("--verbose", action="store_true", help="Log debug details to stderr.")
    misc.add_argument("--quiet", action="store_true", help="Only log errors.")
    return parser.parse_args(argv)


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(message)s", stream=sys.stderr)


def resolve_sort(args: argparse.Namespace) -> str:
    if args.time_sort:
        return "time"
    if args.version_sort:
        return "version"
    return args.sort or "name"


def resolve_color(mode: str, sink: TextIO) -> bool:
    if mode == "always":
        return True
    if mode == "never" or "NO_COLOR" in os.environ:
        return False
    isatty = getattr(sink, "isatty", None)
    return bool(isatty and isatty())


def build_options(args: argparse.Namespace, colorize: bool = False) -> TreeOptions:
    return TreeOptions(
        all_files=args.all_files,
        dirs_only=args.dirs_only,
        full_path=args.full_path,
        depth_limit=args.level,
        include_pattern=args.pattern,
        exclude_pattern=args.ignore_pattern,
        ignore_case=args.ignore_case,
        byte_size=args.byte_size,
        human_size=args.human_size,
        quote_names=args.quote,
        show_mod_time=args.mod_time,
        aggregate_sizes=args.du,
        sort_by=resolve_sort(args),
        no_sort=args.unsorted,
        reverse=args.reverse,
        dirs_first=args.dirsfirst,
        colorize=colorize,
        no_indent=args.no_indent,
    )


@contextlib.contextmanager
def open_sink(path: Optional[str]) -> Iterator[TextIO]:
    if not path:
        try:
            yield sys.stdout
        finally:
            sys.stdout.flush()
        return
    logger.debug("Writing tree to %s", path)
    with open(path, "w", encoding="utf-8") as handle:
        yield handle


def run_tree(args: argparse.Namespace, settings: Optional[Settings] = None) -> int:
    settings = settings or load_settings()
    color_mode = "always" if args.color_always else (args.color or settings.COLOR)

    # Fail on a bad -P/-I before talking to S3.
    NodeFilter(build_options(args))

    client = s3_service.create_s3_client(
        profile=args.profile or settings.AWS_PROFILE,
        region=args.region or settings.AWS_REGION,
        endpoint_url=args.endpoint_url or settings.ENDPOINT_URL,
    )
    records = s3_service.list_objects(client, args.bucket, args.prefix)
    tree = build_tree(records, args.bucket, args.prefix)
    if tree.skipped:
        logger.warning("Skipped %d malformed keys", len(tree.skipped))

    with open_sink(args.output) as sink:
        options = build_options(args, colorize=resolve_color(color_mode, sink))
        result = render(tree, options, sink)
        write_footer(sink, result, options)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet)
    try:
        return run_tree(args)
    except ValueError as exc:
        print(f"ERROR {exc}", file=sys.stderr)
        return 2
    except (ClientError, BotoCoreError) as exc:
        print(f"ERROR {exc}", file=sys.stderr)
        return 1
    except (SinkWriteError, OSError) as exc:
        print(f"ERROR {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("ERROR interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
