#!/usr/bin/env python3
"""
byline command line.

Examples:
  byline count access.log --processes 8
  byline grep 'ERROR|WARN' app-1.log app-2.log -p 4 --header first
  byline cat part1.csv part2.csv --header all --skip-unreadable
"""

from __future__ import annotations

import argparse
import logging
import re
import sys
from typing import List, Optional

from byline.config import HeaderMode, ProcessingContext
from byline.errors import BylineError
from byline.parallel.types import Mode
from byline.pipeline.logger import setup_logger
from byline.pipeline.orchestrate import run

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-p", "--processes", type=int, default=1,
        help="Number of chunks/workers (default: 1, no parallelism)",
    )
    common.add_argument(
        "--header", choices=[m.value for m in HeaderMode], default="none",
        help="Print the first line (first) or each file's first line (all) "
             "as a header instead of processing it",
    )
    common.add_argument(
        "--skip-unreadable", action="store_true",
        help="Treat missing or unreadable files as empty",
    )
    common.add_argument(
        "--threads", action="store_true",
        help="Use worker threads instead of worker processes",
    )
    common.add_argument("--encoding", default="utf-8")
    common.add_argument("--progress", action="store_true", help="Show a progress bar")
    common.add_argument("--log-dir", default=None, help="Write a log file here")
    common.add_argument("-v", "--verbose", action="store_true")

    parser = argparse.ArgumentParser(
        prog="byline",
        description="Line-by-line processing of text files, optionally in parallel.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    count = sub.add_parser("count", parents=[common], help="Count data lines")
    count.add_argument("files", nargs="+", metavar="FILE")

    grep = sub.add_parser("grep", parents=[common], help="Print lines matching a regex")
    grep.add_argument("pattern", help="Regular expression")
    grep.add_argument("files", nargs="+", metavar="FILE")
    grep.add_argument("-i", "--ignore-case", action="store_true")
    grep.add_argument("--invert-match", action="store_true")

    cat = sub.add_parser("cat", parents=[common], help="Print data lines in order")
    cat.add_argument("files", nargs="+", metavar="FILE")
    return parser


def _config_from_args(args: argparse.Namespace) -> ProcessingContext:
    header_handler = None
    if args.header != HeaderMode.NONE.value:
        header_handler = print

    return ProcessingContext(
        files=args.files,
        processes=args.processes,
        header_mode=args.header,
        header_handler=header_handler,
        skip_unreadable=args.skip_unreadable,
        use_threads=args.threads,
        encoding=args.encoding,
        progress=args.progress,
    )


def _noop(line: str) -> None:
    return None


def _identity(line: str) -> str:
    return line


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING
    setup_logger(args.log_dir, level=level, console=args.verbose, force=True)

    try:
        cfg = _config_from_args(args)

        if args.command == "count":
            print(run(Mode.ITERATE, _noop, cfg))
            return EXIT_OK

        if args.command == "grep":
            rx = re.compile(args.pattern, re.IGNORECASE if args.ignore_case else 0)
            keep = not args.invert_match
            matched = run(
                Mode.FILTER, lambda line: (rx.search(line) is not None) == keep, cfg
            )
            for line in matched:
                print(line)
            return EXIT_OK if matched else EXIT_NO_MATCH

        for line in run(Mode.TRANSFORM, _identity, cfg):
            print(line)
        return EXIT_OK

    except (BylineError, OSError, re.error) as exc:
        logger.debug("Run failed", exc_info=True)
        print(f"byline: {exc}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
