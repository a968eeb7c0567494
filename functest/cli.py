#!/usr/bin/env python3
"""
functest CLI - run functional API test files from the command line

Usage:
    functest run tests/func/users.py tests/func/orders.py --parallel
    functest run tests/func/*.py --log-file func.log --env ci
"""

import argparse
import asyncio
import json
import os
import sys
from typing import List, Optional

from .config import reset_config
from .loader import get
from .orchestrator import run


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="functest", description="functest - run functional API test files"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    run_cmd = subparsers.add_parser("run", help="Run test files")
    run_cmd.add_argument("files", nargs="+", help="Test files (Python modules declaring suites)")
    run_cmd.add_argument("--parallel", "-p", action="store_true", help="Run files concurrently")
    run_cmd.add_argument("--log-file", "-l", help="Write run logs here instead of stderr")
    run_cmd.add_argument("--report-dir", "-r", help="Root directory for JSON reports")
    run_cmd.add_argument("--no-report", action="store_true", help="Do not write reports")
    run_cmd.add_argument("--timeout", "-t", type=float, help="Per test/hook timeout in seconds")
    run_cmd.add_argument("--env", "-e", help="Configuration environment (FUNCTEST_ENV)")

    return parser


def run_command(args: argparse.Namespace) -> int:
    if args.env:
        os.environ["FUNCTEST_ENV"] = args.env
        reset_config()

    kwargs = {}
    if args.no_report:
        kwargs["report_root"] = None
    elif args.report_dir:
        kwargs["report_root"] = args.report_dir
    if args.timeout is not None:
        kwargs["timeout"] = args.timeout

    test_files = get(args.files, **kwargs)

    if args.log_file:
        with open(args.log_file, "a") as log_stream:
            stats = asyncio.run(run(test_files, args.parallel, log_stream))
    else:
        stats = asyncio.run(run(test_files, args.parallel, sys.stderr))

    print(json.dumps(stats.to_dict(), indent=2))
    return 0 if stats.ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        return run_command(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
