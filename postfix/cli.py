from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from postfix.api import compile_file, report_file
from postfix.config import configure_logging, load_settings
from postfix.errors import PostfixError

LOGGER = logging.getLogger("postfix.cli")


def _parser(prog: str, help_text: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=help_text)
    parser.add_argument("path", type=Path, help="postfix program source file")
    return parser


def _fail(prog: str, message: str) -> int:
    print(f"{prog}: {message}", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    args = _parser("postfix", "interpret a postfix program").parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as e:
        return _fail("postfix", str(e))
    configure_logging(settings)

    try:
        report = report_file(args.path, settings=settings)
    except PostfixError as e:
        return _fail("postfix", str(e))

    LOGGER.debug("run report: %s", report.model_dump_json())
    print(report.render())
    return 0


def compile_main(argv: list[str] | None = None) -> int:
    args = _parser("postfixc", "compile a postfix program to x86-64 assembly").parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as e:
        return _fail("postfixc", str(e))
    configure_logging(settings)

    try:
        out_path = compile_file(args.path, settings=settings)
    except PostfixError as e:
        return _fail("postfixc", str(e))

    print(out_path)
    return 0


def run() -> None:
    raise SystemExit(main())


def run_compiler() -> None:
    raise SystemExit(compile_main())
