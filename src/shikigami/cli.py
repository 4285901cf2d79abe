"""Run keypad-language programs from the command line, or start a REPL."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Final, TextIO

from .interpreter import Session, execute, is_error

DEFAULT_LOG_LEVEL: Final[str] = os.environ.get("SHIKIGAMI_LOG_LEVEL", "WARNING")

_PROMPT = "> "


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def repl(stdin: TextIO, stdout: TextIO, *, prompt: bool) -> int:
    session = Session()
    status = 0
    while True:
        if prompt:
            stdout.write(_PROMPT)
            stdout.flush()
        line = stdin.readline()
        if not line:
            break
        command = line.strip()
        if not command:
            continue
        if command == ":quit":
            break
        if command == ":reset":
            session.reset()
            continue
        result = session.execute(line)
        status = 1 if is_error(result) else 0
        print(result, file=stdout)
    return status


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument(
        "-e",
        "--expr",
        help="program text to run",
    )
    source_group.add_argument(
        "file",
        nargs="?",
        help="program file to run ('-' reads stdin); omit both for a REPL",
    )
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        help="logging level (default from SHIKIGAMI_LOG_LEVEL)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper())

    if args.expr is None and args.file is None:
        return repl(sys.stdin, sys.stdout, prompt=sys.stdin.isatty())

    source = args.expr if args.expr is not None else _read_source(args.file)
    result = execute(source)
    print(result)
    return 1 if is_error(result) else 0


if __name__ == "__main__":
    raise SystemExit(main())
