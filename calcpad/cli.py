"""Command-line entry point.

With expressions, evaluates them in order in one session (so ``+2`` chains)
and prints one result per line. Without, starts the interactive REPL.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from calcpad import __version__
from calcpad.config import configure_logging, get_settings
from calcpad.modes import Mode, NumberBase, parse_mode
from calcpad.repl import REPL
from calcpad.session import Calculator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calcpad",
        description="Standard, scientific and programmer calculator.",
    )
    parser.add_argument(
        "expressions",
        nargs="*",
        help="Expressions to evaluate; starts the interactive REPL when omitted",
    )
    parser.add_argument(
        "-m", "--mode",
        type=parse_mode,
        help="Calculator mode: standard, scientific or programmer",
    )
    parser.add_argument(
        "-b", "--base",
        type=NumberBase.parse,
        help="Number base in programmer mode: hex, dec, oct or bin",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default from CALCPAD_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    mode: Mode = args.mode or settings.default_mode
    if args.base is not None and mode is not Mode.PROGRAMMER:
        parser.error("--base requires --mode programmer")

    calculator = Calculator(mode=mode, history_limit=settings.history_limit)
    if args.base is not None:
        calculator.select_base(args.base)

    if not args.expressions:
        REPL(calculator, history_file=settings.prompt_history_file).repl_loop()
        return 0

    repl = REPL(calculator)
    status = 0
    for expression in args.expressions:
        ok, out = repl.evaluate_line(expression)
        if ok:
            print(out)
        else:
            print(out, file=sys.stderr)
            status = 1
    logger.debug(f"Evaluated {len(args.expressions)} expression(s), exit status {status}")
    return status
