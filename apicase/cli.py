# apicase/cli.py
"""
Command-line entry point.

Usage:
    apicase run cases.txt                 run every test case, one line per result
    apicase run cases.txt --json          print the run summary as JSON
    apicase run cases.txt --report-dir out write JSON/HTML/JUnit reports to out/
    apicase run cases.txt --reports       same, into APICASE_REPORTS_DIR
    apicase parse cases.txt               dump parsed test cases as JSON
    apicase repl -t 10 -c 50              interactive request shell

Exit codes (run): 0 all passed, 1 some failed, 2 unreadable file or parse error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from apicase.config import Settings, get_settings
from apicase.errors import TestCaseParseError
from apicase.http_client import HttpClient
from apicase.parser import parse_document
from apicase.reporter import Reporter, format_results, format_summary
from apicase.runner import TestCaseRunner

logger = logging.getLogger("apicase.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID = 2


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _read_document(path: str) -> Optional[str]:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Cannot read {path}: {e}")
        return None


def _load_cases(path: str):
    text = _read_document(path)
    if text is None:
        return None
    try:
        return parse_document(text)
    except TestCaseParseError as e:
        logger.error(f"Parse error in {path}: {e}")
        print(f"[ERROR]: {e}", file=sys.stderr)
        return None


# ==================== Commands ====================

def cmd_run(args: argparse.Namespace, settings: Settings) -> int:
    cases = _load_cases(args.file)
    if cases is None:
        return EXIT_INVALID

    timeout = args.timeout if args.timeout is not None else settings.timeout_sec
    workers = args.workers if args.workers is not None else settings.max_workers

    with HttpClient.from_settings(settings, timeout_sec=timeout) as client:
        summary = TestCaseRunner(client, max_workers=workers).run_summary(cases)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    else:
        for line in format_results(summary.results):
            print(line)
        print(format_summary(summary))

    report_dir = args.report_dir or (settings.reports_dir if args.reports else None)
    if report_dir:
        paths = Reporter(report_dir).create_reports(summary)
        logger.info(f"Reports: {paths}")

    return EXIT_OK if summary.ok else EXIT_FAILED


def cmd_parse(args: argparse.Namespace, settings: Settings) -> int:
    cases = _load_cases(args.file)
    if cases is None:
        return EXIT_INVALID
    print(json.dumps([c.to_dict() for c in cases], indent=2, ensure_ascii=False))
    return EXIT_OK


def cmd_repl(args: argparse.Namespace, settings: Settings) -> int:
    # imported lazily: prompt_toolkit wants a real terminal
    from apicase.repl import run_repl
    from apicase.session import Session

    overrides = {}
    if args.timeout is not None:
        overrides["timeout_sec"] = args.timeout
    if args.cache_size is not None:
        overrides["cache_size"] = args.cache_size

    session = Session.from_settings(settings, json_mode=args.json, **overrides)
    with HttpClient.from_settings(settings, timeout_sec=session.timeout_sec) as client:
        run_repl(session, client, history_file=settings.history_file)
    return EXIT_OK


# ==================== CLI ====================

def _positive_int(value: str) -> int:
    try:
        v = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if v <= 0:
        raise argparse.ArgumentTypeError("must be positive")
    return v


def _build_cli() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="apicase",
        description="Run HTTP test cases written in the apicase text format.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    sub = p.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Parse and run a test-case document")
    run.add_argument("file", help="Test-case document")
    run.add_argument("--json", action="store_true", help="Print the summary as JSON")
    run.add_argument("--report-dir", metavar="DIR", help="Write JSON/HTML/JUnit reports to DIR")
    run.add_argument("--reports", action="store_true",
                     help="Write reports to APICASE_REPORTS_DIR (default: reports)")
    run.add_argument("--timeout", "-t", type=float, help="Request timeout in seconds")
    run.add_argument("--workers", "-w", type=_positive_int, help="Thread-pool size")
    run.set_defaults(func=cmd_run)

    parse = sub.add_parser("parse", help="Parse a document and print the test cases as JSON")
    parse.add_argument("file", help="Test-case document")
    parse.set_defaults(func=cmd_parse)

    repl = sub.add_parser("repl", help="Interactive request shell")
    repl.add_argument("--response-timeout", "-t", dest="timeout", type=_positive_int,
                      help="response timeout in seconds (default: 30s)")
    repl.add_argument("--cache-size", "-c", type=_positive_int, help="cache size (default: 100)")
    repl.add_argument("--json", "-j", action="store_true", help="outputs in JSON (default: false)")
    repl.set_defaults(func=cmd_repl)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_cli().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, verbose=args.verbose)

    try:
        return args.func(args, settings)
    except KeyboardInterrupt:
        print("\n👋 Cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
