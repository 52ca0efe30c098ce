# apicase/parser.py
"""
Test-case document parser.

Document layout (keys are case-insensitive):

    # comment lines are dropped before parsing
    testcase: <name>
    description: <text>
    author: <text>
    url: <url>
    statuscode: <0-65535>
    method: GET|POST|PUT|PATCH|DELETE|HEAD|TRACE|OPTIONS|CONNECT
    headers:
      <Header-Name>: <value>
    payload:
      <field>: <value>
    assertions:
      jsonPathExists: <expr>
      jsonPathValue: <expr>
      headerExists: <expr>
      headerValue: <expr>
    ---
    <next test case>

Each block is scanned once with a forward cursor. A section marker
(`headers:`, `payload:`, `assertions:`) hands the cursor to the matching
sub-parser, which consumes the indented lines right after the marker and
returns where top-level scanning resumes.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from apicase.errors import (
    HeaderExpectsKVError,
    InvalidAssertionKeyError,
    InvalidMethodError,
    InvalidSectionError,
    PayloadExpectsKVError,
    StatusCodeParseError,
    TestCaseParseError,
)
from apicase.models import Assertions, HTTPMethod, TestCase

logger = logging.getLogger(__name__)

SEPARATOR = "---"
_STATUS_RE = re.compile(r"^\+?[0-9]+$")
_MAX_STATUS = 0xFFFF
_LINE_END = re.compile(r"\r?\n")
_AFTER_NEWLINE = re.compile(r"(?<=\n)")


# ==================== Document Level ====================

def _split_lines(text: str) -> List[str]:
    # only \n ends a line; a trailing \r belongs to the line ending
    return _LINE_END.split(text)


def filter_comments(text: str) -> str:
    """Drop every line whose stripped content starts with '#'; keep the rest verbatim."""
    return "".join(
        line for line in _AFTER_NEWLINE.split(text)
        if not line.strip().startswith("#")
    )


def split_blocks(text: str) -> List[str]:
    """Split on standalone '---' lines; blank blocks are discarded."""
    blocks: List[str] = []
    current: List[str] = []

    for line in _split_lines(text):
        if line.strip() == SEPARATOR:
            blocks.append("\n".join(current))
            current = []
        else:
            current.append(line)
    blocks.append("\n".join(current))

    return [b.strip() for b in blocks if b.strip()]


def parse_document(text: str) -> List[TestCase]:
    """
    Parse a whole document into test cases, in document order.

    Raises:
        TestCaseParseError: the first invalid block aborts the parse. The
            error carries the 1-based block index and line within it.
    """
    blocks = split_blocks(filter_comments(text))
    logger.debug(f"Parsing {len(blocks)} test-case block(s)")

    cases: List[TestCase] = []
    for idx, block in enumerate(blocks, start=1):
        try:
            cases.append(parse_test_case(block))
        except TestCaseParseError as e:
            raise e.locate(block=idx)
    return cases


# ==================== Block Level ====================

def _split_kv(line: str) -> Optional[Tuple[str, str]]:
    idx = line.find(":")
    if idx < 0:
        return None
    return line[:idx], line[idx + 1:]


def parse_status_code(value: str) -> int:
    if not _STATUS_RE.match(value):
        raise StatusCodeParseError(value)
    code = int(value)
    if code > _MAX_STATUS:
        raise StatusCodeParseError(value)
    return code


def parse_method(value: str) -> HTTPMethod:
    method = HTTPMethod.lookup(value)
    if method is None:
        raise InvalidMethodError(value.strip().upper())
    return method


def parse_test_case(block: str) -> TestCase:
    """Parse one block (already stripped of comments and separators)."""
    lines = _split_lines(block)
    fields: Dict[str, object] = {}
    cursor = 0

    while cursor < len(lines):
        line_no = cursor + 1
        kv = _split_kv(lines[cursor])
        cursor += 1
        if kv is None:
            continue

        key, value = kv[0].strip().lower(), kv[1].strip()
        try:
            if key == "testcase":
                fields["name"] = value
            elif key == "description":
                fields["description"] = value
            elif key == "author":
                fields["author"] = value
            elif key == "url":
                fields["url"] = value
            elif key == "statuscode":
                fields["expected_status"] = parse_status_code(value)
            elif key == "method":
                fields["method"] = parse_method(value)
            elif key == "headers":
                fields["headers"], cursor = parse_headers(lines, cursor)
            elif key == "payload":
                fields["payload"], cursor = parse_payload(lines, cursor)
            elif key == "assertions":
                fields["assertions"], cursor = parse_assertions(lines, cursor)
            else:
                raise InvalidSectionError(key)
        except TestCaseParseError as e:
            raise e.locate(line=line_no)

    return TestCase(**fields)


# ==================== Section Bodies ====================

def _is_continuation(line: str) -> bool:
    return line.startswith("  ") or line.startswith("\t")


def _section_lines(lines: List[str], start: int) -> int:
    """Index of the first line at or after `start` that is not indented."""
    end = start
    while end < len(lines) and _is_continuation(lines[end]):
        end += 1
    return end


def _parse_key_values(
    lines: List[str],
    start: int,
    error: Callable[[], TestCaseParseError],
) -> Tuple[Dict[str, str], int]:
    values: Dict[str, str] = {}
    end = _section_lines(lines, start)

    for offset, line in enumerate(lines[start:end]):
        kv = _split_kv(line)
        if kv is None:
            # report the offending line, not the marker
            raise error().locate(line=start + offset + 1)
        values[kv[0].strip()] = kv[1].strip()

    return values, end


def parse_headers(lines: List[str], start: int) -> Tuple[Dict[str, str], int]:
    """Collect `Name: value` lines following a `headers:` marker at `start - 1`."""
    return _parse_key_values(lines, start, HeaderExpectsKVError)


def parse_payload(lines: List[str], start: int) -> Tuple[Dict[str, str], int]:
    """Collect `field: value` lines following a `payload:` marker at `start - 1`."""
    return _parse_key_values(lines, start, PayloadExpectsKVError)


def parse_assertions(lines: List[str], start: int) -> Tuple[Assertions, int]:
    json_path_exists: List[str] = []
    json_path_value: List[str] = []
    header_value: List[str] = []
    header_exists = ""
    end = _section_lines(lines, start)

    for offset, line in enumerate(lines[start:end]):
        kv = _split_kv(line)
        if kv is None:
            continue
        key, value = kv[0].strip().lower(), kv[1].strip()

        if key == "jsonpathexists":
            json_path_exists.append(value)
        elif key == "jsonpathvalue":
            json_path_value.append(value)
        elif key == "headerexists":
            header_exists = value
        elif key == "headervalue":
            header_value.append(value)
        else:
            raise InvalidAssertionKeyError(key).locate(line=start + offset + 1)

    assertions = Assertions(
        json_path_exists=tuple(json_path_exists),
        json_path_value=tuple(json_path_value),
        header_exists=header_exists,
        header_value=tuple(header_value),
    )
    return assertions, end
