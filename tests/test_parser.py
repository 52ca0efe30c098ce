import pytest

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
from apicase.parser import (
    filter_comments,
    parse_assertions,
    parse_document,
    parse_headers,
    parse_payload,
    parse_test_case,
    split_blocks,
)


# ==================== Comments & Splitting ====================

def test_filter_comments_drops_comment_lines_and_keeps_blank_lines():
    text = "# header\ntestcase: a\n\n   # indented comment\nurl: x\n"
    assert filter_comments(text) == "testcase: a\n\nurl: x\n"


def test_filter_comments_is_idempotent(sample_document):
    once = filter_comments(sample_document)
    assert filter_comments(once) == once


def test_filter_comments_keeps_hash_inside_values():
    assert filter_comments("url: http://x/#frag\n") == "url: http://x/#frag\n"


def test_filter_comments_splits_on_newline_only():
    text = "testcase: a\x85# not a comment\n# dropped\nurl: x\n"
    assert filter_comments(text) == "testcase: a\x85# not a comment\nurl: x\n"


def test_split_blocks_handles_crlf():
    assert split_blocks("testcase: a\r\n---\r\ntestcase: b\r\n") == ["testcase: a", "testcase: b"]


def test_split_blocks_discards_empty_segments():
    text = "---\ntestcase: a\n---\n\n   \n---\ntestcase: b\n---\n"
    assert split_blocks(text) == ["testcase: a", "testcase: b"]


def test_split_blocks_only_on_standalone_separator_lines():
    text = "testcase: a\nurl: https://x/a---b\n---\ntestcase: b"
    blocks = split_blocks(text)
    assert len(blocks) == 2
    assert "a---b" in blocks[0]


def test_block_count_matches_non_empty_segments(sample_document):
    filtered = filter_comments(sample_document)
    segments = [s for s in filtered.split("\n---\n") if s.strip() and s.strip() != "---"]
    assert len(parse_document(sample_document)) == len(segments) == 2


# ==================== Top-level Sections ====================

def test_end_to_end_minimal_block():
    cases = parse_document("testcase: ping\nurl: https://example.com\nstatuscode: 200\nmethod: GET\n")
    assert cases == [
        TestCase(name="ping", url="https://example.com", expected_status=200, method=HTTPMethod.GET)
    ]


def test_full_block_round_trip(sample_document):
    _, case = parse_document(sample_document)
    assert case.name == "create user"
    assert case.description == "creates a user"
    assert case.author == "qa"
    assert case.url == "https://example.com/users"
    assert case.expected_status == 201
    assert case.method is HTTPMethod.POST
    assert dict(case.headers) == {"Content-Type": "application/json", "Authorization": "Bearer abc"}
    assert dict(case.payload) == {"name": "alice", "age": "30"}
    assert case.assertions == Assertions(
        json_path_exists=("$.id",),
        json_path_value=('$.name == "alice"',),
        header_exists="Location",
        header_value=("Content-Type == application/json",),
    )


def test_keys_are_case_insensitive_and_values_trimmed():
    case = parse_test_case("TestCase:   Mixed Case  \nURL: http://x  \nStatusCode: 404\nMETHOD:  delete ")
    assert case.name == "Mixed Case"
    assert case.url == "http://x"
    assert case.expected_status == 404
    assert case.method is HTTPMethod.DELETE


def test_defaults_when_sections_are_missing():
    case = parse_test_case("description: nothing else")
    assert case.name == ""
    assert case.url == ""
    assert case.author is None
    assert case.method is HTTPMethod.UNSET
    assert case.expected_status == 0
    assert dict(case.headers) == {}
    assert len(case.assertions) == 1


def test_lines_without_colon_are_ignored():
    case = parse_test_case("testcase: a\nthis line is free text\nurl: http://x")
    assert case.name == "a"
    assert case.url == "http://x"


def test_duplicate_top_level_keys_last_wins():
    case = parse_test_case("testcase: first\ntestcase: second")
    assert case.name == "second"


def test_form_feed_inside_value_is_not_a_line_break():
    case = parse_test_case("testcase: a\x0cb\nurl: http://x")
    assert case.name == "a\x0cb"
    assert case.url == "http://x"


def test_unicode_line_separator_inside_value_is_kept():
    case = parse_test_case("description: left\u2028right: side")
    assert case.description == "left\u2028right: side"


def test_comment_lookalike_after_next_line_char_stays_in_value():
    cases = parse_document("testcase: a\x85# not a comment\nurl: http://x\nmethod: GET\n")
    assert cases[0].name == "a\x85# not a comment"


def test_crlf_line_endings():
    case = parse_test_case("testcase: a\r\nheaders:\r\n  X-Id: 1\r\nmethod: GET\r\n")
    assert case.name == "a"
    assert dict(case.headers) == {"X-Id": "1"}
    assert case.method is HTTPMethod.GET


def test_value_keeps_everything_after_first_colon():
    case = parse_test_case("url: https://example.com:8443/x")
    assert case.url == "https://example.com:8443/x"


def test_unknown_section_fails():
    with pytest.raises(InvalidSectionError) as exc:
        parse_test_case("testcase: a\nfoo: bar")
    assert exc.value.section == "foo"
    assert exc.value.line == 2


@pytest.mark.parametrize("value", ["abc", "", "-1", "65536", "20 0", "2.5"])
def test_invalid_status_code(value):
    with pytest.raises(StatusCodeParseError):
        parse_test_case(f"statuscode: {value}")


@pytest.mark.parametrize("value,expected", [("0", 0), ("65535", 65535), ("+201", 201), ("007", 7)])
def test_status_code_u16_range(value, expected):
    assert parse_test_case(f"statuscode: {value}").expected_status == expected


def test_invalid_method():
    with pytest.raises(InvalidMethodError) as exc:
        parse_test_case("method: fetch")
    assert exc.value.method == "FETCH"
    assert str(exc.value) == "line 1: Method: FETCH is invalid"


def test_all_methods_accepted():
    for name in ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "TRACE", "OPTIONS", "CONNECT"]:
        assert parse_test_case(f"method: {name.lower()}").method.value == name


# ==================== Section Bodies ====================

def test_headers_marker_without_body_consumes_nothing():
    lines = ["headers:", "url: http://x"]
    headers, end = parse_headers(lines, 1)
    assert headers == {}
    assert end == 1

    case = parse_test_case("\n".join(lines))
    assert dict(case.headers) == {}
    assert case.url == "http://x"


def test_headers_accept_tabs_and_later_duplicates_overwrite():
    lines = ["headers:", "\tAccept: text/plain", "  Accept: application/json", "url: u"]
    headers, end = parse_headers(lines, 1)
    assert headers == {"Accept": "application/json"}
    assert end == 3


def test_single_space_indent_is_top_level():
    with pytest.raises(InvalidSectionError) as exc:
        parse_test_case("headers:\n  A: 1\n B: 2")
    assert exc.value.section == "b"


def test_header_line_without_colon_fails():
    with pytest.raises(HeaderExpectsKVError) as exc:
        parse_test_case("testcase: a\nheaders:\n  Accept text/plain")
    assert exc.value.line == 3


def test_payload_line_without_colon_fails():
    with pytest.raises(PayloadExpectsKVError):
        parse_payload(["payload:", "  just text"], 1)


def test_sections_resume_top_level_scanning():
    case = parse_test_case(
        "headers:\n  X-A: 1\n  X-B: 2\npayload:\n  k: v\nmethod: PUT\nurl: http://x"
    )
    assert dict(case.headers) == {"X-A": "1", "X-B": "2"}
    assert dict(case.payload) == {"k": "v"}
    assert case.method is HTTPMethod.PUT
    assert case.url == "http://x"


def test_assertions_length_accounting():
    lines = [
        "assertions:",
        "  jsonPathExists: $.a",
        "  jsonPathExists: $.b",
        "  jsonPathValue: $.c == 1",
        "  headerValue: X == y",
    ]
    assertions, end = parse_assertions(lines, 1)
    assert len(assertions) == 2 + 1 + 1 + 1
    assert end == len(lines)


def test_header_exists_is_last_wins():
    assertions, _ = parse_assertions(["assertions:", "  headerExists: A", "  HEADEREXISTS: B"], 1)
    assert assertions.header_exists == "B"
    assert len(assertions) == 1


def test_assertion_lines_without_colon_are_skipped():
    assertions, end = parse_assertions(["assertions:", "  stray", "  jsonPathExists: $.x"], 1)
    assert assertions.json_path_exists == ("$.x",)
    assert end == 3


def test_invalid_assertion_key():
    with pytest.raises(InvalidAssertionKeyError) as exc:
        parse_test_case("assertions:\n  statusIs: 200")
    assert exc.value.key == "statusis"
    assert exc.value.line == 2


# ==================== Document Errors ====================

def test_parse_error_reports_block_and_line():
    doc = "testcase: ok\n---\ntestcase: bad\nmethod: NOPE\n"
    with pytest.raises(TestCaseParseError) as exc:
        parse_document(doc)
    assert exc.value.block == 2
    assert exc.value.line == 2
    assert exc.value.to_dict()["error"] == "InvalidMethodError"


def test_first_invalid_block_wins():
    doc = "foo: 1\n---\nmethod: NOPE\n"
    with pytest.raises(InvalidSectionError):
        parse_document(doc)


def test_parsed_case_is_immutable(sample_document):
    case = parse_document(sample_document)[1]
    with pytest.raises(Exception):
        case.name = "changed"
    with pytest.raises(TypeError):
        case.headers["X"] = "1"
