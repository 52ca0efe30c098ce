# apicase/errors.py
"""
Exception hierarchy for the test-case engine.

Parse errors are fatal for the whole document. Transport errors are caught
by the runner and turned into failed results.
"""

from __future__ import annotations

from typing import Optional


class ApicaseError(Exception):
    """Base exception for the engine."""
    pass


class TestCaseParseError(ApicaseError):
    """A test-case block could not be parsed."""

    __test__ = False  # keep pytest from collecting this as a test class

    def __init__(self, message: str, block: Optional[int] = None, line: Optional[int] = None):
        self.message = message
        self.block = block
        self.line = line
        super().__init__(message)

    def locate(self, block: Optional[int] = None, line: Optional[int] = None) -> "TestCaseParseError":
        """Attach position info (1-based) without overwriting what is already known."""
        if self.block is None:
            self.block = block
        if self.line is None:
            self.line = line
        return self

    def to_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "block": self.block,
            "line": self.line,
        }

    def __str__(self) -> str:
        where = []
        if self.block is not None:
            where.append(f"block {self.block}")
        if self.line is not None:
            where.append(f"line {self.line}")
        if where:
            return f"{', '.join(where)}: {self.message}"
        return self.message


class InvalidMethodError(TestCaseParseError):
    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Method: {method} is invalid")


class InvalidSectionError(TestCaseParseError):
    def __init__(self, section: str):
        self.section = section
        super().__init__(f"Found {section} invalid section")


class StatusCodeParseError(TestCaseParseError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Failed to parse status code: {value}")


class HeaderExpectsKVError(TestCaseParseError):
    def __init__(self):
        super().__init__("Header section expects key-value pair")


class PayloadExpectsKVError(TestCaseParseError):
    def __init__(self):
        super().__init__("Payload section expects key-value pair")


class InvalidAssertionKeyError(TestCaseParseError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Found invalid key {key} in assertions section")


class TransportError(ApicaseError):
    """The HTTP call did not produce a response (connect, timeout, TLS, ...)."""

    def __init__(self, cause: str):
        self.cause = cause
        super().__init__(cause)


class SessionError(ApicaseError):
    """Invalid REPL session operation (unknown header set, bad JSON, ...)."""
    pass
