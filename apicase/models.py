# apicase/models.py
"""
Shared types for parsed test cases and their outcomes.

Everything here is immutable once built: the runner hands the same
TestCase objects to many worker threads without locking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union


def _frozen_map(values: Optional[Mapping[str, str]] = None) -> Mapping[str, str]:
    return MappingProxyType(dict(values or {}))


class HTTPMethod(str, Enum):
    """Request methods accepted by the `method:` section."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    TRACE = "TRACE"
    OPTIONS = "OPTIONS"
    CONNECT = "CONNECT"
    UNSET = ""  # block had no method line

    @classmethod
    def lookup(cls, token: str) -> Optional["HTTPMethod"]:
        """Case-insensitive lookup; None for unknown tokens (UNSET is never matched)."""
        name = token.strip().upper()
        if not name:
            return None
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class Assertions:
    """Raw assertion expressions captured from an `assertions:` section."""
    json_path_exists: Tuple[str, ...] = ()
    json_path_value: Tuple[str, ...] = ()
    header_exists: str = ""
    header_value: Tuple[str, ...] = ()

    def __len__(self) -> int:
        # header_exists always occupies one slot, set or not
        return len(self.json_path_exists) + len(self.json_path_value) + len(self.header_value) + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "json_path_exists": list(self.json_path_exists),
            "json_path_value": list(self.json_path_value),
            "header_exists": self.header_exists,
            "header_value": list(self.header_value),
        }


@dataclass(frozen=True)
class TestCase:
    """One parsed request plus its expectations."""
    __test__: ClassVar[bool] = False

    name: str = ""
    description: str = ""
    author: Optional[str] = None
    method: HTTPMethod = HTTPMethod.UNSET
    url: str = ""
    expected_status: int = 0
    headers: Mapping[str, str] = field(default_factory=_frozen_map)
    payload: Mapping[str, str] = field(default_factory=_frozen_map)
    assertions: Assertions = field(default_factory=Assertions)

    def __post_init__(self):
        # accept plain dicts from callers but never keep a mutable reference
        object.__setattr__(self, "headers", _frozen_map(self.headers))
        object.__setattr__(self, "payload", _frozen_map(self.payload))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "author": self.author,
            "method": self.method.value or None,
            "url": self.url,
            "expected_status": self.expected_status,
            "headers": dict(self.headers),
            "payload": dict(self.payload),
            "assertions": self.assertions.to_dict(),
        }


# ==================== Remarks ====================

@dataclass(frozen=True)
class StatusMismatch:
    expected: int
    received: int

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "status_mismatch", "expected": self.expected, "received": self.received}

    def __str__(self) -> str:
        return f"expected status code: {self.expected}, got: {self.received}"


@dataclass(frozen=True)
class RequestFailed:
    cause: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "request_failed", "cause": self.cause}

    def __str__(self) -> str:
        return f"failed due to error: {self.cause}"


Remarks = Union[StatusMismatch, RequestFailed]


# ==================== Results ====================

@dataclass(frozen=True)
class Success:
    name: str
    passed: ClassVar[bool] = True

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "status": "PASS"}

    def __str__(self) -> str:
        return f'✅ Successfully passed test: "{self.name}"'


@dataclass(frozen=True)
class Fail:
    name: str
    remarks: Remarks
    passed: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "status": "FAIL", "remarks": self.remarks.to_dict()}

    def __str__(self) -> str:
        return f'❌ Failed test: "{self.name}", remarks: {self.remarks}'


TestCaseResult = Union[Success, Fail]


@dataclass
class RunSummary:
    """Aggregated outcome of one run"""
    results: List[TestCaseResult] = field(default_factory=list)
    duration_s: float = 0.0
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "duration_s": self.duration_s,
            "started_at": self.started_at,
            "results": [r.to_dict() for r in self.results],
        }
