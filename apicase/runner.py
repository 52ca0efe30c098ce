# apicase/runner.py
"""
Concurrent test-case runner.

Every test case becomes one task on a thread pool; each task performs
exactly one blocking HTTP call. Results are read back from the futures
list positionally, so the output order always matches the input order
regardless of which request finishes first.

Not done here:
- the payload section is not sent as a request body
- assertions are not evaluated against the response
- no retries; one attempt decides pass/fail
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from apicase.errors import TransportError
from apicase.models import (
    Fail,
    HTTPMethod,
    RequestFailed,
    RunSummary,
    StatusMismatch,
    Success,
    TestCase,
    TestCaseResult,
)

logger = logging.getLogger(__name__)


class Sender(Protocol):
    """Anything with HttpClient.send()'s signature"""

    def send(self, method: HTTPMethod, url: str, headers: Mapping[str, str]) -> Any:
        ...


class TestCaseRunner:
    """
    Fan test cases out to worker threads and collect results in order.

    Args:
        client: HTTP sender shared by all workers (must be thread-safe)
        max_workers: pool size; None uses the ThreadPoolExecutor default
        progress_cb: receives {"event": ..., ...} dicts; `case_done` is
            called from worker threads
    """
    __test__ = False

    def __init__(
        self,
        client: Sender,
        max_workers: Optional[int] = None,
        progress_cb: Optional[Callable[[Dict[str, Any]], None]] = None,
    ):
        self.client = client
        self.max_workers = max_workers
        self._progress_cb = progress_cb
        self._lock = threading.Lock()
        self._done = 0

    # ==================== Public API ====================

    def run(self, cases: Sequence[TestCase]) -> List[TestCaseResult]:
        """Run all cases concurrently; result i belongs to cases[i]."""
        cases = list(cases)
        with self._lock:
            self._done = 0
        self._emit("run_start", total=len(cases))

        if not cases:
            self._emit("run_done", total=0, passed=0, failed=0)
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="apicase") as pool:
            futures: List[Future] = [pool.submit(self._run_tracked, case, len(cases)) for case in cases]
            results = [f.result() for f in futures]

        passed = sum(1 for r in results if r.passed)
        self._emit("run_done", total=len(results), passed=passed, failed=len(results) - passed)
        return results

    def run_summary(self, cases: Sequence[TestCase]) -> RunSummary:
        """run() plus timing and tallies"""
        started_at = datetime.now().isoformat()
        t0 = time.perf_counter()
        results = self.run(cases)
        summary = RunSummary(
            results=results,
            duration_s=round(time.perf_counter() - t0, 3),
            started_at=started_at,
        )
        logger.info(
            f"Run finished: {summary.passed}/{summary.total} passed in {summary.duration_s}s"
        )
        return summary

    def run_one(self, case: TestCase) -> TestCaseResult:
        """Send one request and classify the outcome."""
        try:
            response = self.client.send(case.method, case.url, dict(case.headers))
        except TransportError as e:
            logger.warning(f"❌ {case.name}: {case.method.value} {case.url} failed - {e.cause}")
            return Fail(name=case.name, remarks=RequestFailed(cause=e.cause))
        except Exception as e:
            # a misbehaving sender fails only its own case
            logger.error(f"❌ {case.name}: unexpected error from sender: {e}", exc_info=True)
            return Fail(name=case.name, remarks=RequestFailed(cause=str(e) or type(e).__name__))

        if response.status_code == case.expected_status:
            logger.info(f"✅ {case.name}: {case.method.value} {case.url} → {response.status_code}")
            return Success(name=case.name)

        logger.warning(
            f"❌ {case.name}: Expected {case.expected_status}, got {response.status_code}"
        )
        return Fail(
            name=case.name,
            remarks=StatusMismatch(expected=case.expected_status, received=response.status_code),
        )

    # ==================== Internals ====================

    def _run_tracked(self, case: TestCase, total: int) -> TestCaseResult:
        result = self.run_one(case)
        with self._lock:
            self._done += 1
            done = self._done
        self._emit("case_done", name=case.name, passed=result.passed, done=done, total=total)
        return result

    def _emit(self, event: str, **data):
        """Emit progress event"""
        if self._progress_cb:
            try:
                self._progress_cb({"event": event, **data})
            except Exception:
                logger.debug("progress_cb failed", exc_info=True)
