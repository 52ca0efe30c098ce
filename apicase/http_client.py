# apicase/http_client.py
"""
Blocking HTTP client used by the runner and the REPL.

One httpx.Client (connection pool) is shared by all worker threads.
Every transport-level failure is reported as TransportError so callers
only have to handle one exception type.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import httpx

from apicase.errors import TransportError
from apicase.models import HTTPMethod

logger = logging.getLogger(__name__)


@dataclass
class HttpResponse:
    """Transport-independent view of a received response"""
    status_code: int
    body: str = ""
    content_type: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    elapsed_s: float = 0.0
    content_length: Optional[int] = None
    http_version: str = ""

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type

    def json(self) -> Any:
        return json.loads(self.body)


def _describe(exc: Exception) -> str:
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    return str(exc) or type(exc).__name__


class HttpClient:
    """
    Thin wrapper over httpx.Client.

    Usage:
        with HttpClient(timeout_sec=10) as client:
            resp = client.send("GET", "https://example.com", {})
    """

    def __init__(
        self,
        timeout_sec: float = 30.0,
        verify_ssl: bool = True,
        follow_redirects: bool = True,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.timeout_sec = timeout_sec
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_sec),
            verify=verify_ssl,
            follow_redirects=follow_redirects,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, **overrides) -> "HttpClient":
        opts = {
            "timeout_sec": settings.timeout_sec,
            "verify_ssl": settings.verify_ssl,
            "follow_redirects": settings.follow_redirects,
        }
        opts.update(overrides)
        return cls(**opts)

    def send(
        self,
        method: Union[HTTPMethod, str],
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[str] = None,
    ) -> HttpResponse:
        """
        Perform exactly one request.

        Raises:
            TransportError: no response was received
        """
        verb = method.value if isinstance(method, HTTPMethod) else str(method).upper()
        if not verb:
            raise TransportError("request method is not set")

        try:
            t0 = time.perf_counter()
            resp = self._client.request(
                verb,
                url,
                headers=dict(headers or {}),
                content=body.encode("utf-8") if body else None,
            )
            elapsed = time.perf_counter() - t0
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"{verb} {url} failed: {e!r}")
            raise TransportError(_describe(e)) from e
        except ValueError as e:
            # non-encodable header names/values are rejected before sending
            logger.debug(f"{verb} {url} rejected: {e!r}")
            raise TransportError(_describe(e)) from e

        content_length = resp.headers.get("content-length")
        return HttpResponse(
            status_code=resp.status_code,
            body=resp.text,
            content_type=resp.headers.get("content-type", ""),
            headers=dict(resp.headers),
            elapsed_s=elapsed,
            content_length=int(content_length) if content_length and content_length.isdigit() else len(resp.content),
            http_version=resp.http_version,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
