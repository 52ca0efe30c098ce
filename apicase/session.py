# apicase/session.py
"""REPL session state: response cache, request history and named header sets."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from apicase.cache import ResponseCache
from apicase.errors import SessionError
from apicase.formatter import ResponseFormatter

logger = logging.getLogger(__name__)


class Session:
    def __init__(
        self,
        json_mode: bool = False,
        timeout_sec: float = 30.0,
        cache_size: int = 100,
        cache_ttl_sec: float = 5.0,
        formatter: Optional[ResponseFormatter] = None,
    ):
        self.cache = ResponseCache(max_size=cache_size, max_age=cache_ttl_sec)
        self.history: Dict[str, Any] = {}
        self.formatter = formatter or ResponseFormatter(json_mode=json_mode)
        self.timeout_sec = timeout_sec
        self._headers: Dict[str, str] = {}

    @classmethod
    def from_settings(cls, settings, json_mode: bool = False, **overrides) -> "Session":
        opts = {
            "timeout_sec": settings.timeout_sec,
            "cache_size": settings.cache_size,
            "cache_ttl_sec": settings.cache_ttl_sec,
        }
        opts.update(overrides)
        return cls(json_mode=json_mode, **opts)

    def set_header(self, name: str, content: str) -> None:
        """
        Store a named header set given as a JSON object string.

        Raises:
            SessionError: non-alphanumeric name or invalid JSON
        """
        if not name or not name.isalnum():
            raise SessionError("Invalid header name! Only alphanumeric characters are allowed.")
        content = content.strip()
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            raise SessionError(f"Invalid JSON format: {e}") from e
        self._headers[name] = content
        logger.debug(f"header set {name!r} stored")

    def get_header(self, name: str) -> Dict[str, str]:
        """Resolve a named header set into request headers."""
        raw = self._headers.get(name)
        if raw is None:
            raise SessionError(f"Header {name} doesn't exists.")

        data = json.loads(raw)
        if not isinstance(data, dict):
            return {}

        headers: Dict[str, str] = {}
        for key, value in data.items():
            if not isinstance(value, str):
                raise SessionError(f"Empty field for {key}")
            headers[key] = value
        return headers

    def show_headers(self) -> None:
        console = self.formatter.console
        if not self._headers:
            console.print("[INFO]: No HEADERS :(", markup=False)
            return
        console.print("Session Headers:\n")
        for name, content in self._headers.items():
            console.print(f"{name}: {content}", markup=False)

    def show_history(self) -> None:
        console = self.formatter.console
        if not self.history:
            console.print("[INFO]: No History :(", markup=False)
            return
        console.print("Session History:\n")
        for request, response in self.history.items():
            pretty_request = request.replace(" ", " | ")
            pretty_json = json.dumps(response, indent=2)
            console.print(f"Request: {pretty_request}\nResponse: {pretty_json}\n", markup=False, highlight=False)
