# apicase/repl.py
"""
Interactive request shell.

Commands:
    <METHOD> <header-set|{}> <url>   send a request (POST/PUT/PATCH ask for a body)
    HEADER <name>                    store a named header set (JSON object)
    headers                          list stored header sets
    history                          show responses received this session
    exit                             quit
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory

from apicase.errors import SessionError, TransportError
from apicase.http_client import HttpClient
from apicase.session import Session

logger = logging.getLogger(__name__)

PROMPT = ">>> "
_NO_BODY = {"GET", "DELETE"}
_WITH_BODY = {"POST", "PUT", "PATCH"}


class Repl:
    def __init__(
        self,
        session: Session,
        client: HttpClient,
        history_file: Optional[str] = None,
        ask: Optional[Callable[[str], str]] = None,
    ):
        self.session = session
        self.client = client
        self.history_file = history_file
        self._prompt: Optional[PromptSession] = None
        self._ask = ask

    # ==================== Output ====================

    def _say(self, message: str, style: Optional[str] = None) -> None:
        self.session.formatter.console.print(message, style=style, markup=False, highlight=False)

    def _error(self, message: str) -> None:
        self._say(f"[ERROR]: {message}", style="red")

    def ask(self, label: str) -> str:
        if self._ask is not None:
            return self._ask(label)
        return self._prompt_session().prompt(label)

    def _prompt_session(self) -> PromptSession:
        if self._prompt is None:
            history = None
            if self.history_file:
                path = Path(self.history_file)
                if not path.exists():
                    self._say("[INFO]: No previous history.")
                history = FileHistory(str(path))
            self._prompt = PromptSession(history=history)
        return self._prompt

    # ==================== Loop ====================

    def loop(self) -> None:
        prompt = self._prompt_session()
        while True:
            try:
                line = prompt.prompt(PROMPT)
            except (EOFError, KeyboardInterrupt):
                self._say("[INFO]: Goodbye!")
                break
            if not self.handle(line):
                break

    def handle(self, line: str) -> bool:
        """Process one input line; False means the user asked to quit."""
        line = line.strip()
        if not line:
            return True

        command = line.lower()
        if command == "exit":
            self._say("[INFO]: Goodbye!")
            return False
        if command == "history":
            self.session.show_history()
        elif command == "headers":
            self.session.show_headers()
        else:
            self.process_input(line)
        return True

    def process_input(self, line: str) -> None:
        parts = line.split(" ")

        if parts[0] == "HEADER":
            if len(parts) != 2:
                self._error(f"Expected 2 arguments, found {len(parts)}!")
                return
            content = self.ask("Content: ")
            try:
                self.session.set_header(parts[1], content)
            except SessionError as e:
                self._error(str(e))
                return
            self._say(f"[INFO]: Header {parts[1]} set successfully!")
            return

        if len(parts) != 3:
            self._error(f"Expected 3 arguments, found {len(parts)}!")
            return

        method, header, url = parts
        if method in _NO_BODY:
            self.send_request(method, header, url)
        elif method in _WITH_BODY:
            body = self.ask("Body: ").strip()
            self.send_request(method, header, url, body)
        else:
            self._error(f"Invalid method: {method}")

    # ==================== Requests ====================

    def send_request(self, method: str, header: str, url: str, body: str = "") -> None:
        session = self.session
        session.cache.remove_expired_entries()
        cache_key = f"{method} {url}"

        cached = session.cache.get(cache_key)
        if cached is not None:
            self._say("[INFO] Using cached response")
            session.formatter.response(cached)
            return

        headers = {}
        if header != "{}":
            try:
                headers = session.get_header(header)
            except SessionError as e:
                self._error(str(e))
                return

        try:
            response = self.client.send(method, url, headers, body or None)
        except TransportError as e:
            if e.cause == "timeout":
                self._error(
                    f"Response time exceeded the specified timeout of {session.timeout_sec:g} seconds."
                )
            else:
                self._error(e.cause)
            return

        session.formatter.metadata(response)
        session.formatter.elapsed(response.elapsed_s)

        if response.is_html:
            answer = self.ask("[WARN]: Response is in HTML format.\nDo you want to print it? [y/n]: ")
            if answer.strip().lower() == "y":
                self._say(response.body)
            return

        try:
            data = response.json()
        except ValueError:
            self._error("Failed to decode response.")
            return

        session.history[cache_key] = data
        session.cache.put(cache_key, data)
        session.formatter.response(data)


def run_repl(session: Session, client: HttpClient, history_file: Optional[str] = None) -> None:
    logger.debug(f"Starting REPL (history={history_file})")
    Repl(session, client, history_file=history_file).loop()
