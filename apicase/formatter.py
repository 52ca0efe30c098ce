# apicase/formatter.py
"""
Console rendering of REPL responses (rich).

JSON bodies are shown as nested tables, or as indented JSON when the
formatter runs in JSON mode.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any, Optional

from rich import box
from rich.console import Console, RenderableType
from rich.table import Table
from rich.text import Text

from apicase.http_client import HttpResponse

_STATUS_HINTS = {
    200: "Success!",
    401: "Unauthorized! Please provide credentials.",
    404: "Resource Not Found!",
    500: "Internal Server Error! Retry request...",
}


def status_style(code: int) -> str:
    if 200 <= code < 300:
        return "green"
    if 300 <= code < 400:
        return "cyan"
    if 400 <= code < 500:
        return "yellow"
    if 500 <= code < 600:
        return "red"
    return "white"


def format_size(size: Optional[int]) -> str:
    if size is None:
        return "Unknown"
    if size >= 1 << 30:
        return f"{size / (1 << 30):.2f} GB"
    if size >= 1 << 20:
        return f"{size / (1 << 20):.2f} MB"
    if size >= 1 << 10:
        return f"{size / (1 << 10):.2f} KB"
    return f"{size} bytes"


def format_elapsed(seconds: float) -> str:
    total_ms = int(seconds * 1000)
    secs, millis = divmod(total_ms, 1000)
    if secs >= 60:
        return f"{secs // 60} min {secs % 60}.{millis:03d} s"
    if secs > 0:
        return f"{secs}.{millis:03d} s"
    return f"{millis} ms"


def _scalar(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def json_to_table(value: Any) -> RenderableType:
    """Nested tables for objects/arrays, plain text for scalars."""
    if isinstance(value, dict):
        if not value:
            return Text("{}")
        table = Table(show_header=False, box=box.ROUNDED, border_style="magenta")
        table.add_column(style="bold blue")
        table.add_column()
        for key, item in value.items():
            table.add_row(str(key), json_to_table(item))
        return table

    if isinstance(value, list):
        if not value:
            return Text("[]")
        table = Table(show_header=False, box=box.ROUNDED, border_style="cyan")
        table.add_column(style="dim")
        table.add_column()
        for idx, item in enumerate(value):
            table.add_row(str(idx), json_to_table(item))
        return table

    return Text(_scalar(value))


class ResponseFormatter:
    def __init__(
        self,
        json_mode: bool = False,
        console: Optional[Console] = None,
        show_status: bool = True,
        show_size: bool = True,
        show_time: bool = True,
        show_headers: bool = False,
        show_version: bool = False,
    ):
        self.json_mode = json_mode
        self.console = console or Console()
        self.show_status = show_status
        self.show_size = show_size
        self.show_time = show_time
        self.show_headers = show_headers
        self.show_version = show_version

    def metadata(self, response: HttpResponse) -> None:
        if self.show_status:
            code = response.status_code
            try:
                label = f"{code} {HTTPStatus(code).phrase}"
            except ValueError:
                label = str(code)
            hint = _STATUS_HINTS.get(code, "")
            line = Text("Status: ", style="bold white")
            line.append(label, style=status_style(code))
            line.append(f" ({hint})")
            self.console.print(line)

        if self.show_size:
            self.console.print(Text("Response Size: ", style="bold white") + Text(format_size(response.content_length)))

        if self.show_headers:
            self.console.print(Text("Response Header:", style="bold white"))
            for name, value in response.headers.items():
                self.console.print(f"{name}: {value!r}", markup=False)

        if self.show_version:
            self.console.print(Text("Version: ", style="bold white") + Text(response.http_version))

    def elapsed(self, seconds: float) -> None:
        if self.show_time:
            self.console.print(Text("Response Time: ", style="bold white") + Text(format_elapsed(seconds)))

    def response(self, value: Any) -> None:
        if self.json_mode:
            self.console.print(json.dumps(value, indent=2), markup=False, highlight=False)
        else:
            self.console.print(json_to_table(value))
