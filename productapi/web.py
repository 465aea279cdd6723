"""Minimal request and response values shared by handlers and middleware."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Callable, Mapping
from urllib.parse import parse_qs


@dataclass
class Request:
    """An incoming HTTP request, with any route parameters already extracted."""

    method: str = "GET"
    path: str = "/"
    headers: Mapping[str, str] = field(default_factory=dict)
    query_string: str = ""
    body: bytes = b""
    path_params: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> str:
        """The first value of header ``name``, matched case-insensitively, or ""."""
        wanted = name.casefold()
        return next((value for key, value in self.headers.items() if key.casefold() == wanted), "")

    def query(self, name: str) -> str:
        """The first value of query parameter ``name``, or ""."""
        values = parse_qs(self.query_string, keep_blank_values=True).get(name)
        return values[0] if values else ""

    @property
    def url(self) -> str:
        """The path followed by the query string, if there is one."""
        return f"{self.path}?{self.query_string}" if self.query_string else self.path

    @property
    def content_length(self) -> int:
        """Size of the body in bytes."""
        return len(self.body)


@dataclass
class Response:
    """An HTTP response ready to be sent."""

    status: int = HTTPStatus.OK
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def text(self) -> str:
        """The body decoded as UTF-8."""
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """The body parsed as JSON."""
        return json.loads(self.body)


Handler = Callable[[Request], Response]

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _encode_json(payload: Any) -> bytes:
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    for raw, escaped in _HTML_ESCAPES.items():
        text = text.replace(raw, escaped)
    return (text + "\n").encode("utf-8")


def error_response(message: str, status: int) -> Response:
    """A plain-text error reply whose body is ``message`` and a newline."""
    return Response(
        status=int(status),
        headers={
            "Content-Type": "text/plain; charset=utf-8",
            "X-Content-Type-Options": "nosniff",
        },
        body=(message + "\n").encode("utf-8"),
    )


def json_response(payload: Any, status: int) -> Response:
    """A JSON reply holding ``payload`` followed by a newline."""
    return Response(
        status=int(status),
        headers={"Content-Type": "application/json"},
        body=_encode_json(payload),
    )