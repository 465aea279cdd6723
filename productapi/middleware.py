"""Request middleware: token authentication and request logging."""

from __future__ import annotations

import os
from datetime import datetime
from http import HTTPStatus

from productapi.web import Handler, Request, Response, error_response


def authenticate(next_handler: Handler) -> Handler:
    """Reject requests whose TOKEN header differs from the TOKEN environment variable."""

    def handler(request: Request) -> Response:
        token = os.environ.get("TOKEN", "")
        if request.header("TOKEN") != token:
            return error_response("invalid token", HTTPStatus.UNAUTHORIZED)
        return next_handler(request)

    return handler


def log_request(next_handler: Handler) -> Handler:
    """Print the method, time, URL and body size of each request, then pass it on."""

    def handler(request: Request) -> Response:
        now = datetime.now().astimezone()
        print(
            f"Verbo: {request.method}\n"
            f"Data e hora: {now}\n"
            f"Url consulta: {request.url}\n"
            f"Tamanho consulta: {request.content_length}",
            end="",
        )
        return next_handler(request)

    return handler