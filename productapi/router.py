"""Route table and WSGI application for the product service."""

from __future__ import annotations

import dataclasses
import re
from http import HTTPStatus
from typing import Any, Callable, Iterable, Iterator

from productapi.handler import ProductHandler
from productapi.middleware import authenticate, log_request
from productapi.repository import JsonProductRepository
from productapi.storage import Storage
from productapi.web import Handler, Request, Response, error_response

RouteSpec = tuple[str, str, Handler]

_PARAM_RE = re.compile(r"\{(\w+)(?::([^}]+))?\}")


def _compile(template: str) -> re.Pattern[str]:
    """Turn a template such as ``/products/{id:[0-9]+}`` into a regular expression."""
    parts: list[str] = []
    position = 0
    for match in _PARAM_RE.finditer(template):
        parts.append(re.escape(template[position : match.start()]))
        name, pattern = match.group(1), match.group(2) or "[^/]+"
        parts.append(f"(?P<{name}>{pattern})")
        position = match.end()
    parts.append(re.escape(template[position:]))
    return re.compile("".join(parts))


def build_products_routes(storage: Storage) -> list[RouteSpec]:
    """Load the catalogue from ``storage`` and return the product routes.

    Paths are relative to the mount point. An ApiError from the storage is
    raised as is.
    """
    products = storage.get()
    repository = JsonProductRepository(storage, products)
    handler = ProductHandler(repository)
    return [
        ("GET", "/", handler.get_all_products),
        ("GET", "/{id:[0-9]+}", handler.get_product_by_id),
        ("GET", "/search", handler.get_products_by_filter_price),
        ("POST", "/", handler.post_product),
        ("PUT", "/{id:[0-9]+}", handler.put_product),
        ("PATCH", "/{id:[0-9]+}", handler.patch_product),
        ("DELETE", "/{id:[0-9]+}", handler.delete_product),
    ]


class Application:
    """Dispatches requests to the first route whose method and path match."""

    def __init__(self, routes: Iterable[RouteSpec]) -> None:
        self._routes = [
            (method.upper(), _compile(template), handler) for method, template, handler in routes
        ]

    def handle(self, request: Request) -> Response:
        """Route ``request``; unknown paths give 404 and wrong methods 405."""
        allowed: list[str] = []
        for method, pattern, handler in self._routes:
            match = pattern.fullmatch(request.path)
            if match is None:
                continue
            if method != request.method.upper():
                allowed.append(method)
                continue
            params = {**request.path_params, **match.groupdict()}
            return handler(dataclasses.replace(request, path_params=params))
        if allowed:
            return Response(
                status=HTTPStatus.METHOD_NOT_ALLOWED,
                headers={"Allow": ", ".join(dict.fromkeys(allowed))},
            )
        return error_response("404 page not found", HTTPStatus.NOT_FOUND)

    def __call__(
        self, environ: dict[str, Any], start_response: Callable[..., Any]
    ) -> Iterator[bytes]:
        request = self._request_from_environ(environ)
        response = self.handle(request)
        status = HTTPStatus(response.status)
        headers = list(response.headers.items())
        headers.append(("Content-Length", str(len(response.body))))
        start_response(f"{status.value} {status.phrase}", headers)
        return iter([response.body])

    @staticmethod
    def _request_from_environ(environ: dict[str, Any]) -> Request:
        headers: dict[str, str] = {}
        for key, value in environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-").title()] = value
        if environ.get("CONTENT_TYPE"):
            headers["Content-Type"] = environ["CONTENT_TYPE"]
        try:
            length = int(environ.get("CONTENT_LENGTH") or 0)
        except ValueError:
            length = 0
        stream = environ.get("wsgi.input")
        body = stream.read(length) if stream is not None and length > 0 else b""
        raw_path = environ.get("PATH_INFO") or "/"
        path = raw_path.encode("latin-1", errors="replace").decode("utf-8", errors="replace")
        return Request(
            method=str(environ.get("REQUEST_METHOD", "GET")).upper(),
            path=path,
            headers=headers,
            query_string=environ.get("QUERY_STRING", ""),
            body=body,
        )


def _ping(request: Request) -> Response:
    return Response(
        status=HTTPStatus.OK,
        headers={"Content-Type": "text/plain; charset=utf-8"},
        body=b"Pong",
    )


class Router:
    """Builds the full application: a public ping and the guarded product routes."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def map_routes(self) -> Application:
        """The application with every route mounted."""
        routes: list[RouteSpec] = [("GET", "/ping", _ping)]
        for method, sub_path, handler in build_products_routes(self._storage):
            guarded = log_request(authenticate(handler))
            if sub_path == "/":
                routes.append((method, "/products", guarded))
                routes.append((method, "/products/", guarded))
            else:
                routes.append((method, "/products" + sub_path, guarded))
        return Application(routes)