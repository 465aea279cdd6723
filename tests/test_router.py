import json
from http import HTTPStatus
from wsgiref.util import setup_testing_defaults
from io import BytesIO

import pytest

from productapi.domain import Product
from productapi.errors import ApiError
from productapi.router import Application, Router, build_products_routes
from productapi.storage import JsonStorage
from productapi.web import Request, Response

PRODUCTS = [
    Product(
        id=101,
        name="Wireless Mouse",
        quantity=50,
        code_value="WM-2023-A",
        is_published=True,
        expiration="10/10/2025",
        price=25.99,
    ),
    Product(
        id=102,
        name="Mechanical Keyboard",
        quantity=30,
        code_value="MK-2023-B",
        is_published=False,
        expiration="12/10/2020",
        price=75.00,
    ),
]

AUTH = {"TOKEN": "token"}


@pytest.fixture
def storage_path(tmp_path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps([p.to_dict() for p in PRODUCTS]), encoding="utf-8")
    return path


@pytest.fixture
def app(storage_path, monkeypatch):
    monkeypatch.setenv("TOKEN", "token")
    return Router(JsonStorage(storage_path)).map_routes()


def test_ping_needs_no_token(app):
    response = app.handle(Request(method="GET", path="/ping"))
    assert response.status == HTTPStatus.OK
    assert response.body == b"Pong"


def test_products_require_token(app):
    response = app.handle(Request(method="GET", path="/products"))
    assert response.status == HTTPStatus.UNAUTHORIZED
    assert response.text == "invalid token\n"


def test_list_products(app):
    for path in ("/products", "/products/"):
        response = app.handle(Request(method="GET", path=path, headers=AUTH))
        assert response.status == HTTPStatus.OK
        ids = sorted(item["id"] for item in response.json())
        assert ids == [101, 102]


def test_get_by_id(app):
    response = app.handle(Request(method="GET", path="/products/101", headers=AUTH))
    assert response.status == HTTPStatus.OK
    assert response.json() == PRODUCTS[0].to_dict()


def test_search_by_price(app):
    response = app.handle(
        Request(method="GET", path="/products/search", query_string="priceGt=50", headers=AUTH)
    )
    assert response.status == HTTPStatus.OK
    assert [item["id"] for item in response.json()] == [102]


def test_post_then_saved_to_file(app, storage_path):
    body = json.dumps(
        {
            "name": "Dell Monitor",
            "quantity": 30,
            "code_value": "Dell-2025-B",
            "is_published": True,
            "expiration": "12/10/2026",
            "price": 1000.0,
        }
    ).encode()
    response = app.handle(Request(method="POST", path="/products", headers=AUTH, body=body))
    assert response.status == HTTPStatus.CREATED
    assert response.json() == {"id": 103}
    saved = json.loads(storage_path.read_text(encoding="utf-8"))
    assert 103 in {item["id"] for item in saved}


def test_delete_then_not_found(app):
    deleted = app.handle(Request(method="DELETE", path="/products/101", headers=AUTH))
    assert deleted.status == HTTPStatus.NO_CONTENT
    again = app.handle(Request(method="GET", path="/products/101", headers=AUTH))
    assert again.status == HTTPStatus.NOT_FOUND
    assert again.text == "resource product of id 101 not found\n"


def test_unknown_path_is_not_found(app):
    response = app.handle(Request(method="GET", path="/nowhere"))
    assert response.status == HTTPStatus.NOT_FOUND


def test_non_numeric_id_does_not_match(app):
    response = app.handle(Request(method="GET", path="/products/abc", headers=AUTH))
    assert response.status == HTTPStatus.NOT_FOUND


def test_wrong_method_is_not_allowed(app):
    response = app.handle(Request(method="PUT", path="/products/search", headers=AUTH))
    assert response.status == HTTPStatus.METHOD_NOT_ALLOWED
    assert response.headers["Allow"] == "GET"


def test_requests_are_logged(app, capsys):
    app.handle(Request(method="GET", path="/products/102", headers=AUTH))
    out = capsys.readouterr().out
    assert "Verbo: GET" in out
    assert "Url consulta: /products/102" in out


def test_application_passes_path_params():
    seen = {}

    def handler(request):
        seen.update(request.path_params)
        return Response(status=HTTPStatus.OK)

    application = Application([("GET", "/items/{name}/{num:[0-9]+}", handler)])
    response = application.handle(Request(method="GET", path="/items/box/42"))
    assert response.status == HTTPStatus.OK
    assert seen == {"name": "box", "num": "42"}


def test_build_products_routes_with_missing_file(tmp_path):
    with pytest.raises(ApiError) as info:
        build_products_routes(JsonStorage(tmp_path / "missing.json"))
    assert info.value.message == "error while manipulating file"
    assert info.value.status_code == HTTPStatus.BAD_REQUEST


def test_build_products_routes_covers_all_methods(storage_path):
    routes = build_products_routes(JsonStorage(storage_path))
    methods = {method for method, _, _ in routes}
    assert methods == {"GET", "POST", "PUT", "PATCH", "DELETE"}


def _call(app, environ):
    captured = {}

    def start_response(status, headers):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured, body


def test_wsgi_ping(app):
    environ = {}
    setup_testing_defaults(environ)
    environ["PATH_INFO"] = "/ping"
    captured, body = _call(app, environ)
    assert captured["status"] == "200 OK"
    assert body == b"Pong"
    assert captured["headers"]["Content-Length"] == str(len(body))


def test_wsgi_token_header_and_body(app):
    payload = json.dumps({"name": "Renamed"}).encode()
    environ = {}
    setup_testing_defaults(environ)
    environ.update(
        {
            "REQUEST_METHOD": "PATCH",
            "PATH_INFO": "/products/102",
            "HTTP_TOKEN": "token",
            "CONTENT_LENGTH": str(len(payload)),
            "wsgi.input": BytesIO(payload),
        }
    )
    captured, body = _call(app, environ)
    assert captured["status"].startswith("200")
    assert json.loads(body)["name"] == "Renamed"


def test_wsgi_without_token_is_unauthorized(app):
    environ = {}
    setup_testing_defaults(environ)
    environ["PATH_INFO"] = "/products"
    captured, body = _call(app, environ)
    assert captured["status"].startswith("401")
    assert body == b"invalid token\n"