import json
from unittest import mock

import pytest

from productapi.domain import Product
from productapi.errors import ApiError
from productapi.main import main
from productapi.router import Application
from productapi.web import Request


@pytest.fixture
def storage_path(tmp_path):
    path = tmp_path / "products.json"
    product = Product(
        id=101,
        name="Wireless Mouse",
        quantity=50,
        code_value="WM-2023-A",
        is_published=True,
        expiration="10/10/2025",
        price=25.99,
    )
    path.write_text(json.dumps([product.to_dict()]), encoding="utf-8")
    return path


@mock.patch("productapi.main.make_server")
def test_main_serves_on_default_port(make_server, storage_path, capsys):
    assert main(["--storage", str(storage_path)]) == 0
    out = capsys.readouterr().out
    assert "Server is running on port 8080" in out
    args = make_server.call_args.args
    assert args[:2] == ("", 8080)
    assert isinstance(args[2], Application)
    make_server.return_value.__enter__.return_value.serve_forever.assert_called_once_with()


@mock.patch("productapi.main.make_server")
def test_main_port_option(make_server, storage_path, capsys):
    main(["--storage", str(storage_path), "--port", "9000"])
    assert "Server is running on port 9000" in capsys.readouterr().out
    assert make_server.call_args.args[1] == 9000


@mock.patch("productapi.main.make_server")
def test_main_application_answers_ping(make_server, storage_path):
    main(["--storage", str(storage_path)])
    application = make_server.call_args.args[2]
    response = application.handle(Request(method="GET", path="/ping"))
    assert response.body == b"Pong"


@mock.patch("productapi.main.make_server")
def test_main_missing_storage_raises(make_server, tmp_path):
    with pytest.raises(ApiError) as info:
        main(["--storage", str(tmp_path / "missing.json")])
    assert info.value.message == "error while manipulating file"
    assert make_server.call_count == 0


@mock.patch("productapi.main.make_server")
def test_main_stops_on_interrupt(make_server, storage_path):
    server = make_server.return_value.__enter__.return_value
    server.serve_forever.side_effect = KeyboardInterrupt
    assert main(["--storage", str(storage_path)]) == 0