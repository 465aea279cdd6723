"""Command that serves the product API over HTTP."""

from __future__ import annotations

import argparse
from wsgiref.simple_server import make_server

from productapi.router import Router
from productapi.storage import JsonStorage

DEFAULT_PORT = 8080
DEFAULT_STORAGE_PATH = "products.json"


def main(argv: list[str] | None = None) -> int:
    """Load the catalogue and serve the API until interrupted."""
    parser = argparse.ArgumentParser(prog="productapi", description="Serve the product API.")
    parser.add_argument("--host", default="", help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    parser.add_argument(
        "--storage", default=DEFAULT_STORAGE_PATH, help="JSON file holding the products"
    )
    args = parser.parse_args(argv)

    application = Router(JsonStorage(args.storage)).map_routes()

    print(f"Server is running on port {args.port}")
    with make_server(args.host, args.port, application) as server:
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
    return 0