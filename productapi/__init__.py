"""Product catalogue HTTP API served as a WSGI application, backed by a JSON file."""

__version__ = "0.1.0"