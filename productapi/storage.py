"""Persistence of the product catalogue."""

from __future__ import annotations

import contextlib
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping

from productapi.domain import Product
from productapi.errors import ERR_DECODING, ERR_ENCODING, ERR_FILE


class Storage(ABC):
    """Somewhere the full list of products can be loaded from and saved to."""

    @abstractmethod
    def get(self) -> list[Product]:
        """Load every stored product."""

    @abstractmethod
    def save(self, products: Mapping[int, Product]) -> None:
        """Replace the stored products with ``products``."""


class JsonStorage(Storage):
    """Products kept as a JSON array in a single file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def get(self) -> list[Product]:
        """Read the file; raise ApiError when it cannot be read or decoded."""
        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise ERR_FILE.format() from exc
        try:
            data = json.loads(raw)
            if data is None:
                return []
            if not isinstance(data, list):
                raise ValueError("expected a JSON array")
            return [Product() if item is None else Product.from_dict(item) for item in data]
        except ValueError as exc:
            raise ERR_DECODING.format("products") from exc

    def save(self, products: Mapping[int, Product]) -> None:
        """Write every product to the file as a compact JSON array."""
        payload = [product.to_dict() for product in products.values()] or None
        try:
            text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        except ValueError as exc:
            raise ERR_ENCODING.format("json string") from exc
        # A failed write is deliberately not reported to the caller.
        with contextlib.suppress(OSError):
            self.path.write_text(text, encoding="utf-8")