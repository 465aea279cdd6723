"""In-memory product repository backed by a Storage."""

from __future__ import annotations

import contextlib
import dataclasses
from abc import ABC, abstractmethod
from typing import Iterable

from productapi.domain import PartialProduct, Product
from productapi.errors import ERR_ENTITY_NOT_FOUND, ERR_PRODUCT_CODE_ALREADY_EXISTS, ApiError
from productapi.storage import Storage


class ProductRepository(ABC):
    """Operations on the product catalogue."""

    @abstractmethod
    def get_all_products(self) -> list[Product]:
        """Every product."""

    @abstractmethod
    def get_product_by_id(self, product_id: int) -> Product | None:
        """The product with this id, or None."""

    @abstractmethod
    def filter_by_price(self, min_price: float) -> list[Product]:
        """Products priced strictly above ``min_price``."""

    @abstractmethod
    def add_product(self, product: Product) -> int:
        """Store a new product and return its id."""

    @abstractmethod
    def update_product(self, product: Product) -> Product:
        """Replace an existing product."""

    @abstractmethod
    def partial_update_product(self, product_id: int, partial: PartialProduct) -> Product:
        """Change the given fields of an existing product."""

    @abstractmethod
    def delete_product(self, product_id: int) -> None:
        """Remove a product."""


def _not_found(product_id: int) -> ApiError:
    return ERR_ENTITY_NOT_FOUND.format("product", str(product_id))


class JsonProductRepository(ProductRepository):
    """Products held in memory and written through to a storage on change."""

    def __init__(self, storage: Storage, products: Iterable[Product]) -> None:
        self._storage = storage
        self._products: dict[int, Product] = {}
        self._last_id = 0
        self._code_values: set[str] = set()
        for product in products:
            self._last_id = max(self._last_id, product.id)
            self._products[product.id] = dataclasses.replace(product)
            self._code_values.add(product.code_value)

    def get_all_products(self) -> list[Product]:
        return [dataclasses.replace(product) for product in self._products.values()]

    def get_product_by_id(self, product_id: int) -> Product | None:
        product = self._products.get(product_id)
        return None if product is None else dataclasses.replace(product)

    def filter_by_price(self, min_price: float) -> list[Product]:
        return [
            dataclasses.replace(product)
            for product in self._products.values()
            if product.price > min_price
        ]

    def add_product(self, product: Product) -> int:
        self._check_code_value(product.code_value)
        stored = dataclasses.replace(product, id=self._last_id + 1)
        self._products[stored.id] = stored
        self._code_values.add(stored.code_value)
        self._last_id = stored.id
        self._storage.save(self._products)
        return stored.id

    def update_product(self, product: Product) -> Product:
        existing = self._products.get(product.id)
        if existing is None:
            raise _not_found(product.id)
        if existing.code_value != product.code_value:
            self._check_code_value(product.code_value)
            self._code_values.discard(existing.code_value)
            self._code_values.add(product.code_value)
        self._products[product.id] = dataclasses.replace(product)
        self._storage.save(self._products)
        return dataclasses.replace(self._products[product.id])

    def partial_update_product(self, product_id: int, partial: PartialProduct) -> Product:
        existing = self.get_product_by_id(product_id)
        if existing is None:
            raise _not_found(product_id)
        if partial.code_value:
            existing.code_value = partial.code_value
        if partial.expiration:
            existing.expiration = partial.expiration
        if partial.is_published is not None:
            existing.is_published = partial.is_published
        if partial.name:
            existing.name = partial.name
        if partial.price is not None:
            existing.price = partial.price
        if partial.quantity is not None:
            existing.quantity = partial.quantity
        # A rejected change leaves the stored product as it was.
        with contextlib.suppress(ApiError):
            self.update_product(existing)
        self._storage.save(self._products)
        return dataclasses.replace(self._products[product_id])

    def delete_product(self, product_id: int) -> None:
        if product_id not in self._products:
            raise _not_found(product_id)
        del self._products[product_id]
        self._storage.save(self._products)

    def _check_code_value(self, code_value: str) -> None:
        if code_value in self._code_values:
            raise ERR_PRODUCT_CODE_ALREADY_EXISTS.format()