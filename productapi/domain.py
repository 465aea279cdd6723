"""Product entities and the request bodies used to create and change them."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from productapi.errors import ERR_VALIDATION, ApiError

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_DATE_PATTERN = re.compile(r"\d{2}/(0[1-9]|1[0-2])/\d{4}", re.ASCII)


def _decode_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r}: expected an integer, got {value!r}")
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"field {key!r}: integer {value} out of range")
    return value


def _decode_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r}: expected a number, got {value!r}")
    return float(value)


def _decode_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"field {key!r}: expected a string, got {value!r}")
    return value


def _decode_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r}: expected a boolean, got {value!r}")
    return value


_Field = tuple[str, Callable[[Any, str], Any], bool]


def _decode_object(data: Any, fields: Iterable[_Field]) -> dict[str, Any]:
    """Decode a JSON object into keyword arguments.

    Keys match field names case-insensitively, unknown keys are ignored and a
    later duplicate key overrides an earlier one. ``null`` clears nullable
    fields and leaves the others untouched.
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    by_folded = {name.casefold(): (name, decode, nullable) for name, decode, nullable in fields}
    values: dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(key, str):
            continue
        spec = by_folded.get(key.casefold())
        if spec is None:
            continue
        name, decode, nullable = spec
        if value is None:
            if nullable:
                values[name] = None
            continue
        values[name] = decode(value, name)
    return values


def _json_number(value: float) -> int | float:
    """Render integral floats as integers, as a JSON encoder of float64 does."""
    if value == value and value not in (float("inf"), float("-inf")) and value.is_integer():
        return int(value)
    return value


@dataclass
class Product:
    """A stored product."""

    id: int = 0
    name: str = ""
    quantity: int = 0
    code_value: str = ""
    is_published: bool = False
    expiration: str = ""
    price: float = 0.0

    def is_zero(self) -> bool:
        """True when every field holds its empty value."""
        return (
            self.id == 0
            and self.name == ""
            and self.quantity == 0
            and self.code_value == ""
            and self.is_published is False
            and self.expiration == ""
            and self.price == 0.0
        )

    def to_dict(self) -> dict[str, Any]:
        """The product as a JSON-ready mapping."""
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "code_value": self.code_value,
            "is_published": self.is_published,
            "expiration": self.expiration,
            "price": _json_number(self.price),
        }

    @classmethod
    def from_dict(cls, data: Any) -> Product:
        """Build a product from a decoded JSON object."""
        return cls(**_decode_object(data, _PRODUCT_FIELDS))


_PRODUCT_FIELDS: tuple[_Field, ...] = (
    ("id", _decode_int, False),
    ("name", _decode_str, False),
    ("quantity", _decode_int, False),
    ("code_value", _decode_str, False),
    ("is_published", _decode_bool, False),
    ("expiration", _decode_str, False),
    ("price", _decode_float, False),
)


def _should_be_informed(field: str) -> ApiError:
    return ERR_VALIDATION.format(f"{field} should be informed")


@dataclass
class PostOrPutRequest:
    """The body of a request that creates or replaces a product."""

    name: str = ""
    quantity: int = 0
    code_value: str = ""
    is_published: bool = False
    expiration: str = ""
    price: float = 0.0

    def validate(self) -> None:
        """Raise an ApiError describing the first invalid field."""
        if self.name == "":
            raise _should_be_informed("name")
        if self.quantity == 0:
            raise _should_be_informed("quantity")
        if self.code_value == "":
            raise _should_be_informed("code_value")
        if self.expiration == "":
            raise _should_be_informed("expiration")
        if _DATE_PATTERN.fullmatch(self.expiration) is None:
            raise ERR_VALIDATION.format("expiration should have the patter dd/mm/aaaa")
        if self.price == 0.0:
            raise _should_be_informed("price")

    def to_product(self) -> Product:
        """A product with these values and no id."""
        return Product(
            name=self.name,
            quantity=self.quantity,
            code_value=self.code_value,
            is_published=self.is_published,
            expiration=self.expiration,
            price=self.price,
        )

    @classmethod
    def from_dict(cls, data: Any) -> PostOrPutRequest:
        """Build a request from a decoded JSON object."""
        return cls(**_decode_object(data, _REQUEST_FIELDS))


_REQUEST_FIELDS: tuple[_Field, ...] = tuple(f for f in _PRODUCT_FIELDS if f[0] != "id")


@dataclass
class PartialProduct:
    """Fields of a partial update; empty strings and None mean unchanged."""

    name: str = ""
    quantity: int | None = None
    code_value: str = ""
    is_published: bool | None = None
    expiration: str = ""
    price: float | None = None

    @classmethod
    def from_dict(cls, data: Any) -> PartialProduct:
        """Build a partial update from a decoded JSON object."""
        return cls(**_decode_object(data, _PARTIAL_FIELDS))


_PARTIAL_FIELDS: tuple[_Field, ...] = (
    ("name", _decode_str, False),
    ("quantity", _decode_int, True),
    ("code_value", _decode_str, False),
    ("is_published", _decode_bool, True),
    ("expiration", _decode_str, False),
    ("price", _decode_float, True),
)


@dataclass
class PostResponse:
    """The reply to a successful creation."""

    id: int

    def to_dict(self) -> dict[str, Any]:
        """The response as a JSON-ready mapping."""
        return {"id": self.id}