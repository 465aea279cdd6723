"""HTTP handlers for the product resource."""

from __future__ import annotations

import json
import math
import re
from http import HTTPStatus
from typing import Any, Callable, TypeVar

from productapi.domain import PartialProduct, PostOrPutRequest, PostResponse
from productapi.errors import ERR_ENTITY_NOT_FOUND, ApiError
from productapi.repository import ProductRepository
from productapi.web import Request, Response, error_response, json_response

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.ASCII | re.IGNORECASE,
)

T = TypeVar("T")


def _parse_int64(text: str) -> int:
    if _INT_RE.fullmatch(text) is None:
        raise ValueError(f"invalid integer {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"integer {text!r} out of range")
    return value


def _parse_float(text: str) -> float:
    if _FLOAT_RE.fullmatch(text) is None:
        raise ValueError(f"invalid number {text!r}")
    value = float(text)
    if math.isinf(value) and text.lstrip("+-").lower() not in ("inf", "infinity"):
        raise ValueError(f"number {text!r} out of range")
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON value {name}")


_DECODER = json.JSONDecoder(parse_constant=_reject_constant)


def _decode_body(body: bytes, factory: Callable[[Any], T], empty: Callable[[], T]) -> T:
    """Decode the first JSON value of ``body``; null yields an empty value."""
    text = body.decode("utf-8", errors="replace").lstrip(" \t\r\n")
    if not text:
        raise ValueError("empty body")
    data, _ = _DECODER.raw_decode(text)
    return empty() if data is None else factory(data)


def _path_id(request: Request) -> int:
    return _parse_int64(request.path_params.get("id", ""))


def _api_error_response(error: ApiError) -> Response:
    return error_response(str(error), error.status_code)


class ProductHandler:
    """Turns requests on /products into repository calls."""

    def __init__(self, repository: ProductRepository) -> None:
        self._repository = repository

    def get_all_products(self, request: Request) -> Response:
        products = self._repository.get_all_products()
        return json_response([p.to_dict() for p in products] or None, HTTPStatus.OK)

    def get_product_by_id(self, request: Request) -> Response:
        id_param = request.path_params.get("id", "")
        try:
            product_id = _parse_int64(id_param)
        except ValueError:
            return error_response("error parsing url param", HTTPStatus.BAD_REQUEST)
        product = self._repository.get_product_by_id(product_id)
        if product is None:
            return _api_error_response(ERR_ENTITY_NOT_FOUND.format("product", id_param))
        return json_response(product.to_dict(), HTTPStatus.OK)

    def get_products_by_filter_price(self, request: Request) -> Response:
        min_price_query = request.query("priceGt")
        if min_price_query == "":
            return error_response("priceGt query parameter is required", HTTPStatus.BAD_REQUEST)
        try:
            min_price = _parse_float(min_price_query)
        except ValueError:
            return error_response("Invalid priceGt value", HTTPStatus.BAD_REQUEST)
        products = self._repository.filter_by_price(min_price)
        if not products:
            return error_response(
                "No products found with the specified minimum price", HTTPStatus.NOT_FOUND
            )
        return json_response([p.to_dict() for p in products], HTTPStatus.OK)

    def post_product(self, request: Request) -> Response:
        try:
            body = _decode_body(request.body, PostOrPutRequest.from_dict, PostOrPutRequest)
        except ValueError:
            return error_response("error processing the body", HTTPStatus.UNPROCESSABLE_ENTITY)
        try:
            body.validate()
        except ApiError as exc:
            return error_response(str(exc), HTTPStatus.BAD_REQUEST)
        try:
            new_id = self._repository.add_product(body.to_product())
        except ApiError as exc:
            return _api_error_response(exc)
        return json_response(PostResponse(id=new_id).to_dict(), HTTPStatus.CREATED)

    def put_product(self, request: Request) -> Response:
        try:
            product_id = _path_id(request)
        except ValueError:
            return error_response("error parsing url param", HTTPStatus.BAD_REQUEST)
        try:
            body = _decode_body(request.body, PostOrPutRequest.from_dict, PostOrPutRequest)
        except ValueError:
            return error_response("error parsing body", HTTPStatus.UNPROCESSABLE_ENTITY)
        product = body.to_product()
        product.id = product_id
        try:
            updated = self._repository.update_product(product)
        except ApiError as exc:
            return _api_error_response(exc)
        return json_response(updated.to_dict(), HTTPStatus.OK)

    def patch_product(self, request: Request) -> Response:
        try:
            product_id = _path_id(request)
        except ValueError:
            return error_response("error parsing url param", HTTPStatus.BAD_REQUEST)
        try:
            partial = _decode_body(request.body, PartialProduct.from_dict, PartialProduct)
        except ValueError:
            return error_response("error parsing body", HTTPStatus.UNPROCESSABLE_ENTITY)
        try:
            product = self._repository.partial_update_product(product_id, partial)
        except ApiError as exc:
            return _api_error_response(exc)
        return json_response(product.to_dict(), HTTPStatus.OK)

    def delete_product(self, request: Request) -> Response:
        try:
            product_id = _path_id(request)
        except ValueError:
            return error_response("error parsing url param", HTTPStatus.BAD_REQUEST)
        try:
            self._repository.delete_product(product_id)
        except ApiError as exc:
            return _api_error_response(exc)
        return Response(status=HTTPStatus.NO_CONTENT, headers={"Content-Type": "application/json"})