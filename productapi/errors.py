"""API errors that carry an HTTP status alongside their message."""

from __future__ import annotations

from http import HTTPStatus


class ApiError(Exception):
    """An error with a message template and the HTTP status it maps to."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)

    @property
    def status(self) -> str:
        """The status code as text."""
        return str(self.status_code)

    def format(self, *args: object) -> ApiError:
        """Return a new error whose message is the template filled with ``args``."""
        message = self.message % args if args else self.message
        return ApiError(message, self.status_code)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"ApiError(message={self.message!r}, status_code={self.status_code})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApiError):
            return NotImplemented
        return (self.message, self.status_code) == (other.message, other.status_code)

    def __hash__(self) -> int:
        return hash((self.message, self.status_code))


ERR_ENTITY_NOT_FOUND = ApiError("resource %s of id %s not found", HTTPStatus.NOT_FOUND)
ERR_DECODING = ApiError("error decoding %s", HTTPStatus.BAD_REQUEST)
ERR_ENCODING = ApiError("error encoding %s", HTTPStatus.BAD_REQUEST)
ERR_FILE = ApiError("error while manipulating file", HTTPStatus.BAD_REQUEST)
ERR_PRODUCT_CODE_ALREADY_EXISTS = ApiError("error code already exists", HTTPStatus.CONFLICT)
ERR_VALIDATION = ApiError("%s", HTTPStatus.BAD_REQUEST)