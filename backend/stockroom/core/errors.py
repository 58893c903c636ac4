"""Typed failures raised by the service layer."""

from __future__ import annotations

from fastapi import status


class ApiError(Exception):
    """Failure carrying an HTTP-like status code for the controller layer."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.status_code}, {self.message!r})"


class NotFoundError(ApiError):
    """Raised when an operation targets a product id that does not exist."""

    def __init__(self, message: str = "Product not found") -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, message)
