import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .models import Book

logger = logging.getLogger("library_client.gateway")

UNKNOWN_ERROR = "Unknown error occurred"
UNREACHABLE = "Unable to reach the library server"


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BookApiClient:
    """Blocking client for the ``/api/books`` endpoints.

    Every call either returns the decoded result or raises :class:`ApiError`
    carrying a message fit to show the user.
    """

    def __init__(self, base_url: str, timeout: float = 5.0, transport: Optional[httpx.BaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def list_books(self) -> list[Book]:
        response = self._send("GET", self.base_url, expected=200)
        payload = self._json(response)
        if not isinstance(payload, list):
            raise ApiError(UNKNOWN_ERROR, status_code=response.status_code)
        return [self._book(item, response) for item in payload]

    def get_book(self, book_id: int) -> Book:
        response = self._send("GET", f"{self.base_url}/{book_id}", expected=200)
        return self._book(self._json(response), response)

    def create_book(self, book: Book) -> Book:
        response = self._send("POST", self.base_url, expected=201, payload=book.to_payload())
        return self._book(self._json(response), response)

    def update_book(self, book_id: int, book: Book) -> Book:
        response = self._send("PUT", f"{self.base_url}/{book_id}", expected=200, payload=book.to_payload())
        return self._book(self._json(response), response)

    def delete_book(self, book_id: int) -> None:
        self._send("DELETE", f"{self.base_url}/{book_id}", expected=204)

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _send(self, method: str, url: str, expected: int, payload: Optional[dict] = None) -> httpx.Response:
        try:
            response = self._client.request(method, url, json=payload)
        except httpx.RequestError as exc:
            logger.warning("api.transport_error", extra={"method": method, "url": url, "error": str(exc)})
            raise ApiError(UNREACHABLE) from exc

        if response.status_code != expected:
            message = self._error_message(response)
            logger.info("api.error", extra={"method": method, "url": url, "status": response.status_code})
            raise ApiError(message, status_code=response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(UNKNOWN_ERROR, status_code=response.status_code) from exc

    @staticmethod
    def _book(item: Any, response: httpx.Response) -> Book:
        try:
            return Book.model_validate(item)
        except ValidationError as exc:
            raise ApiError(UNKNOWN_ERROR, status_code=response.status_code) from exc

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return UNKNOWN_ERROR
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]
        return UNKNOWN_ERROR
