"""HTTP client for the phonebook REST API."""

import logging
import os

import httpx

from phonebook.application import ContactData
from phonebook.domain import Contact

logger = logging.getLogger(__name__)

BASE_PATH = "/api/persons"
INFO_PATH = "/api/info"
DEFAULT_API_URL = "http://localhost:3001"


def get_api_url() -> str:
    return os.environ.get("PHONEBOOK_API_URL", DEFAULT_API_URL).strip() or DEFAULT_API_URL


class ApiError(Exception):
    """The API answered with a non-success status. message is the server's error text."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _contact_from_json(data: dict) -> Contact:
    return Contact(id=data["id"], name=data["name"], number=data["number"])


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text or response.reason_phrase or f"HTTP {response.status_code}"


class PhonebookApi:
    """Thin wrapper over the five person endpoints and /api/info.

    Pass client to reuse an existing httpx.Client (e.g. FastAPI's TestClient).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(base_url=base_url or get_api_url(), timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "PhonebookApi":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _check(self, response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response
        message = _error_message(response)
        logger.warning(
            "%s %s -> %s: %s",
            response.request.method,
            response.request.url.path,
            response.status_code,
            message,
        )
        raise ApiError(message, status_code=response.status_code)

    def get_all(self) -> list[Contact]:
        response = self._check(self._client.get(BASE_PATH))
        return [_contact_from_json(item) for item in response.json()]

    def get(self, contact_id: str) -> Contact | None:
        """Return the contact, or None when the server answers 204 (absent)."""
        response = self._check(self._client.get(f"{BASE_PATH}/{contact_id}"))
        if response.status_code == 204 or not response.content:
            return None
        return _contact_from_json(response.json())

    def create(self, data: ContactData) -> Contact:
        response = self._check(self._client.post(BASE_PATH, json=data.to_json()))
        return _contact_from_json(response.json())

    def update(self, contact_id: str, data: ContactData) -> Contact:
        response = self._check(
            self._client.put(f"{BASE_PATH}/{contact_id}", json=data.to_json())
        )
        return _contact_from_json(response.json())

    def delete_person(self, contact_id: str) -> None:
        self._check(self._client.delete(f"{BASE_PATH}/{contact_id}"))

    def info(self) -> str:
        return self._check(self._client.get(INFO_PATH)).text
