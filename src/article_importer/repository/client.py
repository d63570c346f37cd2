"""HTTP client for the journal REST API."""

import logging
from abc import ABC, abstractmethod
from time import sleep
from typing import Any

import httpx

from .exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "article-importer/0.1"

# Statuses the journal's proxy returns while the application restarts.
RETRY_STATUSES = {429, 502, 503, 504}


def error_detail(response: httpx.Response) -> tuple[str, list[str]]:
    """Extract the message and field errors from an API error body.

    The API answers errors with ``{"error": ..., "errorMessage": ...}`` or,
    for rejected records, a mapping of field names to message lists.

    Examples:
        >>> detail = httpx.Response(400, json={"title": ["Required"]})
        >>> error_detail(detail)
        ('', ['title: Required'])
    """
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()[:200], []
    if not isinstance(body, dict):
        return "", []
    message = body.get("errorMessage") or body.get("error") or ""
    errors = []
    for field, messages in body.items():
        if field in ("error", "errorMessage"):
            continue
        if isinstance(messages, str):
            messages = [messages]
        if isinstance(messages, list):
            errors.extend(f"{field}: {text}" for text in messages)
    return str(message), errors


class Client(ABC):
    """Base class for clients of the journal REST API.

    The httpx client is created on first use and closed by ``close()`` or
    on leaving a ``with`` block.

    Config keys:
        base_url (required): API root, e.g. ``https://journal.example.org/api``
        token: API token sent as a bearer token
        timeout: Request timeout in seconds (default: 30)
        retry_attempts: Attempts for connection failures and busy
            responses (default: 3)
        retry_delay: Delay between attempts in seconds when the server
            gives no Retry-After (default: 1)
        headers: Extra headers; they override the defaults
        transport: httpx transport, e.g. ``httpx.MockTransport``
    """

    def __init__(self, config: dict):
        if "base_url" not in config:
            raise ValueError("config must include 'base_url'")

        self._config = config
        self._client: httpx.Client | None = None

    @property
    def base_url(self) -> str:
        return str(self._config["base_url"]).rstrip("/")

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout", 30))

    @property
    def retry_attempts(self) -> int:
        return max(1, int(self._config.get("retry_attempts", 3)))

    @property
    def retry_delay(self) -> float:
        return float(self._config.get("retry_delay", 1))

    @property
    def headers(self) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if self._config.get("token"):
            headers["Authorization"] = f"Bearer {self._config['token']}"
        headers.update(self._config.get("headers", {}))
        return headers

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                transport=self._config.get("transport"),
            )
        return self._client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _raise_for_status(self, response: httpx.Response) -> httpx.Response:
        """Map an API error response to a repository exception.

        Raises:
            NotFoundError: For 404 responses
            RateLimitError: For 429 responses
            ValidationError: For 400 and 422 responses naming rejected fields
            APIError: For other non-2xx responses
        """
        if response.is_success:
            return response

        status_code = response.status_code
        request = response.request
        where = f"{request.method} {request.url.path}"
        message, errors = error_detail(response)

        if status_code == 404:
            raise NotFoundError(f"Not found: {where}")
        if status_code == 429:
            raise RateLimitError(f"Rate limit exceeded: {where}")
        if status_code in (400, 422) and errors:
            raise ValidationError(f"{where} rejected: {'; '.join(errors)}", errors=errors)
        text = f"API error {status_code} for {where}"
        raise APIError(f"{text}: {message}" if message else text, status_code=status_code)

    def _wait(self, response: httpx.Response | None) -> float:
        """Seconds to wait before the next attempt."""
        if response is not None:
            retry_after = response.headers.get("Retry-After", "")
            if retry_after.isdigit():
                return float(retry_after)
        return self.retry_delay

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request, retrying connection failures and busy responses.

        Raises:
            ConnectionError: If every attempt fails to reach the server
            RepositoryError: If the API answers with an error status
        """
        last_exception: Exception | None = None

        for attempt in range(1, self.retry_attempts + 1):
            response = None
            try:
                response = self.client.request(method, path, **kwargs)
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                logger.warning(
                    f"{method} {path} failed (attempt {attempt}/{self.retry_attempts}): {e}"
                )
            else:
                if response.status_code not in RETRY_STATUSES or attempt == self.retry_attempts:
                    return self._raise_for_status(response)
                logger.warning(
                    f"{method} {path} answered {response.status_code} "
                    f"(attempt {attempt}/{self.retry_attempts})"
                )
            if attempt < self.retry_attempts:
                sleep(self._wait(response))

        msg = f"Connection failed after {self.retry_attempts} attempts"
        raise ConnectionError(msg) from last_exception

    def get(self, path: str, **kwargs) -> httpx.Response:
        return self._request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> httpx.Response:
        return self._request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> httpx.Response:
        return self._request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> httpx.Response:
        return self._request("DELETE", path, **kwargs)

    @abstractmethod
    def fetch(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Return the decoded JSON body of a GET request."""
