"""Tests for the base Client class."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from article_importer.repository import (
    APIError,
    Client,
    ConnectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from article_importer.repository.client import error_detail

BASE_URL = "https://journal.example.org/api"


class ConcreteClient(Client):
    """Concrete implementation of Client for testing."""

    def fetch(self, path, params=None):
        return self.get(path, params=params).json()


def make_response(status_code, **kwargs):
    return httpx.Response(
        status_code, request=httpx.Request("GET", f"{BASE_URL}/issues/7"), **kwargs
    )


def scripted_client(*responses, **config):
    """Client whose transport answers with the given responses in turn."""
    calls = []
    pending = list(responses)

    def handler(request):
        calls.append(request)
        return pending.pop(0)

    client = ConcreteClient(
        {"base_url": BASE_URL, "transport": httpx.MockTransport(handler), **config}
    )
    return client, calls


class TestClientConfiguration:
    """Tests for Client configuration."""

    def test_requires_base_url(self):
        """Client raises ValueError if base_url is missing."""
        with pytest.raises(ValueError, match="base_url"):
            ConcreteClient({})

    def test_base_url_trailing_slash_dropped(self):
        client = ConcreteClient({"base_url": f"{BASE_URL}/"})

        assert client.base_url == BASE_URL

    def test_defaults(self):
        """Timeout, attempts and delay have defaults."""
        client = ConcreteClient({"base_url": BASE_URL})

        assert client.timeout == 30
        assert client.retry_attempts == 3
        assert client.retry_delay == 1

    def test_custom_values(self):
        client = ConcreteClient(
            {"base_url": BASE_URL, "timeout": 60, "retry_attempts": 5, "retry_delay": 0.5}
        )

        assert client.timeout == 60
        assert client.retry_attempts == 5
        assert client.retry_delay == 0.5

    def test_at_least_one_attempt(self):
        client = ConcreteClient({"base_url": BASE_URL, "retry_attempts": 0})

        assert client.retry_attempts == 1

    def test_default_headers(self):
        """Requests identify the importer and ask for JSON."""
        client = ConcreteClient({"base_url": BASE_URL})

        assert client.headers == {
            "User-Agent": "article-importer/0.1",
            "Accept": "application/json",
        }

    def test_token_becomes_bearer_header(self):
        client = ConcreteClient({"base_url": BASE_URL, "token": "secret"})

        assert client.headers["Authorization"] == "Bearer secret"

    def test_custom_headers_override_defaults(self):
        client = ConcreteClient(
            {"base_url": BASE_URL, "headers": {"User-Agent": "custom", "X-Journal": "jt"}}
        )

        assert client.headers["User-Agent"] == "custom"
        assert client.headers["X-Journal"] == "jt"


class TestClientLifecycle:
    """Tests for Client lifecycle management."""

    def test_lazy_client_initialization(self):
        """httpx.Client is not created until accessed."""
        client = ConcreteClient({"base_url": BASE_URL})

        assert client._client is None

    def test_client_initialized_on_access(self):
        client = ConcreteClient({"base_url": BASE_URL, "token": "secret"})

        http_client = client.client

        assert isinstance(http_client, httpx.Client)
        assert http_client.headers["Authorization"] == "Bearer secret"
        client.close()

    def test_context_manager_closes_client(self):
        """Context manager closes the httpx client on exit."""
        with ConcreteClient({"base_url": BASE_URL}) as client:
            _ = client.client
            assert client._client is not None

        assert client._client is None

    def test_close_when_not_initialized(self):
        client = ConcreteClient({"base_url": BASE_URL})
        client.close()

        assert client._client is None


class TestErrorDetail:
    """Tests for reading API error bodies."""

    def test_error_message(self):
        response = make_response(403, json={"error": "api.403", "errorMessage": "Forbidden"})

        assert error_detail(response) == ("Forbidden", [])

    def test_field_errors(self):
        response = make_response(
            400, json={"title": ["Required", "Too short"], "locale": "Unsupported"}
        )

        assert error_detail(response) == (
            "",
            ["title: Required", "title: Too short", "locale: Unsupported"],
        )

    def test_non_json_body(self):
        response = make_response(502, text="<html>Bad gateway</html>")

        assert error_detail(response) == ("<html>Bad gateway</html>", [])

    def test_list_body(self):
        assert error_detail(make_response(500, json=[1, 2])) == ("", [])


class TestClientErrorHandling:
    """Tests for mapping error statuses to exceptions."""

    def test_404_raises_not_found_error(self):
        client = ConcreteClient({"base_url": BASE_URL})

        with pytest.raises(NotFoundError) as exc_info:
            client._raise_for_status(make_response(404))

        assert exc_info.value.status_code == 404
        assert "GET /api/issues/7" in exc_info.value.message

    def test_429_raises_rate_limit_error(self):
        client = ConcreteClient({"base_url": BASE_URL})

        with pytest.raises(RateLimitError) as exc_info:
            client._raise_for_status(make_response(429))

        assert exc_info.value.status_code == 429

    def test_field_errors_raise_validation_error(self):
        """Rejected records list the offending fields."""
        client = ConcreteClient({"base_url": BASE_URL})

        with pytest.raises(ValidationError) as exc_info:
            client._raise_for_status(make_response(422, json={"volume": ["Must be a number"]}))

        assert exc_info.value.errors == ["volume: Must be a number"]

    def test_400_without_fields_raises_api_error(self):
        client = ConcreteClient({"base_url": BASE_URL})

        with pytest.raises(APIError) as exc_info:
            client._raise_for_status(make_response(400, json={"errorMessage": "Bad locale"}))

        assert exc_info.value.status_code == 400
        assert exc_info.value.message.endswith(": Bad locale")

    def test_500_raises_api_error(self):
        client = ConcreteClient({"base_url": BASE_URL})

        with pytest.raises(APIError) as exc_info:
            client._raise_for_status(make_response(500))

        assert exc_info.value.status_code == 500

    def test_success_returns_response(self):
        client = ConcreteClient({"base_url": BASE_URL})
        response = make_response(200, json={})

        assert client._raise_for_status(response) is response


class TestClientRetryLogic:
    """Tests for Client retry behavior."""

    @patch("article_importer.repository.client.sleep")
    def test_retries_on_connection_error(self, mock_sleep):
        """Client retries on connection errors."""
        client = ConcreteClient({"base_url": BASE_URL, "retry_attempts": 3, "retry_delay": 0.1})
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = httpx.ConnectError("Connection refused")
        client._client = mock_http_client

        with pytest.raises(ConnectionError) as exc_info:
            client.get("/test")

        assert "Connection failed after 3 attempts" in str(exc_info.value)
        assert mock_http_client.request.call_count == 3
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(0.1)

    @patch("article_importer.repository.client.sleep")
    def test_retries_on_timeout(self, mock_sleep):
        client = ConcreteClient({"base_url": BASE_URL, "retry_attempts": 2})
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = httpx.TimeoutException("Request timed out")
        client._client = mock_http_client

        with pytest.raises(ConnectionError):
            client.get("/test")

        assert mock_http_client.request.call_count == 2

    @patch("article_importer.repository.client.sleep")
    def test_succeeds_after_connection_retry(self, mock_sleep):
        client = ConcreteClient({"base_url": BASE_URL, "retry_attempts": 3})
        success_response = make_response(200, json={})
        mock_http_client = MagicMock()
        mock_http_client.request.side_effect = [
            httpx.ConnectError("Connection refused"),
            success_response,
        ]
        client._client = mock_http_client

        assert client.get("/test") is success_response
        assert mock_http_client.request.call_count == 2

    @patch("article_importer.repository.client.sleep")
    def test_busy_response_retried_after_retry_after(self, mock_sleep):
        """A 503 is retried after the delay the server asks for."""
        client, calls = scripted_client(
            httpx.Response(503, headers={"Retry-After": "4"}),
            httpx.Response(200, json={"id": 1}),
        )

        assert client.get("/issues/1").json() == {"id": 1}
        assert len(calls) == 2
        mock_sleep.assert_called_once_with(4.0)
        client.close()

    @patch("article_importer.repository.client.sleep")
    def test_rate_limit_raised_when_attempts_run_out(self, mock_sleep):
        client, calls = scripted_client(
            httpx.Response(429), httpx.Response(429), retry_attempts=2, retry_delay=0.5
        )

        with pytest.raises(RateLimitError):
            client.get("/issues/1")

        assert len(calls) == 2
        mock_sleep.assert_called_once_with(0.5)
        client.close()

    @patch("article_importer.repository.client.sleep")
    def test_no_retry_on_api_error(self, mock_sleep):
        """Client errors are not transient."""
        client, calls = scripted_client(httpx.Response(400), httpx.Response(200))

        with pytest.raises(APIError):
            client.get("/test")

        assert len(calls) == 1
        mock_sleep.assert_not_called()
        client.close()


class TestClientAbstractMethods:
    def test_fetch_must_be_implemented(self):
        """Subclasses must implement fetch method."""

        class IncompleteClient(Client):
            pass

        with pytest.raises(TypeError, match="fetch"):
            IncompleteClient({"base_url": BASE_URL})


class TestClientVerbs:
    """Tests for the HTTP verb helpers."""

    def test_verbs_use_matching_methods(self):
        """get, post, put and delete send the matching HTTP method."""
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json={})

        client = ConcreteClient({"base_url": BASE_URL, "transport": httpx.MockTransport(handler)})

        client.get("/a")
        client.post("/b")
        client.put("/c")
        client.delete("/d")

        assert seen == [
            ("GET", "/api/a"),
            ("POST", "/api/b"),
            ("PUT", "/api/c"),
            ("DELETE", "/api/d"),
        ]
        client.close()
