"""Unit tests for HTTP client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.infrastructure.http_client import HTTPClient


class TestHTTPClientInit:
    """Tests for HTTPClient initialization."""

    @patch("app.infrastructure.http_client.httpx.AsyncClient")
    def test_init_default_values(self, mock_async_client):
        """Test initialization with default values."""
        HTTPClient()

        mock_async_client.assert_called_once()
        call_kwargs = mock_async_client.call_args[1]
        assert call_kwargs["follow_redirects"] is True
        assert call_kwargs["transport"] is None

    @patch("app.infrastructure.http_client.httpx.AsyncClient")
    def test_init_custom_transport(self, mock_async_client):
        """Test that a custom transport is passed through."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200))
        HTTPClient(timeout=60.0, transport=transport)

        assert mock_async_client.call_args[1]["transport"] is transport


class TestHTTPClientRequests:
    """Tests for HTTPClient request methods."""

    @pytest.fixture
    def mock_client(self):
        """Create HTTPClient with mocked internal client."""
        with patch("app.infrastructure.http_client.httpx.AsyncClient") as mock:
            mock_instance = MagicMock()
            mock_instance.get = AsyncMock()
            mock_instance.post = AsyncMock()
            mock_instance.aclose = AsyncMock()
            mock_instance.is_closed = False
            mock.return_value = mock_instance

            client = HTTPClient()
            yield client, mock_instance

    @pytest.mark.asyncio
    async def test_get_with_params(self, mock_client):
        """Test GET request with query parameters."""
        client, mock_instance = mock_client

        await client.get("https://example.com", params={"key": "value"})

        mock_instance.get.assert_called_once_with("https://example.com", params={"key": "value"})

    @pytest.mark.asyncio
    async def test_post_with_json(self, mock_client):
        """Test POST request with JSON body and headers."""
        client, mock_instance = mock_client

        await client.post(
            "https://example.com/api",
            json={"data": "test"},
            headers={"Authorization": "Bearer token"},
        )

        mock_instance.post.assert_called_once_with(
            "https://example.com/api",
            json={"data": "test"},
            headers={"Authorization": "Bearer token"},
        )

    @pytest.mark.asyncio
    async def test_close(self, mock_client):
        """Test closing the client."""
        client, mock_instance = mock_client

        await client.close()

        mock_instance.aclose.assert_called_once()

    @pytest.mark.asyncio
    async def test_close_already_closed(self, mock_client):
        """Closing twice does not call aclose again."""
        client, mock_instance = mock_client
        mock_instance.is_closed = True

        await client.close()

        mock_instance.aclose.assert_not_called()


class TestHTTPClientMockTransport:
    """Tests using a real AsyncClient over httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_round_trip(self):
        """Requests reach the transport and responses come back."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        client = HTTPClient(transport=httpx.MockTransport(handler))
        response = await client.post("https://example.com/x", json={"a": 1})
        await client.close()

        assert response.json() == {"ok": True}
        assert seen[0].method == "POST"
        assert client.is_closed
