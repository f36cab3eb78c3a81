"""Tests for the base HTTP client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from aiohttp import ClientConnectionError

from src.core.exceptions.errors import ExternalServiceError
from src.layers.l1_intelligence.threat_intel.core.base_client import BaseClient


def make_response(status: int = 200, body=None, content_type: str = "application/json"):
    """Create a fake aiohttp response."""
    response = MagicMock()
    response.status = status
    response.reason = "Reason"
    response.url = "https://api.test/path"
    response.headers = {"Content-Type": content_type}
    response.text = AsyncMock(return_value=str(body))
    response.json = AsyncMock(return_value=body)
    return response


def make_session(*outcomes):
    """Create a fake session whose requests yield responses or raise errors."""
    session = MagicMock()
    contexts = []
    for outcome in outcomes:
        context = MagicMock()
        if isinstance(outcome, Exception):
            context.__aenter__.side_effect = outcome
        else:
            context.__aenter__.return_value = outcome
        contexts.append(context)
    session.request.side_effect = contexts
    return session


class TestBaseClient:
    """Tests for BaseClient."""

    @pytest.fixture
    def client(self):
        return BaseClient(base_url="https://api.test/v1", max_retries=3, retry_delay=0)

    def test_build_url(self, client) -> None:
        assert client._build_url("query") == "https://api.test/v1/query"
        assert client._build_url("/query") == "https://api.test/v1/query"
        assert client._build_url("") == "https://api.test/v1"
        assert client._build_url("https://other.test/x") == "https://other.test/x"

    def test_max_retries_at_least_one(self) -> None:
        assert BaseClient(max_retries=0).max_retries == 1

    @pytest.mark.asyncio
    async def test_json_response(self, client) -> None:
        session = make_session(make_response(body={"ok": True}))
        with patch.object(client, "_ensure_session", new=AsyncMock(return_value=session)):
            assert await client.post("query", json_data={"a": 1}) == {"ok": True}

        method, url = session.request.call_args.args
        assert (method, url) == ("POST", "https://api.test/v1/query")
        assert session.request.call_args.kwargs["json"] == {"a": 1}

    @pytest.mark.asyncio
    async def test_text_response(self, client) -> None:
        session = make_session(make_response(body="plain", content_type="text/plain"))
        with patch.object(client, "_ensure_session", new=AsyncMock(return_value=session)):
            assert await client.get("robots.txt") == "plain"

    @pytest.mark.asyncio
    async def test_retries_retryable_status(self, client) -> None:
        """Test 5xx responses are retried until attempts run out."""
        session = make_session(*(make_response(status=503, body="busy") for _ in range(3)))
        with patch.object(client, "_ensure_session", new=AsyncMock(return_value=session)):
            with pytest.raises(ExternalServiceError) as exc_info:
                await client.get("query")

        assert session.request.call_count == 3
        assert exc_info.value.status == 503
        assert exc_info.value.service == "http"

    @pytest.mark.asyncio
    async def test_recovers_after_connection_error(self, client) -> None:
        session = make_session(ClientConnectionError("reset"), make_response(body={"ok": 1}))
        with patch.object(client, "_ensure_session", new=AsyncMock(return_value=session)):
            assert await client.get("query") == {"ok": 1}

        assert session.request.call_count == 2

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, client) -> None:
        """Test 4xx responses other than 429 fail immediately."""
        session = make_session(make_response(status=404, body="missing"))
        with patch.object(client, "_ensure_session", new=AsyncMock(return_value=session)):
            with pytest.raises(ExternalServiceError) as exc_info:
                await client.get("query")

        assert session.request.call_count == 1
        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_malformed_json(self, client) -> None:
        response = make_response()
        response.json = AsyncMock(side_effect=ValueError("Expecting value"))
        session = make_session(response)
        with patch.object(client, "_ensure_session", new=AsyncMock(return_value=session)):
            with pytest.raises(ExternalServiceError, match="Malformed JSON"):
                await client.get("query")
