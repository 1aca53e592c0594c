from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from cyberradar_portal.api import AlertSearchClient, AuthenticationError, severity_filter


def make_mock_response(status_code: int, json_data: dict | None = None) -> MagicMock:
    mock = MagicMock(spec=httpx.Response)
    mock.status_code = status_code
    mock.json.return_value = json_data or {}
    mock.headers = {}
    mock.request = httpx.Request("POST", "https://example.search.windows.net/test")

    def raise_for_status() -> None:
        if status_code >= 400:
            raise httpx.HTTPStatusError(
                f"HTTP {status_code}",
                request=mock.request,
                response=mock,
            )

    mock.raise_for_status = raise_for_status
    return mock


class TestSeverityFilter:
    def test_plain(self) -> None:
        assert severity_filter("critical") == "severity eq 'critical'"

    def test_quotes_escaped(self) -> None:
        assert severity_filter("x' or 1 eq 1 or 'y") == "severity eq 'x'' or 1 eq 1 or ''y'"


class TestAlertSearchClient:
    @pytest.fixture
    def client(self) -> AlertSearchClient:
        return AlertSearchClient(
            endpoint="https://example.search.windows.net/",
            index="cyberradar-alerts-index",
            api_key="test-key",
        )

    def test_initialization(self, client: AlertSearchClient) -> None:
        assert client.base_url == "https://example.search.windows.net"
        assert client.index == "cyberradar-alerts-index"

    async def test_search_success(self, client: AlertSearchClient) -> None:
        response = make_mock_response(
            200,
            {
                "@odata.count": 42,
                "value": [
                    {"@search.score": 3.2, "id": "a1", "title": "Exchange"},
                    {"@search.score": 1.1, "id": "a2", "title": "Outlook"},
                ],
            },
        )

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response
            async with client:
                page = await client.search("exchange", top=2, filter=severity_filter("high"))

        assert page.total == 42
        assert page.results == ({"id": "a1", "title": "Exchange"}, {"id": "a2", "title": "Outlook"})

        args, kwargs = mock_request.call_args
        assert args == (
            "POST",
            "https://example.search.windows.net/indexes/cyberradar-alerts-index/docs/search",
        )
        assert kwargs["params"] == {"api-version": "2023-11-01"}
        assert kwargs["headers"]["api-key"] == "test-key"
        assert kwargs["json"]["search"] == "exchange"
        assert kwargs["json"]["top"] == 2
        assert kwargs["json"]["count"] is True
        assert kwargs["json"]["filter"] == "severity eq 'high'"
        assert "orderby" not in kwargs["json"]

    async def test_total_falls_back_to_result_count(self, client: AlertSearchClient) -> None:
        response = make_mock_response(200, {"value": [{"id": "a1"}]})

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response
            async with client:
                page = await client.search("exchange")

        assert page.total == 1

    async def test_semantic_search(self, client: AlertSearchClient) -> None:
        response = make_mock_response(200, {"value": [{"@search.rerankerScore": 2, "id": "a1"}]})

        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = response
            async with client:
                results = await client.semantic_search("what hit us", search_mode="all")

        assert results == [{"id": "a1"}]
        body = mock_request.call_args.kwargs["json"]
        assert body["top"] == 5
        assert body["searchMode"] == "all"
        assert "scoringProfile" not in body

    async def test_invalid_key(self, client: AlertSearchClient) -> None:
        with patch("httpx.AsyncClient.request", new_callable=AsyncMock) as mock_request:
            mock_request.return_value = make_mock_response(403)
            async with client:
                with pytest.raises(AuthenticationError):
                    await client.search("exchange")
