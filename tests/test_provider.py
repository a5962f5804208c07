"""
Tests for the DataForSEO client and provider adapter.

These tests verify:
- Search volume request payloads and response parsing
- Market snapshot aggregation per brand
- Google Trends parsing and batching
- Every failure mode surfacing as ProviderUnavailable

Requests are served by httpx.MockTransport; nothing leaves the process.
"""

import asyncio
import json
import pytest
from datetime import date

import httpx

from marketpulse.collector import DataForSEOClient, DataForSEOProvider, RetryConfig, task_results
from marketpulse.errors import EmptyResult, ProviderUnavailable
from marketpulse.registry import BrandConfig, KeywordRegistry
from marketpulse.utils.config import Settings


def api_response(result, status_code=20000, status_message="Ok."):
    return {
        "status_code": status_code,
        "status_message": status_message,
        "tasks": [{"status_code": 20000, "status_message": "Ok.", "result": result}],
    }


class Recorder:
    """MockTransport handler that records requests and replays a response."""

    def __init__(self, body=None, status_code=200, responder=None):
        self.body = body
        self.status_code = status_code
        self.responder = responder
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responder is not None:
            return self.responder(request)
        return httpx.Response(self.status_code, json=self.body)

    def payload(self, index=0):
        return json.loads(self.requests[index].content)[0]


def make_provider(handler, clock=None, timeout=5.0) -> DataForSEOProvider:
    client = DataForSEOClient(
        login="test@example.com",
        password="secret",
        retry_config=RetryConfig(max_retries=0),
        transport=httpx.MockTransport(handler),
    )
    kwargs = {"clock": clock} if clock else {}
    return DataForSEOProvider(client, timeout=timeout, trends_call_delay=0, **kwargs)


def volume_item(keyword, volume, monthly=None):
    return {"keyword": keyword, "search_volume": volume, "monthly_searches": monthly or []}


# =============================================================================
# RESULT EXTRACTION
# =============================================================================

class TestTaskResults:
    """Test safe extraction of the first task's result list."""

    def test_normal_response(self):
        assert task_results(api_response([{"a": 1}])) == [{"a": 1}]

    @pytest.mark.parametrize("response", [
        {},
        {"tasks": None},
        {"tasks": []},
        {"tasks": [{"result": None}]},
        {"tasks": "garbage"},
    ])
    def test_malformed_responses(self, response):
        assert task_results(response) == []

    def test_non_dict_items_dropped(self):
        assert task_results(api_response([None, {"a": 1}, "x"])) == [{"a": 1}]


# =============================================================================
# SEARCH VOLUME
# =============================================================================

class TestFetchVolumes:
    """Test keyword volume lookups."""

    @pytest.mark.asyncio
    async def test_request_payload(self):
        handler = Recorder(api_response([volume_item("toto casino", 12100)]))
        provider = make_provider(handler)

        await provider.fetch_volumes(["toto casino"])
        await provider.close()

        request = handler.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v3/keywords_data/google_ads/search_volume/live"
        assert request.headers["Authorization"].startswith("Basic ")

        payload = handler.payload()
        assert payload["location_code"] == 2528
        assert payload["language_code"] == "nl"
        assert payload["keywords"] == ["toto casino"]
        assert payload["include_adult_keywords"] is True

    @pytest.mark.asyncio
    async def test_request_order_and_missing_keywords(self):
        """Results come back in request order; omitted keywords have no volume."""
        handler = Recorder(api_response([
            volume_item("unibet casino", 8100),
            volume_item("Toto Casino", 12100),
        ]))
        provider = make_provider(handler)

        volumes = await provider.fetch_volumes(["toto casino", "bet365 casino", "unibet casino"])

        assert [v.keyword for v in volumes] == ["toto casino", "bet365 casino", "unibet casino"]
        assert [v.search_volume for v in volumes] == [12100, None, 8100]

    @pytest.mark.asyncio
    async def test_monthly_searches_sorted(self):
        handler = Recorder(api_response([volume_item("toto casino", 12100, monthly=[
            {"year": 2024, "month": 5, "search_volume": 12100},
            {"year": 2024, "month": 3, "search_volume": 9900},
            {"year": 2024, "month": 4, "search_volume": 11000},
        ])]))
        provider = make_provider(handler)

        volumes = await provider.fetch_volumes(["toto casino"])

        series = volumes[0].trend_series
        assert [p.date for p in series] == [date(2024, 3, 1), date(2024, 4, 1), date(2024, 5, 1)]
        assert series[-1].value == 12100

    @pytest.mark.asyncio
    async def test_chunks_large_requests(self):
        handler = Recorder(api_response([]))
        provider = make_provider(handler)

        await provider.fetch_volumes([f"keyword {i}" for i in range(1500)])

        assert len(handler.requests) == 2
        assert len(handler.payload(0)["keywords"]) == 1000
        assert len(handler.payload(1)["keywords"]) == 500


class TestFetchMarketSnapshot:
    """Test per-brand aggregation."""

    @pytest.mark.asyncio
    async def test_aggregates_brand_keywords(self, registry, clock):
        handler = Recorder(api_response([
            volume_item("jacks casino", 5000),
            volume_item("jacks.nl", 1000),
            volume_item("toto casino", 12100),
            volume_item("unibet casino", 8100),
            volume_item("casino klacht", 720),
        ]))
        provider = make_provider(handler, clock=clock)

        snapshot = await provider.fetch_market_snapshot(registry)

        assert snapshot.fetched_at == clock()
        assert snapshot.brand("jacks").total_volume == 6000
        assert snapshot.brand("toto").total_volume == 12100
        assert snapshot.brand("bet365").total_volume == 0
        assert snapshot.volume_for("casino klacht") == 720
        assert snapshot.volume_for("casino bonus") == 0

    @pytest.mark.asyncio
    async def test_requests_every_tracked_keyword_once(self, registry):
        handler = Recorder(api_response([volume_item("jacks casino", 5000)]))
        provider = make_provider(handler)

        await provider.fetch_market_snapshot(registry)

        keywords = handler.payload()["keywords"]
        assert len(keywords) == len(set(keywords)) == 10

    @pytest.mark.asyncio
    async def test_no_brand_volume_raises_empty_result(self, registry):
        handler = Recorder(api_response([volume_item("casino klacht", 720)]))
        provider = make_provider(handler)

        with pytest.raises(EmptyResult):
            await provider.fetch_market_snapshot(registry)


# =============================================================================
# FAILURE MODES
# =============================================================================

class TestProviderFailures:
    """Every failure surfaces as ProviderUnavailable."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [401, 500, 503])
    async def test_http_errors(self, status_code):
        handler = Recorder({"status_message": "nope"}, status_code=status_code)
        provider = make_provider(handler)

        with pytest.raises(ProviderUnavailable) as exc_info:
            await provider.fetch_volumes(["toto casino"])

        assert exc_info.value.status_code == status_code

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        handler = Recorder(responder=lambda request: httpx.Response(200, content=b"<html>gateway</html>"))
        provider = make_provider(handler)

        with pytest.raises(ProviderUnavailable) as exc_info:
            await provider.fetch_volumes(["toto casino"])

        assert "Invalid JSON" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_object_json_body(self):
        handler = Recorder(["not", "a", "task", "response"])
        provider = make_provider(handler)

        with pytest.raises(ProviderUnavailable) as exc_info:
            await provider.fetch_volumes(["toto casino"])

        assert "Unexpected API response type: list" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_api_level_error(self):
        handler = Recorder(api_response(None, status_code=40100, status_message="You are not authorized"))
        provider = make_provider(handler)

        with pytest.raises(ProviderUnavailable) as exc_info:
            await provider.fetch_volumes(["toto casino"])

        assert exc_info.value.status_code == 40100
        assert "not authorized" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        provider = make_provider(Recorder(responder=refuse))

        with pytest.raises(ProviderUnavailable):
            await provider.fetch_volumes(["toto casino"])

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def slow(request):
            await asyncio.sleep(1)
            return httpx.Response(200, json=api_response([]))

        client = DataForSEOClient(
            login="test@example.com",
            password="secret",
            retry_config=RetryConfig(max_retries=0),
            transport=httpx.MockTransport(slow),
        )
        provider = DataForSEOProvider(client, timeout=0.05)

        with pytest.raises(ProviderUnavailable) as exc_info:
            await provider.fetch_volumes(["toto casino"])

        assert "timed out" in str(exc_info.value)
        await provider.close()

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        responses = iter([
            httpx.Response(503),
            httpx.Response(200, json=api_response([volume_item("toto casino", 12100)])),
        ])
        handler = Recorder(responder=lambda request: next(responses))
        client = DataForSEOClient(
            login="test@example.com",
            password="secret",
            retry_config=RetryConfig(max_retries=1, initial_delay=0),
            transport=httpx.MockTransport(handler),
        )
        provider = DataForSEOProvider(client)

        volumes = await provider.fetch_volumes(["toto casino"])

        assert volumes[0].search_volume == 12100
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_unconfigured_provider(self):
        provider = DataForSEOProvider(client=None)

        assert provider.is_configured is False
        with pytest.raises(ProviderUnavailable):
            await provider.fetch_volumes(["toto casino"])

    def test_from_settings_without_credentials(self):
        settings = Settings(_env_file=None, DATAFORSEO_LOGIN=None, DATAFORSEO_PASSWORD=None)

        provider = DataForSEOProvider.from_settings(settings)

        assert provider.is_configured is False
        assert provider.options.location_code == 2528


# =============================================================================
# GOOGLE TRENDS
# =============================================================================

def trends_response(keywords, values, averages):
    return api_response([{
        "keywords": keywords,
        "items": [
            {"type": "google_trends_map", "data": []},
            {
                "type": "google_trends_graph",
                "data": [
                    {"date_from": "2024-05-19", "date_to": "2024-05-25", "values": values[0]},
                    {"date_from": "2024-05-26", "date_to": "2024-06-01", "values": values[1]},
                ],
                "averages": averages,
            },
        ],
    }])


class TestTrends:
    """Test Google Trends requests."""

    @pytest.mark.asyncio
    async def test_parses_graph(self):
        handler = Recorder(trends_response(
            ["toto casino", "unibet casino"], [[80, 20], [100, 25]], [90, 22],
        ))
        provider = make_provider(handler)

        series = await provider.fetch_trends(
            ["toto casino", "unibet casino"], date(2023, 6, 3), date(2024, 6, 3),
        )

        assert series.keywords == ("toto casino", "unibet casino")
        assert series.points[1].date_from == date(2024, 5, 26)
        assert series.points[1].values == (100, 25)
        assert series.averages == (90, 22)

        payload = handler.payload()
        assert handler.requests[0].url.path == "/v3/keywords_data/google_trends/explore/live"
        assert payload["location_name"] == "Netherlands"
        assert payload["date_from"] == "2023-06-03"
        assert payload["type"] == "web"

    @pytest.mark.asyncio
    async def test_truncates_to_five_keywords(self):
        handler = Recorder(api_response([]))
        provider = make_provider(handler)

        await provider.fetch_trends([f"k{i}" for i in range(7)], date(2023, 6, 3), date(2024, 6, 3))

        assert handler.payload()["keywords"] == ["k0", "k1", "k2", "k3", "k4"]

    @pytest.mark.asyncio
    async def test_no_graph_returns_none(self):
        handler = Recorder(api_response([{"keywords": ["toto casino"], "items": []}]))
        provider = make_provider(handler)

        assert await provider.fetch_trends(["toto casino"], date(2023, 6, 3), date(2024, 6, 3)) is None

    @pytest.mark.asyncio
    async def test_brand_trends_batches_primary_keywords(self, clock):
        registry = KeywordRegistry(
            brands=tuple(
                BrandConfig(f"brand{i}", f"Brand {i}", f"brand{i}.nl", (f"brand{i} casino", f"brand{i}.nl"),
                            is_own_brand=(i == 0))
                for i in range(7)
            ),
            intent_categories=(),
        )
        handler = Recorder(responder=lambda request: httpx.Response(200, json=trends_response(
            json.loads(request.content)[0]["keywords"], [[1], [2]], [1],
        )))
        provider = make_provider(handler, clock=clock)

        series = await provider.fetch_brand_trends(registry)

        assert len(handler.requests) == 2
        assert handler.payload(0)["keywords"] == [f"brand{i} casino" for i in range(5)]
        assert handler.payload(1)["keywords"] == ["brand5 casino", "brand6 casino"]
        assert handler.payload(0)["date_to"] == "2024-06-03"
        assert handler.payload(0)["date_from"] == "2023-06-04"
        assert len(series) == 2


# =============================================================================
# ACCOUNT STATUS
# =============================================================================

class TestCheckStatus:
    """Test credential/balance checks."""

    @pytest.mark.asyncio
    async def test_balance(self):
        handler = Recorder(api_response([{"login": "test@example.com", "money": {"balance": 42.5}}]))
        provider = make_provider(handler)

        status = await provider.check_status()

        assert status == {"is_configured": True, "balance": 42.5}
        assert handler.requests[0].method == "GET"
        assert handler.requests[0].url.path == "/v3/appendix/user_data"

    @pytest.mark.asyncio
    async def test_auth_failure(self):
        provider = make_provider(Recorder({}, status_code=401))

        status = await provider.check_status()

        assert status["is_configured"] is False
        assert "401" in status["error"]
