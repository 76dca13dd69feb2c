"""Tests for the Pingdom HTTP client against a local aiohttp server."""

import asyncio
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from uptime_report.core.checks import CheckEnumerator
from uptime_report.core.client import PingdomClient
from uptime_report.core.metrics import MetricsCollector
from uptime_report.errors import EnumerationError, FailureCause, ProviderError

pytestmark = pytest.mark.integration

API_KEY = "test-token"
UNDECODABLE_BODY = b"\xff\xfe bad gateway"


def build_app(seen: list, checks_status: int = 200) -> web.Application:
    async def checks(request):
        seen.append(request)
        if checks_status >= 400:
            return web.Response(
                status=checks_status,
                body=UNDECODABLE_BODY,
                content_type="text/plain",
                charset="utf-8"
            )
        return web.json_response({"checks": [{"id": 1, "name": "Website"}]})

    async def outage(request):
        seen.append(request)
        check_id = request.match_info["check_id"]
        if check_id == "401":
            return web.Response(status=401, text="invalid token")
        if check_id == "429":
            return web.Response(status=429, text="slow down")
        if check_id == "500":
            return web.Response(status=500, text="oops")
        if check_id == "503":
            return web.Response(
                status=503,
                body=UNDECODABLE_BODY,
                content_type="text/plain",
                charset="utf-8"
            )
        if check_id == "garbage":
            return web.Response(text="<html>not json</html>", content_type="text/html")
        if check_id == "list":
            return web.json_response([1, 2, 3])
        if check_id == "slow":
            await asyncio.sleep(1.5)
        return web.json_response({"summary": {"states": []}})

    app = web.Application()
    app.router.add_get("/api/3.1/checks", checks)
    app.router.add_get("/api/3.1/summary.outage/{check_id}", outage)
    return app


@pytest.fixture
async def server_and_requests():
    seen = []
    server = TestServer(build_app(seen))
    await server.start_server()
    yield server, seen
    await server.close()


@pytest.fixture
def api_url(server_and_requests):
    server, _ = server_and_requests
    return str(server.make_url("/api/3.1"))


@pytest.mark.asyncio
async def test_get_checks_sends_bearer_token(server_and_requests, api_url):
    _, seen = server_and_requests

    async with PingdomClient(api_url, API_KEY) as client:
        body = await client.get_checks()

    assert body == {"checks": [{"id": 1, "name": "Website"}]}
    assert seen[0].headers["Authorization"] == f"Bearer {API_KEY}"


@pytest.mark.asyncio
async def test_outage_summary_passes_window(server_and_requests, api_url):
    _, seen = server_and_requests

    async with PingdomClient(api_url, API_KEY) as client:
        body = await client.get_outage_summary(42, 1704067200, 1704153600)

    assert body == {"summary": {"states": []}}
    assert seen[0].path == "/api/3.1/summary.outage/42"
    assert seen[0].query["from"] == "1704067200"
    assert seen[0].query["to"] == "1704153600"


@pytest.mark.asyncio
@pytest.mark.parametrize("check_id,cause,status", [
    ("401", FailureCause.AUTH, 401),
    ("429", FailureCause.RATE_LIMITED, 429),
    ("500", FailureCause.HTTP, 500),
    ("503", FailureCause.HTTP, 503),
])
async def test_http_errors_are_categorized(api_url, check_id, cause, status):
    async with PingdomClient(api_url, API_KEY) as client:
        with pytest.raises(ProviderError) as exc_info:
            await client.get_outage_summary(check_id, 0, 1)

    assert exc_info.value.cause == cause
    assert exc_info.value.status_code == status


@pytest.mark.asyncio
async def test_undecodable_error_body_is_kept_in_message(api_url):
    async with PingdomClient(api_url, API_KEY) as client:
        with pytest.raises(ProviderError) as exc_info:
            await client.get_outage_summary("503", 0, 1)

    assert "503 from /summary.outage/503" in str(exc_info.value)
    assert "bad gateway" in str(exc_info.value)


@pytest.mark.asyncio
async def test_undecodable_error_body_during_listing_is_enumeration_error():
    server = TestServer(build_app([], checks_status=502))
    await server.start_server()
    try:
        async with PingdomClient(str(server.make_url("/api/3.1")), API_KEY) as client:
            with pytest.raises(EnumerationError) as exc_info:
                await CheckEnumerator(client).list_checks()
    finally:
        await server.close()

    assert isinstance(exc_info.value.__cause__, ProviderError)
    assert exc_info.value.__cause__.cause == FailureCause.HTTP


@pytest.mark.asyncio
@pytest.mark.parametrize("check_id", ["garbage", "list"])
async def test_non_object_body_is_malformed(api_url, check_id):
    async with PingdomClient(api_url, API_KEY) as client:
        with pytest.raises(ProviderError) as exc_info:
            await client.get_outage_summary(check_id, 0, 1)

    assert exc_info.value.cause == FailureCause.MALFORMED


@pytest.mark.asyncio
async def test_timeout_is_network_failure(api_url):
    async with PingdomClient(api_url, API_KEY, timeout=1) as client:
        with pytest.raises(ProviderError) as exc_info:
            await client.get_outage_summary("slow", 0, 1)

    assert exc_info.value.cause == FailureCause.NETWORK


@pytest.mark.asyncio
async def test_connection_refused_is_network_failure(unused_tcp_port):
    async with PingdomClient(f"http://127.0.0.1:{unused_tcp_port}", API_KEY) as client:
        with pytest.raises(ProviderError) as exc_info:
            await client.get_checks()

    assert exc_info.value.cause == FailureCause.NETWORK


@pytest.mark.asyncio
async def test_requests_are_recorded_in_metrics(api_url):
    metrics = MetricsCollector()

    async with PingdomClient(api_url, API_KEY, metrics=metrics) as client:
        await client.get_checks()
        with pytest.raises(ProviderError):
            await client.get_outage_summary("429", 0, 1)

    registry = metrics.registry
    assert registry.get_sample_value(
        'uptime_report_provider_requests_total',
        {"operation": "checks", "outcome": "success"}
    ) == 1
    assert registry.get_sample_value(
        'uptime_report_provider_requests_total',
        {"operation": "outage", "outcome": "rate_limited"}
    ) == 1


@pytest.mark.asyncio
async def test_session_lifecycle():
    client = PingdomClient("https://api.example.com/api/3.1/", API_KEY)

    assert client.api_url == "https://api.example.com/api/3.1"
    assert client.session is None

    await client.start()
    assert client.session is not None

    await client.close()
    assert client.session is None
