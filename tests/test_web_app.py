"""Tests for the FastAPI listener (httpx ASGITransport)."""

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import FakePlatformClient, at, make_app
from web.app import create_app


def _http(settings, platform_client) -> AsyncClient:
    app = create_app(settings, platform_client=platform_client)
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_index_renders_hosts_in_address_order(settings, example_client):
    async with _http(settings, example_client) as client:
        resp = await client.get("/")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")
    body = resp.text
    assert "<h1>CF Application Placements</h1>" in body
    assert body.index("Host: 10.0.0.2") < body.index("Host: 10.0.0.5")
    assert "<li>A</li>" in body and "<li>B</li>" in body


@pytest.mark.asyncio
async def test_index_escapes_application_names(settings):
    platform = FakePlatformClient(pages=[[make_app("g1", "<script>x</script>")]])
    platform.instances["g1"] = at("10.0.0.1")

    async with _http(settings, platform) as client:
        resp = await client.get("/")

    assert resp.status_code == 200
    assert "<script>x</script>" not in resp.text
    assert "&lt;script&gt;x&lt;/script&gt;" in resp.text


@pytest.mark.asyncio
async def test_index_failure_returns_500_without_partial_report(settings):
    platform = FakePlatformClient(pages=[[make_app("g1")]], fail_apps={"g1"})

    async with _http(settings, platform) as client:
        resp = await client.get("/")

    assert resp.status_code == 500
    assert "Host:" not in resp.text
    assert resp.json() == {"detail": "Failed to build placement report"}


@pytest.mark.asyncio
async def test_api_placements_returns_json(settings, example_client):
    async with _http(settings, example_client) as client:
        resp = await client.get("/api/placements")

    assert resp.status_code == 200
    data = resp.json()
    assert data["hosts"] == [
        {"host": "10.0.0.2", "apps": ["B"]},
        {"host": "10.0.0.5", "apps": ["A", "B"]},
    ]
    assert data["application_count"] == 2
    assert data["instance_count"] == 3


@pytest.mark.asyncio
async def test_report_uses_configured_process_type(settings, example_client):
    settings.process_type = "worker"

    async with _http(settings, example_client) as client:
        await client.get("/api/placements")

    assert {ptype for _, ptype in example_client.stats_calls} == {"worker"}


@pytest.mark.asyncio
async def test_healthz(settings, example_client):
    async with _http(settings, example_client) as client:
        resp = await client.get("/healthz")

    assert resp.json() == {"status": "ok"}
    assert example_client.page_calls == []
