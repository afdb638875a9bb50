# tests/test_api.py
import httpx
import pytest

from conftest import FakeVaasClient, make_hook, make_task_info
from vaas_hook.main import app
from vaas_hook.services.vaas_client import VaasClientError


def _event(event_type: str) -> dict:
    return {"type": event_type, "task_info": make_task_info().model_dump()}


@pytest.fixture
def fake_client():
    client = FakeVaasClient()
    app.state.hook = make_hook(client)
    yield client
    del app.state.hook


def _http() -> httpx.AsyncClient:
    # ASGITransport does not run the lifespan, the hook is set by the fixture
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://hook.local")


@pytest.mark.anyio
async def test_events_register_and_deregister(fake_client):
    async with _http() as client:
        resp = await client.post("/events", json=_event("AfterTaskHealthyEvent"))
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "backend_id": 42}

        resp = await client.get("/backend")
        assert resp.json() == {"backend_id": 42}

        resp = await client.post("/events", json=_event("BeforeTerminateEvent"))
        assert resp.status_code == 200
        assert resp.json()["backend_id"] is None

    assert fake_client.deleted == [42]


@pytest.mark.anyio
async def test_unknown_event_is_accepted(fake_client):
    async with _http() as client:
        resp = await client.post("/events", json=_event("SomethingNew"))

    assert resp.status_code == 200
    assert fake_client.calls == []


@pytest.mark.anyio
async def test_hook_failure_maps_to_bad_gateway():
    app.state.hook = make_hook(FakeVaasClient(add_error=VaasClientError("rejected", status_code=400)))
    try:
        async with _http() as client:
            resp = await client.post("/events", json=_event("AfterTaskHealthyEvent"))
    finally:
        del app.state.hook

    assert resp.status_code == 502
    assert "Could not register with VaaS director" in resp.json()["detail"]


@pytest.mark.anyio
async def test_health_and_metrics():
    async with _http() as client:
        assert (await client.get("/health")).json() == {"status": "OK"}
        metrics = await client.get("/metrics")

    assert metrics.status_code == 200
    assert "vaas_registrations_total" in metrics.text
