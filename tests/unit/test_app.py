"""App-level wiring: health check, auth gate, error envelope."""

from httpx import AsyncClient


async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0"}


async def test_protected_route_requires_token(client: AsyncClient) -> None:
    resp = await client.get("/api/v1/listings/mine")
    assert resp.status_code == 401


async def test_garbage_token_rejected(client: AsyncClient) -> None:
    resp = await client.get(
        "/api/v1/notifications", headers={"Authorization": "Bearer not.a.token"}
    )
    assert resp.status_code == 401


async def test_request_id_echoed(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={"X-Request-ID": "req_fromclient"})
    assert resp.headers["X-Request-ID"] == "req_fromclient"


async def test_request_id_generated(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.headers["X-Request-ID"].startswith("req_")
