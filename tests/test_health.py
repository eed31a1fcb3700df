"""
Tests for the service root and health check.
"""


async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["health"] == "/health"


async def test_health_operational(client):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "operational"
    assert data["database"] == "healthy"
    assert data["event_bus"] == "healthy"


async def test_health_degraded_when_bus_is_down(client, event_bus, monkeypatch):
    async def unhealthy():
        return False

    monkeypatch.setattr(event_bus, "health_check", unhealthy)

    data = (await client.get("/health")).json()
    assert data["status"] == "degraded"
    assert data["event_bus"] == "unhealthy"


async def test_unknown_order_is_json_404(client):
    response = await client.get("/api/orders/999")

    assert response.status_code == 404
    assert response.json()["success"] is False
