async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "ok"
    assert "timestamp" in body


async def test_unknown_route_uses_envelope(client):
    response = await client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json()["success"] is False
