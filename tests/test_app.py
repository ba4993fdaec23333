from uuid import uuid4

from conftest import auth_headers


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "X-Request-ID" in response.headers


async def test_not_found_uses_detail_envelope(client, make_user):
    user = await make_user("client")
    booking_id = uuid4()
    response = await client.get(f"/api/v1/bookings/{booking_id}", headers=auth_headers(user))

    assert response.status_code == 404
    assert response.json() == {"detail": f"Booking with ID '{booking_id}' not found"}


async def test_invalid_token_is_unauthorized(client):
    response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
