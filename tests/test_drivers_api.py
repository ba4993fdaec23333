from conftest import auth_headers

REMAINING_STEPS = (
    "picked_up",
    "at_wash",
    "waiting_bay",
    "washing_bay",
    "drying_bay",
    "wash_completed",
    "delivered",
    "completed",
)


async def test_job_board_shows_open_and_assigned(client, parties, make_user, create_booking):
    open_job = await create_booking()
    assigned = await create_booking(driver_id=str(parties.driver.id))
    other_driver = await make_user("driver")

    response = await client.get("/api/v1/drivers/bookings", headers=auth_headers(parties.driver))
    assert {b["id"] for b in response.json()} == {open_job["id"], assigned["id"]}

    response = await client.get("/api/v1/drivers/bookings", headers=auth_headers(other_driver))
    assert [b["id"] for b in response.json()] == [open_job["id"]]

    response = await client.get(
        "/api/v1/drivers/bookings?include_open=false", headers=auth_headers(other_driver)
    )
    assert response.json() == []


async def test_first_driver_to_accept_claims_job(client, parties, make_user, create_booking):
    booking = await create_booking()
    rival = await make_user("driver")

    response = await client.put(
        f"/api/v1/drivers/bookings/{booking['id']}/accept", headers=auth_headers(parties.driver)
    )
    assert response.status_code == 200
    assert response.json()["driver_id"] == str(parties.driver.id)

    response = await client.put(f"/api/v1/drivers/bookings/{booking['id']}/accept", headers=auth_headers(rival))
    assert response.status_code == 403


async def test_decline_is_terminal(client, parties, create_booking):
    booking = await create_booking(driver_id=str(parties.driver.id))

    response = await client.put(
        f"/api/v1/drivers/bookings/{booking['id']}/decline",
        json={"reason": "Vehicle too far away"},
        headers=auth_headers(parties.driver),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "declined"
    assert response.json()["cancellation_reason"] == "Vehicle too far away"

    response = await client.put(
        f"/api/v1/drivers/bookings/{booking['id']}/accept", headers=auth_headers(parties.driver)
    )
    assert response.status_code == 409


async def test_unavailable_driver_cannot_accept(client, parties, create_booking):
    booking = await create_booking()
    headers = auth_headers(parties.driver)

    response = await client.put("/api/v1/drivers/availability", json={"availability": False}, headers=headers)
    assert response.status_code == 200

    response = await client.get("/api/v1/drivers/available", headers=auth_headers(parties.client))
    assert response.json() == []

    response = await client.put(f"/api/v1/drivers/bookings/{booking['id']}/accept", headers=headers)
    assert response.status_code == 409


async def test_booking_with_unknown_driver_is_rejected(client, parties):
    response = await client.post(
        "/api/v1/bookings/",
        json=parties.booking_payload(driver_id=str(parties.carwash.id)),
        headers=auth_headers(parties.client),
    )
    assert response.status_code == 400


async def test_earnings(client, parties, create_booking, set_status):
    booking = await create_booking()
    await client.put(f"/api/v1/drivers/bookings/{booking['id']}/accept", headers=auth_headers(parties.driver))
    for step in REMAINING_STEPS:
        assert (await set_status(booking["id"], step, parties.admin)).status_code == 200
    await create_booking(driver_id=str(parties.driver.id))

    response = await client.get("/api/v1/drivers/earnings", headers=auth_headers(parties.driver))
    body = response.json()
    assert body["completed_bookings"] == 1
    assert body["gross_amount"] == 15000
    assert body["earnings"] == 3000
    assert body["currency"] == "ZMW"
