from uuid import UUID

import pytest
from sqlalchemy import update

from conftest import auth_headers
from washride.api.deps import RequestContext
from washride.api.v1 import bookings as bookings_api
from washride.core.exceptions import ConcurrentUpdateError
from washride.core.permissions import UserRole
from washride.models.booking import Booking
from washride.models.user import User
from washride.schemas.booking import BookingResponse
from washride.services.booking_service import booking_service

CARWASH_STEPS = ("at_wash", "waiting_bay", "washing_bay", "drying_bay", "wash_completed")


async def test_create_booking_starts_pending(client, parties, create_booking):
    booking = await create_booking()

    assert booking["status"] == "pending"
    assert booking["payment_status"] == "pending"
    assert booking["driver_id"] is None
    assert booking["total_amount"] == parties.service.price
    assert booking["version"] == 1

    response = await client.get(
        f"/api/v1/payments/booking/{booking['id']}", headers=auth_headers(parties.client)
    )
    assert response.status_code == 200
    assert response.json()["amount"] == parties.service.price
    assert response.json()["currency"] == "ZMW"


async def test_create_booking_rejects_foreign_vehicle(client, parties, make_user):
    other = await make_user("client")
    response = await client.post(
        "/api/v1/bookings/", json=parties.booking_payload(), headers=auth_headers(other)
    )
    assert response.status_code == 404


async def test_create_booking_rejects_service_of_other_car_wash(client, parties, make_user):
    other_wash = await make_user("carwash")
    response = await client.post(
        "/api/v1/bookings/",
        json=parties.booking_payload(car_wash_id=str(other_wash.id)),
        headers=auth_headers(parties.client),
    )
    assert response.status_code == 400


async def test_create_booking_requires_both_coordinates(client, parties):
    response = await client.post(
        "/api/v1/bookings/",
        json=parties.booking_payload(pickup_lat=-15.4),
        headers=auth_headers(parties.client),
    )
    assert response.status_code == 422


async def test_only_clients_can_book(client, parties):
    response = await client.post(
        "/api/v1/bookings/", json=parties.booking_payload(), headers=auth_headers(parties.driver)
    )
    assert response.status_code == 403


async def test_full_lifecycle(client, parties, create_booking, set_status):
    booking = await create_booking()
    booking_id = booking["id"]

    response = await set_status(booking_id, "accepted", parties.driver)
    assert response.status_code == 200
    assert response.json()["driver_id"] == str(parties.driver.id)

    response = await set_status(booking_id, "picked_up", parties.driver)
    assert response.status_code == 200
    assert response.json()["actual_pickup_time"] is not None

    for step in CARWASH_STEPS:
        response = await set_status(booking_id, step, parties.carwash)
        assert response.status_code == 200, response.text
        assert response.json()["status"] == step

    response = await set_status(booking_id, "delivered", parties.driver)
    assert response.status_code == 200
    assert response.json()["delivery_time"] is not None

    response = await client.post(
        "/api/v1/payments/initiate",
        json={"booking_id": booking_id, "method": "mobile_money"},
        headers=auth_headers(parties.client),
    )
    assert response.status_code == 200, response.text
    assert response.json()["booking_status"] == "completed"
    assert response.json()["payment"]["status"] == "paid"

    response = await client.get(f"/api/v1/bookings/{booking_id}", headers=auth_headers(parties.client))
    body = response.json()
    assert body["status"] == "completed"
    assert body["payment_status"] == "paid"
    assert body["completed_at"] is not None
    assert body["version"] == 10


async def test_skipping_a_status_is_rejected(client, parties, create_booking, set_status):
    booking = await create_booking(driver_id=None)
    response = await set_status(booking["id"], "picked_up", parties.admin)

    assert response.status_code == 409
    response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(parties.client))
    assert response.json()["status"] == "pending"


async def test_moving_backwards_is_rejected(parties, create_booking, set_status):
    booking = await create_booking()
    await set_status(booking["id"], "accepted", parties.driver)
    await set_status(booking["id"], "picked_up", parties.driver)

    response = await set_status(booking["id"], "accepted", parties.driver)
    assert response.status_code == 409


async def test_accepted_booking_can_be_cancelled(client, parties, create_booking, set_status):
    booking = await create_booking()
    await set_status(booking["id"], "accepted", parties.driver)

    response = await client.put(
        f"/api/v1/bookings/{booking['id']}/cancel",
        json={"reason": "Plans changed"},
        headers=auth_headers(parties.client),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "cancelled"
    assert body["cancelled_by"] == "client"
    assert body["cancellation_reason"] == "Plans changed"
    assert body["cancelled_at"] is not None


@pytest.mark.parametrize("terminal", ["completed", "cancelled", "declined"])
async def test_terminal_booking_rejects_every_transition(client, parties, create_booking, set_status, terminal):
    booking = await create_booking()
    if terminal == "completed":
        for step in ("accepted", "picked_up", *CARWASH_STEPS, "delivered", "completed"):
            assert (await set_status(booking["id"], step, parties.admin)).status_code == 200
    else:
        assert (await set_status(booking["id"], terminal, parties.admin)).status_code == 200

    before = (await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(parties.admin))).json()
    for target in ("pending", "accepted", "cancelled", "declined", "completed"):
        response = await set_status(booking["id"], target, parties.admin)
        assert response.status_code == 409

    after = (await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(parties.admin))).json()
    assert after == before


async def test_roles_can_only_set_their_own_statuses(parties, create_booking, set_status):
    booking = await create_booking()

    assert (await set_status(booking["id"], "accepted", parties.carwash)).status_code == 403
    assert (await set_status(booking["id"], "accepted", parties.client)).status_code == 403

    await set_status(booking["id"], "accepted", parties.driver)
    assert (await set_status(booking["id"], "picked_up", parties.carwash)).status_code == 403
    assert (await set_status(booking["id"], "picked_up", parties.client)).status_code == 403


async def test_other_parties_cannot_touch_booking(client, parties, make_user, create_booking, set_status):
    booking = await create_booking()
    await set_status(booking["id"], "accepted", parties.driver)

    other_driver = await make_user("driver")
    other_client = await make_user("client")
    other_wash = await make_user("carwash")

    assert (await set_status(booking["id"], "picked_up", other_driver)).status_code == 403
    assert (await set_status(booking["id"], "cancelled", other_client)).status_code == 403
    assert (await set_status(booking["id"], "at_wash", other_wash)).status_code == 403

    response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(other_client))
    assert response.status_code == 403


async def test_list_bookings_is_scoped_by_role(client, parties, make_user, create_booking):
    await create_booking()
    await create_booking()
    stranger = await make_user("client")

    mine = await client.get("/api/v1/bookings/", headers=auth_headers(parties.client))
    theirs = await client.get("/api/v1/bookings/", headers=auth_headers(stranger))
    wash = await client.get("/api/v1/bookings/?status=pending", headers=auth_headers(parties.carwash))
    staff = await client.get("/api/v1/bookings/", headers=auth_headers(parties.admin))

    assert mine.json()["total"] == 2
    assert theirs.json()["total"] == 0
    assert wash.json()["total"] == 2
    assert staff.json()["total"] == 2


async def test_transitions_endpoint(client, parties, create_booking, set_status):
    booking = await create_booking()

    response = await client.get(
        f"/api/v1/bookings/{booking['id']}/transitions", headers=auth_headers(parties.client)
    )
    body = response.json()
    assert body["status"] == "pending"
    assert body["next_status"] == "accepted"
    assert sorted(body["allowed"]) == ["accepted", "cancelled", "declined"]
    assert body["is_terminal"] is False

    await set_status(booking["id"], "cancelled", parties.client)
    response = await client.get(
        f"/api/v1/bookings/{booking['id']}/transitions", headers=auth_headers(parties.client)
    )
    body = response.json()
    assert body["next_status"] is None
    assert body["allowed"] == []
    assert body["is_terminal"] is True


async def test_same_transition_twice_only_succeeds_once(parties, create_booking, set_status):
    booking = await create_booking()

    first = await set_status(booking["id"], "accepted", parties.admin)
    second = await set_status(booking["id"], "accepted", parties.admin)

    assert first.status_code == 200
    assert second.status_code == 409


async def test_concurrent_writers_from_same_state(parties, create_booking, session_factory):
    booking = await create_booking()

    async with session_factory() as first, session_factory() as second:
        # each writer acts as a user loaded in its own session, as a request does
        first_ctx = RequestContext(
            user=await first.get(User, parties.admin.id), role=UserRole.ADMIN, ip_address=None, user_agent=None
        )
        second_ctx = RequestContext(
            user=await second.get(User, parties.admin.id), role=UserRole.ADMIN, ip_address=None, user_agent=None
        )
        mine = await first.get(Booking, UUID(booking["id"]))
        theirs = await second.get(Booking, UUID(booking["id"]))

        await booking_service.transition(first, mine, "accepted", first_ctx)
        await first.commit()

        with pytest.raises(ConcurrentUpdateError):
            await booking_service.transition(second, theirs, "cancelled", second_ctx)
        await second.rollback()

    async with session_factory() as session:
        stored = await session.get(Booking, UUID(booking["id"]))
        assert stored.status == "accepted"
        assert stored.version == 2


async def test_losing_writer_gets_conflict_over_http(
    client, parties, create_booking, session_factory, monkeypatch
):
    booking = await create_booking()
    load = bookings_api.get_booking_or_404

    async def load_then_lose_race(db, booking_id):
        stale = await load(db, booking_id)
        async with session_factory() as other:
            await other.execute(
                update(Booking)
                .where(Booking.id == booking_id)
                .values(status="accepted", version=Booking.version + 1)
            )
            await other.commit()
        return stale

    monkeypatch.setattr(bookings_api, "get_booking_or_404", load_then_lose_race)
    response = await client.put(
        f"/api/v1/bookings/{booking['id']}/cancel", headers=auth_headers(parties.client)
    )
    monkeypatch.undo()

    assert response.status_code == 409
    assert "modified by another request" in response.json()["detail"]

    response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(parties.client))
    assert response.json()["status"] == "accepted"
    assert response.json()["cancelled_at"] is None


async def test_booking_response_round_trip_keeps_null_driver(client, parties, create_booking):
    booking = await create_booking()
    response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(parties.client))

    parsed = BookingResponse.model_validate_json(response.text)
    assert parsed.driver_id is None
    assert BookingResponse.model_validate_json(parsed.model_dump_json()) == parsed
    assert set(parsed.model_dump()) == set(response.json())
