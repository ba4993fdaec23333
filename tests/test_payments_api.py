import pytest

from conftest import auth_headers

WASH_STEPS = ("accepted", "picked_up", "at_wash", "waiting_bay", "washing_bay", "drying_bay", "wash_completed")


@pytest.fixture
def washed_booking(parties, create_booking, set_status):
    async def _washed():
        booking = await create_booking()
        for step in WASH_STEPS:
            response = await set_status(booking["id"], step, parties.admin)
            assert response.status_code == 200, response.text
        return booking

    return _washed


async def pay(client, booking_id, user, method="cash"):
    return await client.post(
        "/api/v1/payments/initiate",
        json={"booking_id": booking_id, "method": method},
        headers=auth_headers(user),
    )


async def test_cannot_pay_before_wash_is_done(client, parties, create_booking):
    booking = await create_booking()
    response = await pay(client, booking["id"], parties.client)
    assert response.status_code == 409


async def test_paying_washed_booking_keeps_it_in_progress(client, parties, washed_booking, set_status):
    booking = await washed_booking()

    response = await pay(client, booking["id"], parties.client, method="card")
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["payment"]["status"] == "paid"
    assert body["payment"]["method"] == "card"
    assert body["payment"]["paid_at"] is not None
    assert body["booking_status"] == "wash_completed"
    assert body["booking_payment_status"] == "paid"

    response = await set_status(booking["id"], "delivered", parties.admin)
    assert response.json()["status"] == "delivered"


async def test_payment_cannot_be_taken_twice(client, parties, washed_booking):
    booking = await washed_booking()
    assert (await pay(client, booking["id"], parties.client)).status_code == 200
    assert (await pay(client, booking["id"], parties.client)).status_code == 409


async def test_only_booking_client_can_pay(client, parties, washed_booking, make_user):
    booking = await washed_booking()
    stranger = await make_user("client")
    assert (await pay(client, booking["id"], stranger)).status_code == 403


async def test_failed_payment_can_be_retried(client, parties, washed_booking):
    booking = await washed_booking()
    payment = (
        await client.get(f"/api/v1/payments/booking/{booking['id']}", headers=auth_headers(parties.client))
    ).json()

    response = await client.post(
        "/api/v1/payments/verify",
        json={"payment_id": payment["id"], "status": "failed"},
        headers=auth_headers(parties.admin),
    )
    assert response.status_code == 200
    assert response.json()["payment"]["status"] == "failed"

    response = await pay(client, booking["id"], parties.client, method="mobile_money")
    assert response.status_code == 200
    assert response.json()["payment"]["status"] == "paid"


async def test_refund_is_admin_only_and_once(client, parties, washed_booking, make_user):
    booking = await washed_booking()
    payment = (await pay(client, booking["id"], parties.client)).json()["payment"]
    refund = {"reason": "Customer was charged twice"}
    subadmin = await make_user("subadmin")

    response = await client.post(
        f"/api/v1/payments/{payment['id']}/refund", json=refund, headers=auth_headers(subadmin)
    )
    assert response.status_code == 403

    response = await client.post(
        f"/api/v1/payments/{payment['id']}/refund", json=refund, headers=auth_headers(parties.admin)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "refunded"

    response = await client.post(
        f"/api/v1/payments/{payment['id']}/refund", json=refund, headers=auth_headers(parties.admin)
    )
    assert response.status_code == 409

    response = await client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_headers(parties.client))
    assert response.json()["payment_status"] == "refunded"
