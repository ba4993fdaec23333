import pytest

from conftest import auth_headers


def new_account(n: int, role: str = "client", **overrides):
    payload = {
        "name": f"New Person {n}",
        "email": f"new{n}@example.com",
        "phone": f"+2609660000{n:02d}",
        "nrc": f"55{n:04d}/11/1",
        "password": "Welcome123",
        "role": role,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
async def staff(make_user):
    return {
        "super": await make_user("admin", admin_level="super_admin"),
        "admin": await make_user("admin", admin_level="admin"),
        "support": await make_user("admin", admin_level="support"),
        "subadmin": await make_user("subadmin"),
    }


async def test_admin_creation_is_approved_immediately(client, staff):
    response = await client.post(
        "/api/v1/admin/users", json=new_account(1), headers=auth_headers(staff["admin"])
    )
    assert response.status_code == 201, response.text
    assert response.json()["approval_status"] == "approved"
    assert response.json()["is_active"] is True


@pytest.mark.parametrize("creator", ["subadmin", "support"])
async def test_lower_staff_creations_wait_for_approval(client, staff, creator):
    response = await client.post(
        "/api/v1/admin/users", json=new_account(2), headers=auth_headers(staff[creator])
    )
    assert response.status_code == 201
    user = response.json()
    assert user["approval_status"] == "pending"
    assert user["is_active"] is False

    pending = await client.get("/api/v1/admin/approvals/pending", headers=auth_headers(staff[creator]))
    assert [u["id"] for u in pending.json()] == [user["id"]]

    login = await client.post(
        "/api/v1/auth/login", json={"email": "new2@example.com", "password": "Welcome123"}
    )
    assert login.status_code == 401


async def test_approval_workflow(client, staff):
    created = await client.post(
        "/api/v1/admin/users", json=new_account(3), headers=auth_headers(staff["subadmin"])
    )
    user_id = created.json()["id"]

    response = await client.post(f"/api/v1/admin/users/{user_id}/approve", headers=auth_headers(staff["subadmin"]))
    assert response.status_code == 403

    response = await client.post(
        f"/api/v1/admin/users/{user_id}/approve",
        json={"notes": "Documents checked"},
        headers=auth_headers(staff["admin"]),
    )
    assert response.status_code == 200
    assert response.json()["approval_status"] == "approved"
    assert response.json()["is_active"] is True

    response = await client.post(f"/api/v1/admin/users/{user_id}/approve", headers=auth_headers(staff["admin"]))
    assert response.status_code == 409

    login = await client.post(
        "/api/v1/auth/login", json={"email": "new3@example.com", "password": "Welcome123"}
    )
    assert login.status_code == 200

    history = await client.get(
        f"/api/v1/admin/users/{user_id}/approval-history", headers=auth_headers(staff["subadmin"])
    )
    assert [entry["action"] for entry in history.json()] == ["user_create", "user_approve"]
    assert history.json()[1]["new_values"]["status"] == "approved"


async def test_rejection(client, staff):
    created = await client.post(
        "/api/v1/admin/users", json=new_account(4, role="driver"), headers=auth_headers(staff["subadmin"])
    )
    user_id = created.json()["id"]

    response = await client.post(
        f"/api/v1/admin/users/{user_id}/reject",
        json={"reason": "License expired"},
        headers=auth_headers(staff["admin"]),
    )
    assert response.status_code == 200
    assert response.json()["approval_status"] == "rejected"

    response = await client.post(f"/api/v1/admin/users/{user_id}/approve", headers=auth_headers(staff["admin"]))
    assert response.status_code == 409


async def test_only_super_admin_creates_staff(client, staff):
    response = await client.post(
        "/api/v1/admin/users", json=new_account(5, role="subadmin"), headers=auth_headers(staff["admin"])
    )
    assert response.status_code == 403

    response = await client.post(
        "/api/v1/admin/users",
        json=new_account(6, role="admin", admin_level="admin"),
        headers=auth_headers(staff["super"]),
    )
    assert response.status_code == 201
    assert response.json()["admin_level"] == "admin"


async def test_admin_hierarchy(client, staff, make_user):
    target = await make_user("client")

    response = await client.post(
        f"/api/v1/admin/users/{staff['subadmin'].id}/suspend",
        json={"reason": "Policy breach"},
        headers=auth_headers(staff["admin"]),
    )
    assert response.status_code == 403

    response = await client.post(
        f"/api/v1/admin/users/{staff['admin'].id}/suspend",
        json={"reason": "Policy breach"},
        headers=auth_headers(staff["admin"]),
    )
    assert response.status_code == 400

    response = await client.post(
        f"/api/v1/admin/users/{staff['admin'].id}/suspend",
        json={"reason": "Policy breach"},
        headers=auth_headers(staff["super"]),
    )
    assert response.status_code == 200

    response = await client.put(
        f"/api/v1/admin/users/{target.id}",
        json={"role": "admin"},
        headers=auth_headers(staff["super"]),
    )
    assert response.status_code == 200
    assert response.json()["role"] == "admin"


async def test_admin_cannot_promote_to_staff(client, staff, make_user):
    target = await make_user("client")
    response = await client.put(
        f"/api/v1/admin/users/{target.id}", json={"role": "subadmin"}, headers=auth_headers(staff["admin"])
    )
    assert response.status_code == 403

    response = await client.put(
        f"/api/v1/admin/users/{target.id}", json={"name": "Renamed Client"}, headers=auth_headers(staff["admin"])
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Renamed Client"


async def test_admin_cannot_null_required_user_fields(client, staff, make_user):
    target = await make_user("driver")
    headers = auth_headers(staff["admin"])

    for field in ("name", "phone", "role", "is_active", "availability"):
        response = await client.put(f"/api/v1/admin/users/{target.id}", json={field: None}, headers=headers)
        assert response.status_code == 422, field

    response = await client.get(f"/api/v1/admin/users/{target.id}", headers=headers)
    assert response.json()["name"] == target.name
    assert response.json()["availability"] is True


async def test_suspend_reactivate_and_delete(client, staff, make_user):
    target = await make_user("driver")
    headers = auth_headers(staff["admin"])

    response = await client.post(
        f"/api/v1/admin/users/{target.id}/suspend", json={"reason": "Late deliveries"}, headers=headers
    )
    assert response.json()["is_suspended"] is True
    response = await client.post(
        f"/api/v1/admin/users/{target.id}/suspend", json={"reason": "Late deliveries"}, headers=headers
    )
    assert response.status_code == 409

    response = await client.post(f"/api/v1/admin/users/{target.id}/reactivate", headers=headers)
    assert response.json()["is_suspended"] is False

    response = await client.delete(f"/api/v1/admin/users/{target.id}", headers=headers)
    assert response.status_code == 204
    response = await client.get(f"/api/v1/admin/users/{target.id}", headers=headers)
    assert response.json()["is_active"] is False


async def test_non_staff_are_refused(client, parties):
    response = await client.get("/api/v1/admin/dashboard", headers=auth_headers(parties.client))
    assert response.status_code == 403


async def test_assign_driver(client, parties, create_booking, make_user):
    booking = await create_booking()
    subadmin = await make_user("subadmin")

    response = await client.put(
        f"/api/v1/admin/bookings/{booking['id']}/assign-driver",
        json={"driver_id": str(parties.client.id)},
        headers=auth_headers(subadmin),
    )
    assert response.status_code == 400

    response = await client.put(
        f"/api/v1/admin/bookings/{booking['id']}/assign-driver",
        json={"driver_id": str(parties.driver.id)},
        headers=auth_headers(subadmin),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"
    assert response.json()["driver_id"] == str(parties.driver.id)

    other_driver = await make_user("driver")
    response = await client.put(
        f"/api/v1/admin/bookings/{booking['id']}/assign-driver",
        json={"driver_id": str(other_driver.id)},
        headers=auth_headers(subadmin),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "accepted"
    assert response.json()["driver_id"] == str(other_driver.id)


async def test_assign_driver_to_cancelled_booking(client, parties, create_booking, set_status):
    booking = await create_booking()
    await set_status(booking["id"], "cancelled", parties.client)

    response = await client.put(
        f"/api/v1/admin/bookings/{booking['id']}/assign-driver",
        json={"driver_id": str(parties.driver.id)},
        headers=auth_headers(parties.admin),
    )
    assert response.status_code == 409


async def test_dashboard_and_audit_log(client, parties, create_booking):
    await create_booking()

    response = await client.get("/api/v1/admin/dashboard", headers=auth_headers(parties.admin))
    body = response.json()
    assert body["total_users"] == 4
    assert body["users_by_role"]["driver"] == 1
    assert body["bookings_by_status"] == {"pending": 1}
    assert body["revenue"] == 0
    assert body["currency"] == "ZMW"

    response = await client.get(
        "/api/v1/admin/audit-logs?action=booking_create", headers=auth_headers(parties.admin)
    )
    logs = response.json()
    assert logs["total"] == 1
    assert logs["logs"][0]["user_id"] == str(parties.client.id)

    response = await client.get("/api/v1/admin/users?role=carwash", headers=auth_headers(parties.admin))
    assert [u["id"] for u in response.json()["users"]] == [str(parties.carwash.id)]
