"""Integration tests for members_service member endpoints."""

import uuid
from datetime import timedelta

import pytest
from services.attendance_service.models import AttendanceStatus
from services.members_service.models import Member, MemberStatus
from sqlalchemy import select
from tests.factories import (
    TODAY,
    AttendanceFactory,
    MemberFactory,
    PaymentFactory,
    PlanFactory,
)
from tests.integration.conftest import auth_header


async def _add(db_session, *objs):
    db_session.add_all(objs)
    await db_session.commit()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_member_starts_pending(anon_members_client, db_session):
    payload = {
        "name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "555-0142",
        "password": "hunter22",
    }
    response = await anon_members_client.post("/members/register", json=payload)

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["message"] == "Registration successful"
    assert data["member"]["status"] == "pending"
    assert "password_hash" not in data["member"]

    stored = (
        await db_session.execute(select(Member).where(Member.email == payload["email"]))
    ).scalar_one()
    assert stored.password_hash and stored.password_hash != payload["password"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_register_duplicate_email(anon_members_client, db_session):
    await _add(db_session, MemberFactory.create(email="taken@example.com"))

    response = await anon_members_client.post(
        "/members/register",
        json={"name": "X", "email": "taken@example.com", "password": "hunter22"},
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Email already registered"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_member_on_plan(members_client, db_session):
    plan = PlanFactory.create(duration=3)
    await _add(db_session, plan)

    payload = {
        "name": "Ben Ortiz",
        "email": "ben@example.com",
        "membershipType": str(plan.id),
        "startDate": "2024-06-01",
        "emergencyContact": {"name": "Ana", "phone": "555-0001", "relationship": "Sister"},
    }
    response = await members_client.post("/members/", json=payload)

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["member"]["status"] == "pending_payment"
    assert data["member"]["end_date"] == "2024-09-01"
    assert data["member"]["subscription_status"] == "active"
    assert data["member"]["emergency_contact"]["relationship"] == "Sister"
    assert data["membership"]["id"] == str(plan.id)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_member_unknown_plan(members_client):
    payload = {
        "name": "Ben Ortiz",
        "email": "ben@example.com",
        "membership_type": str(uuid.uuid4()),
        "start_date": "2024-06-01",
    }
    response = await members_client.post("/members/", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid membership type"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_member_validation_error_shape(members_client):
    response = await members_client.post("/members/", json={"name": "No Email"})

    assert response.status_code == 400
    body = response.json()
    assert "error" in body
    fields = {d["field"] for d in body["details"]}
    assert "body.email" in fields


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_members_paginates_and_filters(members_client, db_session):
    await _add(
        db_session,
        *[MemberFactory.create(name=f"Active {i}") for i in range(3)],
        MemberFactory.create(name="Zed Pending", status=MemberStatus.PENDING),
        MemberFactory.create(
            name="Old Timer",
            status=MemberStatus.EXPIRED,
            end_date=TODAY - timedelta(days=2),
        ),
    )

    response = await members_client.get("/members/", params={"page": 1, "limit": 2})
    assert response.status_code == 200
    data = response.json()
    assert data["total_members"] == 5
    assert data["total_pages"] == 3
    assert data["current_page"] == 1
    assert len(data["members"]) == 2

    response = await members_client.get(
        "/members/", params={"status": "pending,expired"}
    )
    names = {m["name"] for m in response.json()["members"]}
    assert names == {"Zed Pending", "Old Timer"}

    response = await members_client.get("/members/", params={"search": "timer"})
    [row] = response.json()["members"]
    assert row["subscription_status"] == "expired"
    assert row["days_remaining"] == -2


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_members_rejects_unknown_status(members_client):
    response = await members_client.get("/members/", params={"status": "gold"})
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_member_detail_includes_stats(members_client, db_session):
    plan = PlanFactory.create()
    member = MemberFactory.create(membership_type=plan.id)
    await _add(db_session, plan, member)
    await _add(
        db_session,
        AttendanceFactory.create(member_id=member.id, date=TODAY),
        AttendanceFactory.create(
            member_id=member.id,
            date=TODAY - timedelta(days=1),
            status=AttendanceStatus.ABSENT,
        ),
        PaymentFactory.create(member_id=member.id, amount=49.0),
    )

    response = await members_client.get(f"/members/{member.id}")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["plan"]["name"] == plan.name
    assert data["attendance_stats"]["total_days"] == 2
    assert data["attendance_stats"]["present_days"] == 1
    assert data["attendance_stats"]["attendance_percentage"] == 50.0
    assert data["attendance_stats"]["last_attendance"] == TODAY.isoformat()
    assert data["payment_stats"]["total_paid"] == 49.0
    assert len(data["payment_stats"]["payment_history"]) == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_member_not_found(members_client):
    response = await members_client.get(f"/members/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"error": "Member not found"}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_member_recomputes_end_date(members_client, db_session):
    plan = PlanFactory.create(duration=6)
    member = MemberFactory.create()
    await _add(db_session, plan, member)

    response = await members_client.put(
        f"/members/{member.id}",
        json={"phone": "555-0999", "membershipType": str(plan.id), "startDate": "2024-07-01"},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["phone"] == "555-0999"
    assert data["end_date"] == "2025-01-01"


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize("field", ["name", "email", "status"])
async def test_update_member_rejects_null_required_field(
    members_client, db_session, field
):
    member = MemberFactory.create(name="Ada")
    await _add(db_session, member)

    response = await members_client.put(f"/members/{member.id}", json={field: None})

    assert response.status_code == 400
    assert f"{field} cannot be null" in response.json()["error"]
    await db_session.refresh(member)
    assert member.name == "Ada"
    assert member.status == MemberStatus.ACTIVE


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_member_allows_null_optional_field(members_client, db_session):
    member = MemberFactory.create()
    await _add(db_session, member)

    response = await members_client.put(f"/members/{member.id}", json={"phone": None})

    assert response.status_code == 200, response.text
    assert response.json()["phone"] is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_member_blocked_by_history(members_client, db_session):
    member = MemberFactory.create()
    await _add(db_session, member)
    await _add(db_session, PaymentFactory.create(member_id=member.id))

    response = await members_client.delete(f"/members/{member.id}")

    assert response.status_code == 400
    assert response.json() == {
        "error": "Cannot delete member with existing payment or attendance records",
        "has_payments": True,
        "has_attendance": False,
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_member_without_history(members_client, db_session):
    member = MemberFactory.create()
    await _add(db_session, member)

    response = await members_client.delete(f"/members/{member.id}")

    assert response.status_code == 200
    assert response.json() == {"message": "Member deleted successfully"}
    assert await db_session.get(Member, member.id) is None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_export_members(members_client, db_session):
    plan = PlanFactory.create(name="Gold")
    await _add(db_session, plan)
    await _add(db_session, MemberFactory.create(membership_type=plan.id))

    response = await members_client.get("/members/export")

    assert response.status_code == 200
    [row] = response.json()["members"]
    assert row["membership_type"] == "Gold"
    assert row["subscription_status"] == "active"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_staff_needs_view_members_permission(members_client, db_session):
    from libs.auth.permissions import RolePermission

    staff = auth_header(role="staff", subject="frontdesk")
    response = await members_client.get("/members/", headers=staff)
    assert response.status_code == 403
    assert response.json() == {"error": "Insufficient permissions"}

    await _add(db_session, RolePermission(role="staff", permission_name="view_members"))
    response = await members_client.get("/members/", headers=staff)
    assert response.status_code == 200

    response = await members_client.post("/members/", json={}, headers=staff)
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_token(anon_members_client):
    response = await anon_members_client.get("/members/")
    assert response.status_code == 401
    assert response.json() == {"error": "No token provided"}
