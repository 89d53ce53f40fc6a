import pytest
from fastapi import status

from hr_portal.core.config import settings
from hr_portal.core.exceptions import ValidationError
from hr_portal.models.leave_balance import LeaveBalance, LEAVE_TYPES
from hr_portal.services.leave_balance import AdjustDirection, adjust_balance, initialize_balance


def test_initialize_uses_default_allotments(db_session, employee):
    balance = initialize_balance(db_session, employee.id, 2025)
    for leave_type in LEAVE_TYPES:
        bucket = balance.bucket(leave_type)
        assert bucket["total"] == settings.leave.default_allotments[leave_type]
        assert bucket["used"] == 0
        assert bucket["available"] == bucket["total"]


def test_initialize_is_idempotent(db_session, employee):
    first = initialize_balance(db_session, employee.id, 2025)
    adjust_balance(first, "earned", 3, AdjustDirection.DEDUCT)
    db_session.commit()

    second = initialize_balance(db_session, employee.id, 2025)
    assert second.id == first.id
    assert second.earned_used == 3
    assert db_session.query(LeaveBalance).filter(LeaveBalance.employee_id == employee.id).count() == 1


def test_one_ledger_per_year(db_session, employee):
    initialize_balance(db_session, employee.id, 2025)
    initialize_balance(db_session, employee.id, 2026)
    assert db_session.query(LeaveBalance).filter(LeaveBalance.employee_id == employee.id).count() == 2


def test_deduct_then_add_restores_bucket(db_session, employee):
    balance = initialize_balance(db_session, employee.id, 2025)
    adjust_balance(balance, "sick", 2.5, AdjustDirection.DEDUCT)
    assert balance.bucket("sick") == {"total": 12.0, "used": 2.5, "available": 9.5}

    adjust_balance(balance, "sick", 2.5, AdjustDirection.ADD)
    assert balance.bucket("sick") == {"total": 12.0, "used": 0.0, "available": 12.0}


def test_available_never_negative(db_session, employee):
    balance = initialize_balance(db_session, employee.id, 2025)
    adjust_balance(balance, "paternity", 20, AdjustDirection.DEDUCT)
    assert balance.paternity_used == 20
    assert balance.paternity_available == 0


def test_add_clamps_used_at_zero(db_session, employee):
    balance = initialize_balance(db_session, employee.id, 2025)
    adjust_balance(balance, "casual", 5, AdjustDirection.ADD)
    assert balance.casual_used == 0
    assert balance.casual_available == balance.casual_total


@pytest.mark.parametrize("leave_type, days", [("vacation", 1), ("casual", -1)])
def test_adjust_rejects_bad_input(db_session, employee, leave_type, days):
    balance = initialize_balance(db_session, employee.id, 2025)
    with pytest.raises(ValidationError):
        adjust_balance(balance, leave_type, days, AdjustDirection.DEDUCT)


def test_version_increments_on_update(db_session, employee):
    balance = initialize_balance(db_session, employee.id, 2025)
    db_session.commit()
    version = balance.version

    adjust_balance(balance, "casual", 1, AdjustDirection.DEDUCT)
    db_session.commit()
    assert balance.version == version + 1


def test_get_balance_endpoint_creates_ledger(client, employee, auth_headers):
    response = client.get(f"/api/leave/balance/{employee.id}?year=2025", headers=auth_headers(employee.user))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["year"] == 2025
    assert data["casual"] == {"total": 12.0, "used": 0.0, "available": 12.0}


def test_get_balance_unknown_employee(client, hr_user, auth_headers):
    response = client.get("/api/leave/balance/9999", headers=auth_headers(hr_user))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_hr_adjusts_balance(client, db_session, employee, hr_user, auth_headers):
    response = client.put(
        f"/api/leave/balance/{employee.id}/adjust",
        headers=auth_headers(hr_user),
        json={"leave_type": "earned", "days": 1.5, "direction": "deduct", "year": 2025, "note": "Carry-over correction"},
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["earned"] == {"total": 21.0, "used": 1.5, "available": 19.5}

    from hr_portal.models.audit_log import AuditLog
    entry = db_session.query(AuditLog).filter(AuditLog.action == "leave_balance_deduct").first()
    assert entry is not None
    assert entry.after_state["used"] == 1.5


def test_employee_cannot_adjust_balance(client, employee, auth_headers):
    response = client.put(
        f"/api/leave/balance/{employee.id}/adjust",
        headers=auth_headers(employee.user),
        json={"leave_type": "earned", "days": 5, "direction": "add"},
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_adjust_rejects_non_half_day_steps(client, employee, hr_user, auth_headers):
    response = client.put(
        f"/api/leave/balance/{employee.id}/adjust",
        headers=auth_headers(hr_user),
        json={"leave_type": "earned", "days": 0.3, "direction": "add"},
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
