import pytest
from datetime import datetime, timedelta, timezone
from fastapi import status

from hr_portal.core.exceptions import ValidationError
from hr_portal.services import attendance_service

def test_clock_in_and_out(client, employee, auth_headers):
    headers = auth_headers(employee.user)
    response = client.post("/api/attendance/clock-in", headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["status"] == "present"

    response = client.post("/api/attendance/clock-out", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["total_hours"] is not None

def test_double_clock_in(client, employee, auth_headers):
    headers = auth_headers(employee.user)
    client.post("/api/attendance/clock-in", headers=headers)
    response = client.post("/api/attendance/clock-in", headers=headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Already clocked in today"

def test_clock_out_before_clock_in(client, employee, auth_headers):
    response = client.post("/api/attendance/clock-out", headers=auth_headers(employee.user))
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Please clock in first"

def test_total_hours_rounded(db_session, employee):
    start = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)
    attendance_service.clock_in(db_session, employee.id, now=start)
    record = attendance_service.clock_out(db_session, employee.id, now=start + timedelta(hours=8, minutes=20))
    assert record.total_hours == 8.33

    with pytest.raises(ValidationError):
        attendance_service.clock_out(db_session, employee.id, now=start + timedelta(hours=9))

def test_list_by_month(client, db_session, employee, auth_headers):
    for day in (datetime(2025, 3, 31, 9, tzinfo=timezone.utc), datetime(2025, 4, 1, 9, tzinfo=timezone.utc)):
        attendance_service.clock_in(db_session, employee.id, now=day)

    response = client.get("/api/attendance?month=3&year=2025", headers=auth_headers(employee.user))
    assert response.status_code == status.HTTP_200_OK
    assert [r["date"] for r in response.json()["data"]] == ["2025-03-31"]
