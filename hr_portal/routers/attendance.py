from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hr_portal.core.schemas import ApiResponse
from hr_portal.database import get_db
from hr_portal.models.employee import Employee
from hr_portal.routers.auth_deps import get_current_employee
from hr_portal.schemas.attendance import AttendanceResponse
from hr_portal.services import attendance_service

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.post("/clock-in", status_code=status.HTTP_201_CREATED)
def clock_in(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    record = attendance_service.clock_in(db, employee.id)
    return ApiResponse.ok(data=AttendanceResponse.model_validate(record), message="Clocked in successfully")


@router.post("/clock-out")
def clock_out(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    record = attendance_service.clock_out(db, employee.id)
    return ApiResponse.ok(data=AttendanceResponse.model_validate(record), message="Clocked out successfully")


@router.get("")
def my_attendance(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1970),
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    records = attendance_service.list_attendance(db, employee.id, month=month, year=year)
    return ApiResponse.ok(data=[AttendanceResponse.model_validate(r) for r in records])
