from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from hr_portal.core.config import settings
from hr_portal.core.schemas import ApiResponse, Pagination
from hr_portal.database import get_db
from hr_portal.models.employee import Employee
from hr_portal.models.user import User
from hr_portal.routers.auth_deps import (
    check_employee_access,
    get_current_employee,
    get_current_user,
    require_approver,
    require_hr,
)
from hr_portal.schemas.leave import (
    LeaveBalanceAdjust,
    LeaveBalanceResponse,
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveStatusUpdate,
    OnLeaveEntry,
)
from hr_portal.services.leave_service import LeaveService
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leave", tags=["leave"])

# Company-wide views live under the plural prefix
calendar_router = APIRouter(prefix="/leaves", tags=["leave"])


def _page(items, total: int, page: int, limit: int, message: Optional[str] = None) -> ApiResponse:
    return ApiResponse.ok(
        data=[LeaveRequestResponse.model_validate(item) for item in items],
        message=message,
        pagination=Pagination.build(page, limit, len(items), total),
    )


@router.post("/request", status_code=status.HTTP_201_CREATED)
def submit_leave_request(
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    check_employee_access(current_user, payload.employee_id)
    leave = LeaveService(db).submit(
        employee_id=payload.employee_id,
        leave_type=payload.leave_type.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        is_half_day=payload.is_half_day,
        half_day_type=payload.half_day_type.value if payload.half_day_type else None,
        emergency_contact=payload.emergency_contact or "",
    )
    return ApiResponse.ok(
        data=LeaveRequestResponse.model_validate(leave),
        message="Leave request submitted successfully",
    )


@router.get("/requests/all")
def list_all_leave_requests(
    status: Optional[str] = None,
    department: Optional[str] = None,
    year: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.leave.page_size, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approver()),
):
    items, total = LeaveService(db).list_requests(
        status=status, department=department, year=year, page=page, limit=limit
    )
    return _page(items, total, page, limit)


@router.get("/requests/{employee_id}")
def list_employee_leave_requests(
    employee_id: int,
    status: Optional[str] = None,
    year: Optional[int] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.leave.page_size, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    check_employee_access(current_user, employee_id)
    items, total = LeaveService(db).list_requests(
        employee_id=employee_id, status=status, year=year, page=page, limit=limit
    )
    return _page(items, total, page, limit)


@router.get("/pending")
def list_pending_leave_requests(
    department: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.leave.page_size, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approver()),
):
    items, total = LeaveService(db).list_pending(department=department, page=page, limit=limit)
    return _page(items, total, page, limit)


@router.get("/balance/{employee_id}")
def get_leave_balance(
    employee_id: int,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    check_employee_access(current_user, employee_id)
    balance = LeaveService(db).get_balance(employee_id, year or date.today().year)
    return ApiResponse.ok(data=LeaveBalanceResponse.from_ledger(balance))


@router.put("/balance/{employee_id}/adjust")
def adjust_leave_balance(
    employee_id: int,
    payload: LeaveBalanceAdjust,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    balance = LeaveService(db).adjust(
        employee_id=employee_id,
        year=payload.year or date.today().year,
        leave_type=payload.leave_type.value,
        days=payload.days,
        direction=payload.direction,
        actor=current_user,
        note=payload.note,
    )
    return ApiResponse.ok(
        data=LeaveBalanceResponse.from_ledger(balance),
        message="Leave balance adjusted",
    )


@router.put("/request/{request_id}/status")
def update_leave_status(
    request_id: int,
    payload: LeaveStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_approver()),
):
    leave = LeaveService(db).set_status(
        request_id, payload.status, current_user, rejection_reason=payload.rejection_reason
    )
    return ApiResponse.ok(
        data=LeaveRequestResponse.model_validate(leave),
        message=f"Leave request {payload.status} successfully",
    )


@router.put("/request/{request_id}/cancel")
def cancel_leave_request(
    request_id: int,
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    leave = LeaveService(db).cancel(request_id, employee.id)
    return ApiResponse.ok(
        data=LeaveRequestResponse.model_validate(leave),
        message="Leave request cancelled successfully",
    )


@calendar_router.get("/on-leave-today")
def employees_on_leave(
    on_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    target = on_date or date.today()
    leaves = LeaveService(db).list_on_leave(target)
    entries: List[OnLeaveEntry] = [
        OnLeaveEntry(
            id=leave.id,
            employee_id=leave.employee_id,
            name=leave.employee.name,
            email=leave.employee.email,
            department=leave.employee.department,
            designation=leave.employee.designation,
            leave_type=leave.leave_type,
            start_date=leave.start_date,
            end_date=leave.end_date,
            duration=leave.duration,
            is_half_day=leave.is_half_day,
            half_day_type=leave.half_day_type,
        )
        for leave in leaves
    ]
    return ApiResponse.ok(data=entries, message=f"{len(entries)} employee(s) on leave on {target.isoformat()}")
