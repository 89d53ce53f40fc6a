from datetime import date
from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from hr_portal.core.exceptions import ConflictError, ValidationError
from hr_portal.core.schemas import ApiResponse, Pagination
from hr_portal.database import get_db
from hr_portal.models.attendance import AttendanceRecord
from hr_portal.models.employee import Employee
from hr_portal.models.leave_request import LeaveRequest, LeaveStatus
from hr_portal.models.user import User
from hr_portal.routers.auth_deps import get_current_employee, require_hr
from hr_portal.schemas.attendance import AttendanceResponse
from hr_portal.schemas.employee import EmployeeCreate, EmployeeResponse, EmployeeSelfUpdate, EmployeeUpdate
from hr_portal.schemas.leave import LeaveBalanceResponse
from hr_portal.services.audit import AuditService
from hr_portal.services.leave_balance import initialize_balance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])


def _ensure_email_free(db: Session, email: str, exclude_id: Optional[int] = None):
    query = db.query(Employee).filter(Employee.email == email)
    if exclude_id is not None:
        query = query.filter(Employee.id != exclude_id)
    if query.first():
        raise ConflictError("Employee with this email already exists")


def _get_employee_or_404(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


@router.post("", status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    _ensure_email_free(db, payload.email)

    data = payload.model_dump(exclude_none=True)
    if payload.user_id is None:
        # Attach an existing login account registered with the same address
        account = db.query(User).filter(User.email == payload.email).first()
        if account and account.employee_profile is None:
            data["user_id"] = account.id

    employee = Employee(**data)
    db.add(employee)
    db.flush()

    initialize_balance(db, employee.id, date.today().year)

    AuditService.log(
        db,
        action="create_employee",
        entity_type="employee",
        entity_id=employee.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"email": employee.email, "department": employee.department},
    )
    db.commit()
    db.refresh(employee)
    logger.info(f"Employee {employee.id} created by {current_user.email}")
    return ApiResponse.ok(data=EmployeeResponse.model_validate(employee), message="Employee created successfully")


@router.get("")
def list_employees(
    department: Optional[str] = None,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    query = db.query(Employee)
    if department and department != "all":
        query = query.filter(Employee.department == department)
    if status and status != "all":
        query = query.filter(Employee.status == status)

    total = query.count()
    employees = query.order_by(Employee.name).offset((page - 1) * limit).limit(limit).all()
    return ApiResponse.ok(
        data=[EmployeeResponse.model_validate(e) for e in employees],
        pagination=Pagination.build(page, limit, len(employees), total),
    )


@router.get("/me")
def my_profile(employee: Employee = Depends(get_current_employee)):
    return ApiResponse.ok(data=EmployeeResponse.model_validate(employee))


@router.put("/me")
def update_my_profile(
    payload: EmployeeSelfUpdate,
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationError("At least one of name or phone must be provided")

    before = {field: getattr(employee, field) for field in changes}
    for field, value in changes.items():
        setattr(employee, field, value)

    AuditService.log(
        db,
        action="update_own_profile",
        entity_type="employee",
        entity_id=employee.id,
        user_id=employee.user_id,
        user_role=employee.user.role,
        details={"fields": list(changes)},
        before_state=before,
        after_state=changes,
    )
    db.commit()
    db.refresh(employee)
    return ApiResponse.ok(data=EmployeeResponse.model_validate(employee), message="Profile updated successfully")


@router.get("/me/dashboard")
def my_dashboard(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    today = date.today()
    attendance = db.query(AttendanceRecord).filter(
        AttendanceRecord.employee_id == employee.id,
        AttendanceRecord.date == today,
    ).first()
    balance = initialize_balance(db, employee.id, today.year)
    pending_count = db.query(LeaveRequest).filter(
        LeaveRequest.employee_id == employee.id,
        LeaveRequest.status == LeaveStatus.PENDING.value,
    ).count()
    db.commit()

    return ApiResponse.ok(data={
        "profile": EmployeeResponse.model_validate(employee),
        "today_attendance": AttendanceResponse.model_validate(attendance) if attendance else None,
        "leave_balance": LeaveBalanceResponse.from_ledger(balance),
        "pending_leave_requests": pending_count,
    })


@router.get("/{employee_id}")
def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    return ApiResponse.ok(data=EmployeeResponse.model_validate(_get_employee_or_404(db, employee_id)))


@router.put("/{employee_id}")
def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    employee = _get_employee_or_404(db, employee_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if changes.get("email") and changes["email"] != employee.email:
        _ensure_email_free(db, changes["email"], exclude_id=employee.id)

    before = {field: getattr(employee, field) for field in changes}
    for field, value in changes.items():
        setattr(employee, field, value)

    AuditService.log(
        db,
        action="update_employee",
        entity_type="employee",
        entity_id=employee.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"fields": list(changes)},
        before_state={k: str(v) if isinstance(v, date) else v for k, v in before.items()},
        after_state={k: str(v) if isinstance(v, date) else v for k, v in changes.items()},
    )
    db.commit()
    db.refresh(employee)
    return ApiResponse.ok(data=EmployeeResponse.model_validate(employee), message="Employee updated successfully")


@router.delete("/{employee_id}")
def delete_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    employee = _get_employee_or_404(db, employee_id)
    AuditService.log(
        db,
        action="delete_employee",
        entity_type="employee",
        entity_id=employee.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"email": employee.email},
    )
    db.delete(employee)
    db.commit()
    return ApiResponse.ok(message="Employee deleted successfully")
