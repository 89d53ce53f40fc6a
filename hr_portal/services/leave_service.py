"""
Leave Service Layer

Business rules for the leave request workflow:

    pending -> approved   (terminal, deducts the balance bucket)
    pending -> rejected   (terminal, records the reason)
    pending -> cancelled  (terminal, owning employee only)

Routers stay thin and delegate here. Balance rows and leave requests carry
an optimistic version column; a concurrent write surfaces as ConflictError.
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from sqlalchemy.orm.exc import StaleDataError

from hr_portal.core.exceptions import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from hr_portal.models.employee import Employee
from hr_portal.models.leave_balance import LeaveBalance
from hr_portal.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from hr_portal.models.user import User
from hr_portal.services.audit import AuditService
from hr_portal.services.base import BaseService
from hr_portal.services.leave_balance import AdjustDirection, adjust_balance, initialize_balance
from hr_portal.services.notification import NotificationService

logger = logging.getLogger(__name__)

HALF_DAY = 0.5


def calculate_duration(start_date: date, end_date: date, is_half_day: bool = False) -> float:
    """Inclusive day span, or half a day."""
    if is_half_day:
        return HALF_DAY
    return float((end_date - start_date).days + 1)


def is_balance_exempt(leave_type: str) -> bool:
    return leave_type == LeaveType.UNPAID.value


def _year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


class LeaveService(BaseService):
    """Leave request workflow bound to one request session."""

    def _commit(self):
        try:
            self.db.commit()
        except (StaleDataError, IntegrityError) as e:
            self.db.rollback()
            self.log_warning(f"Concurrent leave update rejected: {e}")
            raise ConflictError("Leave record was modified by another request. Please retry.")

    def _ledger(self, employee_id: int, year: int) -> LeaveBalance:
        try:
            return initialize_balance(self.db, employee_id, year)
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Leave balance was created by another request. Please retry.")

    def _get_request(self, request_id: int) -> LeaveRequest:
        leave = self.db.get(LeaveRequest, request_id)
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def _check_balance(self, balance: LeaveBalance, leave_type: str, duration: float):
        if is_balance_exempt(leave_type):
            return
        available = balance.available(leave_type)
        if available < duration:
            raise ValidationError(
                f"Insufficient {leave_type} leave balance. "
                f"Available: {available:g} days, Requested: {duration:g} days",
                details={"leave_type": leave_type, "available": available, "requested": duration},
            )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def submit(
        self,
        employee_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        is_half_day: bool = False,
        half_day_type: Optional[str] = None,
        emergency_contact: str = "",
    ) -> LeaveRequest:
        if not all([employee_id, leave_type, start_date, end_date, reason]):
            raise ValidationError("Missing required fields")

        employee = self.db.get(Employee, employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        if start_date > end_date:
            raise ValidationError("End date cannot be before start date")
        if is_half_day and start_date != end_date:
            raise ValidationError("A half-day leave must start and end on the same date")

        duration = calculate_duration(start_date, end_date, is_half_day)

        # Charged against the ledger of the year the leave starts in
        balance = self._ledger(employee_id, start_date.year)
        self._check_balance(balance, leave_type, duration)

        leave = LeaveRequest(
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            is_half_day=is_half_day,
            half_day_type=(half_day_type or "morning") if is_half_day else None,
            duration=duration,
            reason=reason,
            emergency_contact=emergency_contact or "",
            status=LeaveStatus.PENDING.value,
        )
        self.db.add(leave)
        self._commit()
        self.db.refresh(leave)
        self.log_info(f"Leave request {leave.id} submitted by employee {employee_id} ({leave_type}, {duration:g} days)")
        return leave

    def set_status(
        self,
        request_id: int,
        status: str,
        approver: User,
        rejection_reason: Optional[str] = None,
    ) -> LeaveRequest:
        if status not in (LeaveStatus.APPROVED.value, LeaveStatus.REJECTED.value):
            raise ValidationError('Invalid status. Must be "approved" or "rejected"')

        leave = self._get_request(request_id)
        if leave.status != LeaveStatus.PENDING.value:
            raise ConflictError(f"Leave request is already {leave.status}")

        before_state = {"status": leave.status, "approved_by": leave.approved_by}
        balance_after = None

        if status == LeaveStatus.APPROVED.value:
            # Balance may have moved since submission
            balance = self._ledger(leave.employee_id, leave.start_date.year)
            self._check_balance(balance, leave.leave_type, leave.duration)
            adjust_balance(balance, leave.leave_type, leave.duration, AdjustDirection.DEDUCT)
            balance_after = balance.bucket(leave.leave_type)
        else:
            leave.rejection_reason = rejection_reason or ""

        leave.status = status
        leave.approved_by = approver.id
        leave.approved_at = datetime.now(timezone.utc)

        AuditService.log(
            self.db,
            action=f"leave_{status}",
            entity_type="leave_request",
            entity_id=leave.id,
            user_id=approver.id,
            user_role=approver.role,
            details={
                "employee_id": leave.employee_id,
                "leave_type": leave.leave_type,
                "duration": leave.duration,
                "rejection_reason": leave.rejection_reason or None,
                "balance": balance_after,
            },
            before_state=before_state,
            after_state={"status": leave.status, "approved_by": leave.approved_by},
        )

        employee = leave.employee
        if status == LeaveStatus.APPROVED.value:
            NotificationService.notify_user(
                self.db, employee.user_id, "Leave Approved",
                f"Your {leave.leave_type} leave for {leave.duration:g} day(s) starting {leave.start_date} has been approved.",
                "success",
            )
        else:
            NotificationService.notify_user(
                self.db, employee.user_id, "Leave Rejected",
                f"Your {leave.leave_type} leave starting {leave.start_date} has been rejected. Reason: {leave.rejection_reason or 'n/a'}",
                "error",
            )

        self._commit()
        self.db.refresh(leave)
        self.log_info(f"Leave request {leave.id} {status} by user {approver.id}")
        return leave

    def cancel(self, request_id: int, requester_employee_id: Optional[int]) -> LeaveRequest:
        leave = self._get_request(request_id)

        if requester_employee_id is None or leave.employee_id != requester_employee_id:
            raise AccessDeniedError("You can only cancel your own leave requests")

        if leave.status != LeaveStatus.PENDING.value:
            raise ConflictError(f"Cannot cancel {leave.status} leave request")

        leave.status = LeaveStatus.CANCELLED.value
        AuditService.log(
            self.db,
            action="leave_cancelled",
            entity_type="leave_request",
            entity_id=leave.id,
            user_id=None,
            user_role="employee",
            details={"employee_id": leave.employee_id},
            before_state={"status": LeaveStatus.PENDING.value},
            after_state={"status": leave.status},
        )
        self._commit()
        self.db.refresh(leave)
        self.log_info(f"Leave request {leave.id} cancelled by employee {requester_employee_id}")
        return leave

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_on_leave(self, on_date: date) -> List[LeaveRequest]:
        """Approved requests whose [start_date, end_date] contains ``on_date``."""
        return (
            self.db.query(LeaveRequest)
            .options(joinedload(LeaveRequest.employee))
            .filter(
                LeaveRequest.status == LeaveStatus.APPROVED.value,
                LeaveRequest.start_date <= on_date,
                LeaveRequest.end_date >= on_date,
            )
            .order_by(LeaveRequest.start_date)
            .all()
        )

    def list_requests(
        self,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
        department: Optional[str] = None,
        year: Optional[int] = None,
        page: int = 1,
        limit: int = 50,
    ) -> Tuple[List[LeaveRequest], int]:
        """Newest first, paginated. ``status``/``department`` of "all" mean no filter."""
        query = self.db.query(LeaveRequest).options(joinedload(LeaveRequest.employee))

        if employee_id is not None:
            query = query.filter(LeaveRequest.employee_id == employee_id)
        if status and status != "all":
            query = query.filter(LeaveRequest.status == status)
        if department and department != "all":
            query = query.join(Employee, LeaveRequest.employee_id == Employee.id).filter(
                Employee.department == department
            )
        if year:
            first, last = _year_bounds(year)
            query = query.filter(LeaveRequest.start_date >= first, LeaveRequest.start_date <= last)

        total = query.count()
        items = (
            query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def list_pending(self, department: Optional[str] = None, page: int = 1, limit: int = 50):
        return self.list_requests(status=LeaveStatus.PENDING.value, department=department, page=page, limit=limit)

    # ------------------------------------------------------------------
    # Ledger access
    # ------------------------------------------------------------------

    def get_balance(self, employee_id: int, year: int) -> LeaveBalance:
        if not self.db.get(Employee, employee_id):
            raise NotFoundError("Employee not found")
        balance = self._ledger(employee_id, year)
        self._commit()
        return balance

    def adjust(
        self,
        employee_id: int,
        year: int,
        leave_type: str,
        days: float,
        direction: AdjustDirection,
        actor: User,
        note: Optional[str] = None,
    ) -> LeaveBalance:
        """Manual HR correction of a bucket, e.g. crediting back a revoked leave."""
        balance = self.get_balance(employee_id, year)
        before = balance.bucket(leave_type)
        adjust_balance(balance, leave_type, days, direction)
        AuditService.log(
            self.db,
            action=f"leave_balance_{direction.value}",
            entity_type="leave_balance",
            entity_id=balance.id,
            user_id=actor.id,
            user_role=actor.role,
            details={"employee_id": employee_id, "year": year, "leave_type": leave_type, "days": days, "note": note},
            before_state=before,
            after_state=balance.bucket(leave_type),
        )
        self._commit()
        self.db.refresh(balance)
        return balance
