# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    user, employee, leave_request, leave_balance, attendance,
    announcement, asset, invoice, notification, audit_log
)

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .employee import Employee
from .leave_request import LeaveRequest, LeaveStatus, LeaveType
from .leave_balance import LeaveBalance
from .notification import Notification

__all__ = [
    "User",
    "UserRole",
    "Employee",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "LeaveBalance",
    "Notification",
]
