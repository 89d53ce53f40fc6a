"""
Leave Balance Ledger

One ``LeaveBalance`` row per employee per calendar year. Rows are created
lazily with the configured default allotments and mutated only through
``adjust_balance``, which keeps ``available = max(0, total - used)``.
"""
import enum
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from hr_portal.core.config import settings
from hr_portal.core.exceptions import ValidationError
from hr_portal.models.leave_balance import LeaveBalance, LEAVE_TYPES

logger = logging.getLogger(__name__)


class AdjustDirection(str, enum.Enum):
    DEDUCT = "deduct"
    ADD = "add"


def get_balance(db: Session, employee_id: int, year: int):
    return db.query(LeaveBalance).filter(
        LeaveBalance.employee_id == employee_id,
        LeaveBalance.year == year
    ).first()


def initialize_balance(db: Session, employee_id: int, year: int) -> LeaveBalance:
    """
    Return the employee's ledger for ``year``, creating it with default
    allotments if it does not exist yet. Safe to call repeatedly.
    """
    balance = get_balance(db, employee_id, year)
    if balance:
        return balance

    balance = LeaveBalance(employee_id=employee_id, year=year)
    for leave_type in LEAVE_TYPES:
        total = float(settings.leave.default_allotments.get(leave_type, 0.0))
        setattr(balance, f"{leave_type}_total", total)
        setattr(balance, f"{leave_type}_used", 0.0)
        setattr(balance, f"{leave_type}_available", total)

    db.add(balance)
    # A concurrent duplicate (employee_id, year) fails here with IntegrityError
    db.flush()
    logger.info(f"Initialized {year} leave balance for employee {employee_id}")
    return balance


def adjust_balance(
    balance: LeaveBalance,
    leave_type: str,
    days: float,
    direction: AdjustDirection = AdjustDirection.DEDUCT
) -> LeaveBalance:
    """
    Move ``days`` into (deduct) or out of (add) the ``used`` counter of a bucket.
    """
    if leave_type not in LEAVE_TYPES:
        raise ValidationError(f"Unknown leave type: {leave_type}")
    if days < 0:
        raise ValidationError("Days must not be negative")

    total = getattr(balance, f"{leave_type}_total") or 0.0
    used = getattr(balance, f"{leave_type}_used") or 0.0

    if direction == AdjustDirection.DEDUCT:
        used = used + days
    elif direction == AdjustDirection.ADD:
        used = max(0.0, used - days)
    else:
        raise ValidationError(f"Unknown adjustment direction: {direction}")

    setattr(balance, f"{leave_type}_used", used)
    setattr(balance, f"{leave_type}_available", max(0.0, total - used))
    balance.updated_at = datetime.now(timezone.utc)
    return balance
