import calendar
import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from hr_portal.core.exceptions import ValidationError
from hr_portal.models.attendance import AttendanceRecord
from hr_portal.services.auth import as_utc

logger = logging.getLogger(__name__)


def _today_record(db: Session, employee_id: int, today: date) -> Optional[AttendanceRecord]:
    return db.query(AttendanceRecord).filter(
        AttendanceRecord.employee_id == employee_id,
        AttendanceRecord.date == today
    ).first()


def clock_in(db: Session, employee_id: int, now: Optional[datetime] = None) -> AttendanceRecord:
    now = now or datetime.now(timezone.utc)
    record = _today_record(db, employee_id, now.date())

    if record and record.clock_in:
        raise ValidationError("Already clocked in today")

    if record:
        record.clock_in = now
    else:
        record = AttendanceRecord(employee_id=employee_id, date=now.date(), clock_in=now, status="present")
        db.add(record)

    db.commit()
    db.refresh(record)
    logger.info(f"Employee {employee_id} clocked in")
    return record


def clock_out(db: Session, employee_id: int, now: Optional[datetime] = None) -> AttendanceRecord:
    now = now or datetime.now(timezone.utc)
    record = _today_record(db, employee_id, now.date())

    if not record or not record.clock_in:
        raise ValidationError("Please clock in first")
    if record.clock_out:
        raise ValidationError("Already clocked out today")

    record.clock_out = now
    worked = (now - as_utc(record.clock_in)).total_seconds() / 3600
    record.total_hours = round(worked, 2)

    db.commit()
    db.refresh(record)
    logger.info(f"Employee {employee_id} clocked out after {record.total_hours}h")
    return record


def list_attendance(
    db: Session,
    employee_id: int,
    month: Optional[int] = None,
    year: Optional[int] = None
) -> List[AttendanceRecord]:
    query = db.query(AttendanceRecord).filter(AttendanceRecord.employee_id == employee_id)
    if month and year:
        last_day = calendar.monthrange(year, month)[1]
        query = query.filter(
            AttendanceRecord.date >= date(year, month, 1),
            AttendanceRecord.date <= date(year, month, last_day)
        )
    return query.order_by(AttendanceRecord.date.desc()).all()
