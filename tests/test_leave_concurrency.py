"""
Optimistic-lock behaviour of the leave workflow.

These tests commit for real, so they run on a private in-memory database
instead of the shared rollback-per-test connection.
"""
import pytest
from datetime import date
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hr_portal.core.exceptions import ConflictError
from hr_portal.database import Base
from hr_portal.models.employee import Employee
from hr_portal.models.leave_request import LeaveRequest, LeaveStatus
from hr_portal.models.notification import Notification
from hr_portal.models.user import User, UserRole
from hr_portal.services import leave_balance
from hr_portal.services.leave_balance import get_balance, initialize_balance
from hr_portal.services.leave_service import LeaveService

LEAVE_DAY = date(2025, 6, 12)


@pytest.fixture
def committed_session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def approver(committed_session):
    user = User(
        email="hr@hrportal.test",
        hashed_password="unused",
        role=UserRole.HR,
        is_active=True,
        is_verified=True,
    )
    committed_session.add(user)
    committed_session.commit()
    return user


@pytest.fixture
def staff(committed_session):
    user = User(
        email="jane@hrportal.test",
        hashed_password="unused",
        role=UserRole.EMPLOYEE,
        is_active=True,
        is_verified=True,
    )
    committed_session.add(user)
    committed_session.flush()
    employee = Employee(name="Jane Doe", email="jane@hrportal.test", department="Engineering", user_id=user.id)
    committed_session.add(employee)
    committed_session.commit()
    return employee


def _pending_request(session, employee):
    return LeaveService(session).submit(
        employee.id, "casual", LEAVE_DAY, LEAVE_DAY, "Family function out of town"
    )


@pytest.mark.parametrize("table", ["leave_requests", "leave_balances"])
def test_stale_version_on_approval_is_conflict(committed_session, staff, approver, table):
    leave = _pending_request(committed_session, staff)
    balance = get_balance(committed_session, staff.id, LEAVE_DAY.year)
    row_id = leave.id if table == "leave_requests" else balance.id

    # Another writer bumps the row after this session loaded it
    committed_session.execute(
        text(f"UPDATE {table} SET version = version + 1 WHERE id = :id"), {"id": row_id}
    )

    with pytest.raises(ConflictError) as exc_info:
        LeaveService(committed_session).set_status(leave.id, LeaveStatus.APPROVED.value, approver)
    assert exc_info.value.status_code == 409

    # Nothing from the failed approval survives
    assert committed_session.get(LeaveRequest, leave.id).status == LeaveStatus.PENDING.value
    balance = get_balance(committed_session, staff.id, LEAVE_DAY.year)
    assert balance.casual_used == 0
    assert balance.casual_available == 12
    assert committed_session.query(Notification).count() == 0


def test_stale_version_on_cancel_is_conflict(committed_session, staff):
    leave = _pending_request(committed_session, staff)
    committed_session.execute(
        text("UPDATE leave_requests SET version = version + 1 WHERE id = :id"), {"id": leave.id}
    )

    with pytest.raises(ConflictError):
        LeaveService(committed_session).cancel(leave.id, staff.id)
    assert committed_session.get(LeaveRequest, leave.id).status == LeaveStatus.PENDING.value


def test_retry_after_conflict_succeeds(committed_session, staff, approver):
    leave = _pending_request(committed_session, staff)
    committed_session.execute(
        text("UPDATE leave_requests SET version = version + 1 WHERE id = :id"), {"id": leave.id}
    )
    with pytest.raises(ConflictError):
        LeaveService(committed_session).set_status(leave.id, LeaveStatus.APPROVED.value, approver)

    approved = LeaveService(committed_session).set_status(leave.id, LeaveStatus.APPROVED.value, approver)
    assert approved.status == LeaveStatus.APPROVED.value
    assert get_balance(committed_session, staff.id, LEAVE_DAY.year).casual_used == 1


def test_duplicate_ledger_row_is_conflict(committed_session, staff, monkeypatch):
    initialize_balance(committed_session, staff.id, LEAVE_DAY.year)
    committed_session.commit()

    # Simulate a concurrent creator: the lookup misses a row that already exists
    monkeypatch.setattr(leave_balance, "get_balance", lambda db, employee_id, year: None)

    with pytest.raises(ConflictError) as exc_info:
        _pending_request(committed_session, staff)
    assert "Please retry" in exc_info.value.message

    monkeypatch.undo()
    assert committed_session.query(LeaveRequest).count() == 0
    assert get_balance(committed_session, staff.id, LEAVE_DAY.year).casual_used == 0
