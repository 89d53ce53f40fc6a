from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from datetime import date, datetime
from typing import Annotated, Literal, Optional

from hr_portal.models.leave_request import LeaveType, HalfDayType
from hr_portal.services.leave_balance import AdjustDirection

class LeaveRequestCreate(BaseModel):
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Annotated[str, StringConstraints(strip_whitespace=True, min_length=10, max_length=500)]
    is_half_day: bool = False
    half_day_type: Optional[HalfDayType] = None
    emergency_contact: Optional[str] = None

class LeaveStatusUpdate(BaseModel):
    status: Literal["approved", "rejected"]
    rejection_reason: Optional[str] = Field(default=None, max_length=500)

class EmployeeBrief(BaseModel):
    id: int
    name: str
    email: str
    department: Optional[str] = None
    designation: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class LeaveRequestResponse(BaseModel):
    id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    is_half_day: bool
    half_day_type: Optional[str] = None
    duration: float
    reason: str
    emergency_contact: Optional[str] = None
    status: str
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    employee: Optional[EmployeeBrief] = None

    model_config = ConfigDict(from_attributes=True)

class BalanceBucket(BaseModel):
    total: float
    used: float
    available: float

class LeaveBalanceResponse(BaseModel):
    id: int
    employee_id: int
    year: int
    casual: BalanceBucket
    sick: BalanceBucket
    earned: BalanceBucket
    unpaid: BalanceBucket
    maternity: BalanceBucket
    paternity: BalanceBucket
    carry_forward: float
    updated_at: Optional[datetime] = None

    @classmethod
    def from_ledger(cls, balance) -> "LeaveBalanceResponse":
        return cls(
            id=balance.id,
            employee_id=balance.employee_id,
            year=balance.year,
            carry_forward=balance.carry_forward or 0.0,
            updated_at=balance.updated_at,
            **{t.value: BalanceBucket(**balance.bucket(t.value)) for t in LeaveType},
        )

class LeaveBalanceAdjust(BaseModel):
    leave_type: LeaveType
    days: float = Field(gt=0, multiple_of=0.5)
    direction: AdjustDirection
    year: Optional[int] = None
    note: Optional[str] = None

class OnLeaveEntry(BaseModel):
    id: int
    employee_id: int
    name: str
    email: str
    department: Optional[str] = None
    designation: Optional[str] = None
    leave_type: str
    start_date: date
    end_date: date
    duration: float
    is_half_day: bool
    half_day_type: Optional[str] = None
