from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hr_portal.database import Base
from hr_portal.models.leave_request import LeaveType

LEAVE_TYPES = [t.value for t in LeaveType]


class LeaveBalance(Base):
    """
    Yearly leave ledger for one employee.

    Each leave type is a bucket of three columns: ``<type>_total``,
    ``<type>_used`` and ``<type>_available``. ``available`` is always
    ``max(0, total - used)``.
    """
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("employee_id", "year", name="uq_leave_balance_employee_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)

    casual_total = Column(Float, default=0.0, nullable=False)
    casual_used = Column(Float, default=0.0, nullable=False)
    casual_available = Column(Float, default=0.0, nullable=False)
    sick_total = Column(Float, default=0.0, nullable=False)
    sick_used = Column(Float, default=0.0, nullable=False)
    sick_available = Column(Float, default=0.0, nullable=False)
    earned_total = Column(Float, default=0.0, nullable=False)
    earned_used = Column(Float, default=0.0, nullable=False)
    earned_available = Column(Float, default=0.0, nullable=False)
    unpaid_total = Column(Float, default=0.0, nullable=False)
    unpaid_used = Column(Float, default=0.0, nullable=False)
    unpaid_available = Column(Float, default=0.0, nullable=False)
    maternity_total = Column(Float, default=0.0, nullable=False)
    maternity_used = Column(Float, default=0.0, nullable=False)
    maternity_available = Column(Float, default=0.0, nullable=False)
    paternity_total = Column(Float, default=0.0, nullable=False)
    paternity_used = Column(Float, default=0.0, nullable=False)
    paternity_available = Column(Float, default=0.0, nullable=False)

    carry_forward = Column(Float, default=0.0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    version = Column(Integer, nullable=False, default=1)

    employee = relationship("Employee", back_populates="leave_balances")

    __mapper_args__ = {"version_id_col": version}

    def bucket(self, leave_type: str) -> dict:
        return {
            "total": getattr(self, f"{leave_type}_total"),
            "used": getattr(self, f"{leave_type}_used"),
            "available": getattr(self, f"{leave_type}_available"),
        }

    def available(self, leave_type: str) -> float:
        return getattr(self, f"{leave_type}_available")
