from sqlalchemy import Column, Integer, String, Date, Float, Text, DateTime, JSON
from sqlalchemy.sql import func
from hr_portal.database import Base
import enum


class InvoiceStatus(str, enum.Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, index=True, nullable=False)
    client_name = Column(String, nullable=False)
    client_email = Column(String, nullable=False)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    items = Column(JSON, default=list)  # [{description, quantity, amount}]
    currency = Column(String(3), default="USD")
    subtotal = Column(Float, nullable=False)
    total = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(String, default=InvoiceStatus.DRAFT.value, index=True)
    created_by = Column(String, nullable=False)  # user id, or "admin" for the placeholder token
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
