from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import date, datetime
from typing import List, Literal, Optional

InvoiceStatusValue = Literal["draft", "sent", "paid", "overdue"]

class InvoiceItem(BaseModel):
    description: str
    quantity: float = Field(ge=0)
    amount: float = Field(ge=0)

class InvoiceCreate(BaseModel):
    invoice_number: str
    client_name: str
    client_email: EmailStr
    invoice_date: date
    due_date: date
    items: List[InvoiceItem] = Field(min_length=1)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    notes: Optional[str] = None

class InvoiceUpdate(BaseModel):
    status: Optional[InvoiceStatusValue] = None
    notes: Optional[str] = None
    due_date: Optional[date] = None

class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str
    client_name: str
    client_email: str
    invoice_date: date
    due_date: date
    items: List[InvoiceItem]
    currency: str
    subtotal: float
    total: float
    notes: Optional[str] = None
    status: str
    created_by: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
