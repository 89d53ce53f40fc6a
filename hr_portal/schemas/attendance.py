from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from typing import Optional

class AttendanceResponse(BaseModel):
    id: int
    employee_id: int
    date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    total_hours: Optional[float] = None
    status: str

    model_config = ConfigDict(from_attributes=True)
