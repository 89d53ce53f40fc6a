from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Literal, Optional

Priority = Literal["low", "medium", "high"]
Audience = Literal["all", "specific"]

class AnnouncementCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=1000)
    priority: Priority = "medium"
    target_audience: Audience = "all"
    departments: List[str] = []
    image: Optional[str] = None

class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    priority: Optional[Priority] = None
    target_audience: Optional[Audience] = None
    departments: Optional[List[str]] = None
    image: Optional[str] = None
    is_active: Optional[bool] = None

class AnnouncementResponse(BaseModel):
    id: int
    title: str
    content: str
    priority: str
    author_id: Optional[int] = None
    author_name: str
    author_designation: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    target_audience: str
    departments: List[str] = []
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class EmployeeAnnouncement(BaseModel):
    id: int
    title: str
    content: str
    priority: str
    author_name: str
    author_designation: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    is_new: bool
