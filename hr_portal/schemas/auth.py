from pydantic import BaseModel, EmailStr, ConfigDict, Field
from typing import Optional
from hr_portal.models.user import UserRole
from datetime import datetime

class UserBase(BaseModel):
    email: EmailStr
    role: UserRole
    full_name: Optional[str] = None

class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)
    role: UserRole = UserRole.EMPLOYEE

class UserResponse(UserBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_verified: bool
    employee_id: Optional[int] = None
    created_at: Optional[datetime] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: Optional[dict] = None

class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None

class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str

class ForgotPasswordRequest(BaseModel):
    email: EmailStr

class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str
    new_password: str = Field(min_length=8)

class MessageResponse(BaseModel):
    message: str
