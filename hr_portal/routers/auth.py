from datetime import datetime, timedelta, timezone
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from hr_portal.core.config import settings
from hr_portal.core.exceptions import AuthenticationError
from hr_portal.core.limiter import limiter
from hr_portal.database import get_db
from hr_portal.models.employee import Employee
from hr_portal.models.user import User, UserRole
from hr_portal.routers.auth_deps import get_current_user
from hr_portal.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    Token,
    UserResponse,
    VerifyOtpRequest,
)
from hr_portal.services import auth as auth_service
from hr_portal.services import mailer
from hr_portal.services.audit import AuditService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def _issue_token(user: User, employee_id=None) -> Token:
    token_data = {
        "sub": user.email,
        "role": user.role.value,
        "user_id": user.id,
        "employee_id": employee_id,
    }
    access_token = auth_service.create_access_token(data=token_data)
    return Token(
        access_token=access_token,
        token_type="bearer",
        user={
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "role": user.role.value,
            "employee_id": employee_id,
        },
    )


def _get_user_or_404(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    if payload.role == UserRole.ADMIN:
        raise HTTPException(status_code=400, detail="Admin accounts cannot be self-registered")

    existing = db.query(User).filter(User.email == payload.email).first()
    if existing:
        raise HTTPException(status_code=400, detail="User already exists")

    otp = auth_service.generate_otp()
    user = User(
        email=payload.email,
        full_name=payload.name,
        hashed_password=auth_service.get_password_hash(payload.password),
        role=payload.role,
        is_active=True,
        is_verified=False,
        otp_hash=auth_service.get_password_hash(otp),
        otp_expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.otp_expire_minutes),
    )
    db.add(user)
    db.flush()

    # Link a pre-existing employee record created by HR for this address
    employee = db.query(Employee).filter(Employee.email == payload.email, Employee.user_id.is_(None)).first()
    if employee:
        employee.user_id = user.id

    AuditService.log(
        db,
        action="register",
        entity_type="user",
        entity_id=user.id,
        user_id=user.id,
        user_role=user.role,
        details={"email": user.email, "linked_employee_id": employee.id if employee else None},
    )
    db.commit()

    mailer.send_otp_email(user.email, user.full_name, otp)
    logger.info(f"User registered: {user.email}")
    return {"message": "Registration successful. Check your email for the verification code."}


@router.post("/verify-otp", response_model=Token)
def verify_otp(payload: VerifyOtpRequest, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, payload.email)

    if user.is_verified:
        raise HTTPException(status_code=400, detail="User already verified")
    if auth_service.is_expired(user.otp_expires_at):
        raise HTTPException(status_code=400, detail="OTP has expired")
    if not auth_service.verify_password(payload.otp, user.otp_hash):
        raise HTTPException(status_code=400, detail="Invalid OTP")

    user.is_verified = True
    user.otp_hash = None
    user.otp_expires_at = None
    db.commit()
    db.refresh(user)

    employee_id = user.employee_profile.id if user.employee_profile else None
    return _issue_token(user, employee_id)


@router.post("/login", response_model=Token)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == login_data.email).first()
    if not user or not auth_service.verify_password(login_data.password, user.hashed_password):
        # Log failed login
        AuditService.log(
            db,
            action="failed_login",
            entity_type="user",
            entity_id=None,
            user_id=None,
            user_role=None,
            details={"email": login_data.email, "reason": "invalid_credentials"}
        )
        db.commit()
        raise AuthenticationError("Incorrect email or password")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is inactive")
    if not user.is_verified:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Please verify your email first")

    employee_id = user.employee_profile.id if user.employee_profile else None
    user.last_login = datetime.now(timezone.utc)

    # Log successful login
    AuditService.log(
        db,
        action="login",
        entity_type="user",
        entity_id=user.id,
        user_id=user.id,
        user_role=user.role,
        details={"email": user.email},
    )
    db.commit()
    db.refresh(user)

    return _issue_token(user, employee_id)


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    if current_user.id is None:
        raise HTTPException(status_code=404, detail="No account behind the placeholder token")
    user_data = UserResponse.model_validate(current_user)
    user_data.employee_id = current_user.employee_profile.id if current_user.employee_profile else None
    return user_data


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, payload.email)

    otp = auth_service.generate_otp()
    user.reset_otp_hash = auth_service.get_password_hash(otp)
    user.reset_otp_expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.reset_otp_expire_minutes)
    db.commit()

    mailer.send_password_reset_email(user.email, user.full_name, otp)
    return {"message": "Password reset code sent to your email"}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = _get_user_or_404(db, payload.email)

    if auth_service.is_expired(user.reset_otp_expires_at):
        raise HTTPException(status_code=400, detail="Reset code has expired")
    if not auth_service.verify_password(payload.otp, user.reset_otp_hash):
        raise HTTPException(status_code=400, detail="Invalid reset code")

    user.hashed_password = auth_service.get_password_hash(payload.new_password)
    user.reset_otp_hash = None
    user.reset_otp_expires_at = None

    AuditService.log(
        db,
        action="password_reset",
        entity_type="user",
        entity_id=user.id,
        user_id=user.id,
        user_role=user.role,
        details={"email": user.email},
    )
    db.commit()
    logger.info(f"Password reset for {user.email}")
    return {"message": "Password reset successful"}
