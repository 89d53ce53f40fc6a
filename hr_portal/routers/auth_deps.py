"""
Authentication and role-based access dependencies for FastAPI endpoints.
"""
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import List, Callable
from hr_portal.core.config import settings
from hr_portal.database import get_db
from hr_portal.models.employee import Employee
from hr_portal.models.user import User, UserRole
from hr_portal.services import auth as auth_service
from hr_portal.schemas.auth import TokenData

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

APPROVER_ROLES = [UserRole.ADMIN, UserRole.HR, UserRole.MANAGER]
HR_ROLES = [UserRole.ADMIN, UserRole.HR]


def _placeholder_admin() -> User:
    """Transient admin principal for the configured placeholder token. Never persisted."""
    return User(
        id=None,
        email="admin@placeholder.local",
        full_name="Admin User",
        role=UserRole.ADMIN,
        is_active=True,
        is_verified=True,
    )


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the JWT token.
    """
    if settings.admin_placeholder_token and token == settings.admin_placeholder_token:
        logger.info("Placeholder admin token accepted")
        return _placeholder_admin()

    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="TOKEN_EXPIRED",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    email = payload.get("sub")
    if email is None:
        logger.warning("Authentication failed: Missing subject (email) in token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing subject in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = TokenData(email=email, role=payload.get("role"))
    user = db.query(User).filter(User.email == token_data.email).first()

    if user is None:
        logger.warning(f"Authentication failed: User {email} not found in database")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        logger.warning(f"Authentication failed: User {email} is inactive")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive"
        )
    return user


def require_role(allowed_roles: List[UserRole]) -> Callable:
    """
    Dependency factory that checks if the user has one of the allowed roles.

    Usage:
        @router.get("/admin-only")
        def admin_endpoint(user: User = Depends(require_role([UserRole.ADMIN]))):
            ...
    """
    def role_checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            logger.warning(f"Access denied for {current_user.email}: role {current_user.role.value}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return current_user
    return role_checker


def require_hr():
    """Shorthand for requiring HR or admin."""
    return require_role(HR_ROLES)


def require_approver():
    """Shorthand for roles that may approve leave."""
    return require_role(APPROVER_ROLES)


def get_current_employee(current_user: User = Depends(get_current_user)) -> Employee:
    """The employee profile linked to the logged-in account."""
    employee = current_user.employee_profile if current_user.id is not None else None
    if employee is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee profile not found"
        )
    return employee


def check_employee_access(user: User, employee_id: int):
    """
    Approvers can read any employee's leave data; everyone else only their own.
    Raises HTTPException if access is denied.
    """
    if user.can_approve:
        return
    profile = user.employee_profile if user.id is not None else None
    if profile is None or profile.id != employee_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. You can only access your own records."
        )
