from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from hr_portal.core.schemas import ApiResponse, Pagination
from hr_portal.core.security import sanitize_input
from hr_portal.database import get_db
from hr_portal.models.announcement import Announcement, AnnouncementRead
from hr_portal.models.employee import Employee
from hr_portal.models.user import User
from hr_portal.routers.auth_deps import get_current_employee, require_hr
from hr_portal.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
    EmployeeAnnouncement,
)
from hr_portal.services.audit import AuditService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/announcements", tags=["announcements"])

SANITIZED_FIELDS = ("title", "content")


def _get_announcement_or_404(db: Session, announcement_id: int) -> Announcement:
    announcement = db.get(Announcement, announcement_id)
    if not announcement:
        raise HTTPException(status_code=404, detail="Announcement not found")
    return announcement


def _targets(announcement: Announcement, employee: Employee) -> bool:
    if announcement.target_audience != "specific":
        return True
    return employee.department in (announcement.departments or [])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: AnnouncementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    title = sanitize_input(payload.title)
    content = sanitize_input(payload.content)
    if not title or not content:
        raise HTTPException(status_code=400, detail="Title and content are required")

    profile = current_user.employee_profile if current_user.id is not None else None
    announcement = Announcement(
        title=title,
        content=content,
        priority=payload.priority,
        author_id=current_user.id,
        author_name=current_user.full_name or "Admin",
        author_designation=(profile.designation if profile and profile.designation else current_user.role.value.title()),
        image=payload.image,
        target_audience=payload.target_audience,
        departments=payload.departments,
    )
    db.add(announcement)
    db.flush()

    AuditService.log(
        db,
        action="create_announcement",
        entity_type="announcement",
        entity_id=announcement.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"title": announcement.title, "priority": announcement.priority},
    )
    db.commit()
    db.refresh(announcement)
    return ApiResponse.ok(
        data=AnnouncementResponse.model_validate(announcement),
        message="Announcement created successfully",
    )


@router.get("")
def list_announcements(
    priority: Optional[str] = None,
    is_active: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    query = db.query(Announcement)
    if priority and priority != "all":
        query = query.filter(Announcement.priority == priority)
    if is_active is not None:
        query = query.filter(Announcement.is_active == is_active)

    total = query.count()
    items = (
        query.order_by(Announcement.created_at.desc(), Announcement.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ApiResponse.ok(
        data=[AnnouncementResponse.model_validate(a) for a in items],
        pagination=Pagination.build(page, limit, len(items), total),
    )


@router.get("/feed")
def announcement_feed(
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    announcements = (
        db.query(Announcement)
        .filter(Announcement.is_active.is_(True))
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        .all()
    )
    read_ids = {
        r.announcement_id
        for r in db.query(AnnouncementRead).filter(AnnouncementRead.employee_id == employee.id).all()
    }

    feed = [
        EmployeeAnnouncement(
            id=a.id,
            title=a.title,
            content=a.content,
            priority=a.priority,
            author_name=a.author_name,
            author_designation=a.author_designation,
            image=a.image,
            created_at=a.created_at,
            is_new=a.id not in read_ids,
        )
        for a in announcements
        if _targets(a, employee)
    ]
    return ApiResponse.ok(data=feed)


@router.post("/{announcement_id}/read")
def mark_announcement_read(
    announcement_id: int,
    db: Session = Depends(get_db),
    employee: Employee = Depends(get_current_employee),
):
    _get_announcement_or_404(db, announcement_id)
    existing = db.query(AnnouncementRead).filter(
        AnnouncementRead.announcement_id == announcement_id,
        AnnouncementRead.employee_id == employee.id,
    ).first()
    if not existing:
        db.add(AnnouncementRead(announcement_id=announcement_id, employee_id=employee.id))
        db.commit()
    return ApiResponse.ok(message="Announcement marked as read")


@router.put("/{announcement_id}")
def update_announcement(
    announcement_id: int,
    payload: AnnouncementUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    announcement = _get_announcement_or_404(db, announcement_id)
    changes = payload.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if field in SANITIZED_FIELDS and value is not None:
            value = sanitize_input(value)
        setattr(announcement, field, value)

    AuditService.log(
        db,
        action="update_announcement",
        entity_type="announcement",
        entity_id=announcement.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"fields": list(changes)},
    )
    db.commit()
    db.refresh(announcement)
    return ApiResponse.ok(
        data=AnnouncementResponse.model_validate(announcement),
        message="Announcement updated successfully",
    )


@router.delete("/{announcement_id}")
def delete_announcement(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    announcement = _get_announcement_or_404(db, announcement_id)
    AuditService.log(
        db,
        action="delete_announcement",
        entity_type="announcement",
        entity_id=announcement.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"title": announcement.title},
    )
    db.delete(announcement)
    db.commit()
    return ApiResponse.ok(message="Announcement deleted successfully")
