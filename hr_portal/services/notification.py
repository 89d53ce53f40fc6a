from typing import Optional
from sqlalchemy.orm import Session
from hr_portal.models.notification import Notification

class NotificationService:
    @staticmethod
    def create_notification(
        db: Session,
        user_id: int,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> Notification:
        """
        Stage a notification in the caller's transaction.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link
        )
        db.add(notification)
        return notification

    @staticmethod
    def notify_user(
        db: Session,
        user_id: Optional[int],
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> Optional[Notification]:
        """
        Standardized notification trigger. Employees without a login account are skipped.
        """
        if user_id is None:
            return None
        return NotificationService.create_notification(db, user_id, title, message, type, link)
