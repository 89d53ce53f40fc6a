from hr_portal.services.base import BaseService
from hr_portal.models.audit_log import AuditLog
from typing import Optional

class AuditService(BaseService):
    def log_action(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        user_id: Optional[int],
        user_role: Optional[str],
        details: dict,
        before_state: Optional[dict] = None,
        after_state: Optional[dict] = None
    ):
        """
        Stage an audit log entry in the caller's transaction.
        Strictly append-only; the caller commits.
        """
        try:
            def sanitize(obj):
                if hasattr(obj, "model_dump"):
                    return obj.model_dump(mode="json")
                if hasattr(obj, "value"):
                    return obj.value
                if isinstance(obj, dict):
                    return {k: sanitize(v) for k, v in obj.items()}
                if isinstance(obj, list):
                    return [sanitize(i) for i in obj]
                return obj

            db_log = AuditLog(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=user_id,
                user_role=sanitize(user_role),
                details=sanitize(details),
                before_state=sanitize(before_state),
                after_state=sanitize(after_state)
            )
            self.db.add(db_log)
            return db_log
        except Exception as e:
            # Never break the main app flow because of an audit failure
            self._logger.error(f"FAILED TO AUDIT LOG: {e}", exc_info=True)
            return None

    # Convenience wrapper for one-off calls
    @staticmethod
    def log(db, *args, **kwargs):
        service = AuditService(db)
        return service.log_action(*args, **kwargs)
