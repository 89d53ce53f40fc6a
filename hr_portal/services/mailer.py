"""
Outbound e-mail hand-off.

Delivery is handled outside this service; messages are recorded in the
application log so an operator or a log shipper can forward them. The code
itself is only logged in development.
"""
import logging

from hr_portal.core.config import settings

logger = logging.getLogger(__name__)


def _dispatch(kind: str, email: str, name: str, otp: str) -> None:
    extra = {"mail_to": email, "mail_kind": kind, "recipient_name": name}
    if settings.environment == "development":
        extra["otp"] = otp
    logger.info(f"Queued {kind} mail", extra=extra)


def send_otp_email(email: str, name: str, otp: str) -> None:
    _dispatch("verify_otp", email, name, otp)


def send_password_reset_email(email: str, name: str, otp: str) -> None:
    _dispatch("reset_otp", email, name, otp)
