"""
Security Alerts

Best-effort side effects that follow a committed security change: the
security-alert email and the realtime force-logout push. Nothing raised in
here reaches the caller.
"""

import logging
from uuid import UUID

from src.app.services.email_service import EmailService, EmailTemplate, send_quietly
from src.app.services.notifier import RealtimeNotifier
from src.domain.base import utcnow
from src.domain.events import ForceLogoutEvent

logger = logging.getLogger(__name__)


class SecurityReason:
    PASSWORD_CHANGED = "password_changed"
    PASSWORD_RESET = "password_reset"
    TWO_FACTOR_DISABLED = "2fa_disabled"
    EMAIL_CHANGED = "email_changed"


_ALERTS = {
    SecurityReason.PASSWORD_CHANGED: (
        "Password Changed",
        "Your password has been changed. Please log in again.",
    ),
    SecurityReason.PASSWORD_RESET: (
        "Password Reset",
        "Your password has been reset. Please log in with your new password.",
    ),
    SecurityReason.TWO_FACTOR_DISABLED: (
        "Two-Factor Authentication Disabled",
        "Two-factor authentication has been disabled. Please log in again.",
    ),
    SecurityReason.EMAIL_CHANGED: (
        "Email Address Changed",
        "The email address on your account has been changed.",
    ),
}


class SecurityAlertDispatcher:
    """Failure boundary for post-commit security notifications"""

    def __init__(self, email_service: EmailService, notifier: RealtimeNotifier):
        self.email_service = email_service
        self.notifier = notifier

    async def send_email_alert(self, user_id: UUID, email: str, reason: str) -> bool:
        event_name, message = _ALERTS[reason]
        sent = await send_quietly(
            self.email_service,
            EmailTemplate.SECURITY_ALERT,
            email,
            {
                "event": event_name,
                "message": message,
                "timestamp": utcnow().isoformat(),
            },
        )
        if not sent:
            logger.warning(
                "Security alert email not delivered",
                extra={"user_id": str(user_id), "reason": reason},
            )
        return sent

    def broadcast_force_logout(self, user_id: UUID, reason: str) -> bool:
        _, message = _ALERTS[reason]
        try:
            self.notifier.notify_account(
                user_id, ForceLogoutEvent(reason=reason, message=message)
            )
        except Exception:
            logger.warning(
                "Failed to queue force logout event",
                extra={"user_id": str(user_id), "reason": reason},
                exc_info=True,
            )
            return False
        return True

    async def force_logout(self, user_id: UUID, email: str, reason: str) -> None:
        """Email alert then realtime push; both best-effort"""
        await self.send_email_alert(user_id, email, reason)
        self.broadcast_force_logout(user_id, reason)
