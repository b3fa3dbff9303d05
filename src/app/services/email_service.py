import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

logger = logging.getLogger(__name__)


class EmailTemplate:
    """Template identifiers understood by the email provider"""

    EMAIL_VERIFICATION = "email-verification"
    PASSWORD_RESET = "password-reset"
    EMAIL_CHANGE = "email-change"
    TWO_FACTOR_CODE = "two-factor-code"
    SECURITY_ALERT = "security-alert"


class EmailService(ABC):
    """Email dispatch interface - application layer"""

    @abstractmethod
    async def send_template(
        self, template_id: str, to_address: str, variables: Dict[str, Any]
    ) -> None:
        """
        Send a templated email.

        Raises:
            EmailDeliveryError: The provider rejected or could not accept the message
        """
        pass


async def send_quietly(
    email_service: EmailService, template_id: str, to_address: str, variables: Dict[str, Any]
) -> bool:
    """Send an email whose failure must not change the caller's outcome"""
    try:
        await email_service.send_template(template_id, to_address, variables)
    except Exception:
        logger.warning("Failed to send %s email", template_id, exc_info=True)
        return False
    return True
