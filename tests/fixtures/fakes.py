from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from src.app.errors import EmailDeliveryError, NotificationDeliveryError
from src.app.services.email_service import EmailService
from src.app.services.notifier import RealtimeNotifier


@dataclass
class SentEmail:
    template_id: str
    to_address: str
    variables: Dict[str, Any]


class FakeEmailService(EmailService):
    """Records emails instead of sending them; can be told to fail"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[SentEmail] = []

    async def send_template(self, template_id: str, to_address: str, variables: Dict[str, Any]) -> None:
        if self.fail:
            raise EmailDeliveryError("provider unavailable")
        self.sent.append(SentEmail(template_id, to_address, dict(variables)))

    def last(self, template_id: Optional[str] = None) -> SentEmail:
        matching = [e for e in self.sent if template_id is None or e.template_id == template_id]
        assert matching, f"no {template_id or 'email'} sent"
        return matching[-1]

    async def close(self) -> None:
        return None


class FakeNotifier(RealtimeNotifier):
    """Records pushed events; can be told to fail"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.events: List[Tuple[Optional[UUID], Any]] = []

    def notify_account(self, account_id: UUID, event) -> None:
        if self.fail:
            raise NotificationDeliveryError("push channel down")
        self.events.append((account_id, event))

    def notify_all(self, event) -> None:
        if self.fail:
            raise NotificationDeliveryError("push channel down")
        self.events.append((None, event))
