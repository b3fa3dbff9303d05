from abc import ABC, abstractmethod
from uuid import UUID

from src.domain.events import RealtimeEvent


class RealtimeNotifier(ABC):
    """
    Realtime push interface - application layer

    Delivery is fire-and-forget and at-most-once. Implementations must not
    block the caller on socket I/O.
    """

    @abstractmethod
    def notify_account(self, account_id: UUID, event: RealtimeEvent) -> None:
        """Queue an event for every live connection of one account"""
        pass

    @abstractmethod
    def notify_all(self, event: RealtimeEvent) -> None:
        """Queue an event for every connection in the global group"""
        pass
