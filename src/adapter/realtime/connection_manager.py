"""
Realtime Connection Manager

Tracks live WebSocket connections in per-account groups plus one global
group, and pushes events to them from a single background dispatcher.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from fastapi import WebSocket

from src.app.errors import NotificationDeliveryError
from src.app.services.notifier import RealtimeNotifier
from src.domain.events import RealtimeEvent

logger = logging.getLogger(__name__)

GLOBAL_GROUP = "global"


class ConnectionManager(RealtimeNotifier):
    """
    Fan-out of realtime events to connected clients.

    Business Rules:
    - notify_* never wait on socket I/O; events go through a bounded queue
    - A full queue drops the event (NotificationDeliveryError)
    - A socket whose send fails is dropped from every group
    - Delivery is at-most-once; nothing is stored for offline clients
    """

    def __init__(self, queue_size: int = 1000):
        self._accounts: Dict[str, Dict[str, WebSocket]] = defaultdict(dict)
        self._global: Dict[str, WebSocket] = {}
        self._queue: "asyncio.Queue[Tuple[Optional[str], dict]]" = asyncio.Queue(maxsize=queue_size)
        self._dispatcher: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._dispatcher is None or self._dispatcher.done():
            self._dispatcher = asyncio.create_task(self._dispatch_loop())

    async def stop(self) -> None:
        if self._dispatcher is not None:
            self._dispatcher.cancel()
            try:
                await self._dispatcher
            except asyncio.CancelledError:
                pass
            self._dispatcher = None

        for connection_id, websocket in self._all_connections():
            try:
                await websocket.close(code=1001)
            except Exception:
                logger.debug("Socket %s already closed", connection_id)
        self._accounts.clear()
        self._global.clear()

    @property
    def running(self) -> bool:
        return self._dispatcher is not None and not self._dispatcher.done()

    async def join(self) -> None:
        """Wait until every queued event has been handled"""
        await self._queue.join()

    # ------------------------------------------------------------------
    # Group membership
    # ------------------------------------------------------------------

    def connect(self, websocket: WebSocket, account_id: UUID, join_global: bool = True) -> str:
        """Register an accepted socket; returns its connection id"""
        connection_id = str(uuid4())
        self._accounts[str(account_id)][connection_id] = websocket
        if join_global:
            self._global[connection_id] = websocket
        logger.info(
            "Realtime connection opened",
            extra={"account_id": str(account_id), "connection_id": connection_id},
        )
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        self._global.pop(connection_id, None)
        for account_id in list(self._accounts):
            group = self._accounts[account_id]
            if group.pop(connection_id, None) is not None:
                logger.info(
                    "Realtime connection closed",
                    extra={"account_id": account_id, "connection_id": connection_id},
                )
            if not group:
                del self._accounts[account_id]

    def subscribe_global(self, connection_id: str) -> bool:
        for group in self._accounts.values():
            if connection_id in group:
                self._global[connection_id] = group[connection_id]
                return True
        return False

    def unsubscribe_global(self, connection_id: str) -> None:
        self._global.pop(connection_id, None)

    def connection_count(self, account_id: Optional[UUID] = None) -> int:
        if account_id is None:
            return len(dict(self._all_connections()))
        return len(self._accounts.get(str(account_id), {}))

    # ------------------------------------------------------------------
    # RealtimeNotifier
    # ------------------------------------------------------------------

    def notify_account(self, account_id: UUID, event: RealtimeEvent) -> None:
        self._enqueue(str(account_id), event)

    def notify_all(self, event: RealtimeEvent) -> None:
        self._enqueue(None, event)

    def _enqueue(self, account_id: Optional[str], event: RealtimeEvent) -> None:
        try:
            self._queue.put_nowait((account_id, event.model_dump()))
        except asyncio.QueueFull as e:
            logger.warning(
                "Realtime queue full, dropping %s event",
                event.event,
                extra={"account_id": account_id},
            )
            raise NotificationDeliveryError("Realtime queue is full") from e

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch_loop(self) -> None:
        while True:
            account_id, payload = await self._queue.get()
            try:
                await self._deliver(account_id, payload)
            except Exception:
                logger.exception("Realtime dispatch failed")
            finally:
                self._queue.task_done()

    async def _deliver(self, account_id: Optional[str], payload: dict) -> None:
        if account_id is None:
            targets = list(self._global.items())
        else:
            targets = list(self._accounts.get(account_id, {}).items())

        if not targets:
            return

        results = await asyncio.gather(
            *(websocket.send_json(payload) for _, websocket in targets),
            return_exceptions=True,
        )

        for (connection_id, _), result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Dropping realtime connection after failed send",
                    extra={"connection_id": connection_id},
                )
                self.disconnect(connection_id)

    def _all_connections(self) -> List[Tuple[str, WebSocket]]:
        connections = dict(self._global)
        for group in self._accounts.values():
            connections.update(group)
        return list(connections.items())
