import logging
from uuid import UUID

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from src.adapter.realtime.connection_manager import ConnectionManager
from src.api.utils.cookies import ACCESS_TOKEN_COOKIE
from src.app.services.unit_of_work import UnitOfWork
from src.depends import authenticate_access_token, get_unit_of_work
from src.domain.events import (
    ErrorEvent,
    PingMessage,
    PongEvent,
    SessionJoinedEvent,
    SubscribeGlobalMessage,
    UnsubscribeGlobalMessage,
    parse_client_message,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])

# Application-defined close code for failed authentication
WS_UNAUTHORIZED = 4401


def _access_token(ws: WebSocket):
    authorization = ws.headers.get("authorization", "")
    if authorization.lower().startswith("bearer "):
        return authorization[7:]
    return ws.query_params.get("token") or ws.cookies.get(ACCESS_TOKEN_COOKIE)


@router.websocket("/ws")
async def realtime_channel(ws: WebSocket, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Account event channel.

    Authenticated with the access token (bearer header, ``token`` query
    parameter or cookie). The connection joins its account group and the
    global group, receives ``sessionJoined`` and then server pushes such
    as ``forceLogout``. Client frames: ping, subscribe_global,
    unsubscribe_global.
    """
    current_user = await authenticate_access_token(_access_token(ws), uow)
    await ws.accept()

    if current_user is None:
        await ws.close(code=WS_UNAUTHORIZED)
        return

    manager: ConnectionManager = ws.app.state.notifier
    account_id = UUID(current_user["user_id"])
    connection_id = manager.connect(ws, account_id)

    try:
        await ws.send_json(
            SessionJoinedEvent(
                account_id=str(account_id), connection_id=connection_id
            ).model_dump()
        )

        while True:
            raw = await ws.receive_text()
            try:
                message = parse_client_message(raw)
            except ValidationError:
                await ws.send_json(
                    ErrorEvent(code="INVALID_MESSAGE", message="Unsupported message").model_dump()
                )
                continue

            if isinstance(message, PingMessage):
                await ws.send_json(PongEvent().model_dump())
            elif isinstance(message, SubscribeGlobalMessage):
                manager.subscribe_global(connection_id)
            elif isinstance(message, UnsubscribeGlobalMessage):
                manager.unsubscribe_global(connection_id)
    except WebSocketDisconnect:
        logger.debug("Realtime client disconnected", extra={"connection_id": connection_id})
    finally:
        manager.disconnect(connection_id)
