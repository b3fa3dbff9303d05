"""
Realtime Events

Closed set of events exchanged over the account WebSocket channel.
Outbound events are tagged by ``event``; inbound client frames by ``action``.
"""

from datetime import UTC, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


class ForceLogoutEvent(BaseModel):
    """Tells the client to discard local credentials and re-authenticate"""

    event: Literal["forceLogout"] = "forceLogout"
    reason: str
    message: str
    timestamp: str = Field(default_factory=_timestamp)


class SessionJoinedEvent(BaseModel):
    event: Literal["sessionJoined"] = "sessionJoined"
    account_id: str
    connection_id: str
    timestamp: str = Field(default_factory=_timestamp)


class PongEvent(BaseModel):
    event: Literal["pong"] = "pong"
    timestamp: str = Field(default_factory=_timestamp)


class ErrorEvent(BaseModel):
    event: Literal["error"] = "error"
    code: str
    message: str


RealtimeEvent = Annotated[
    Union[ForceLogoutEvent, SessionJoinedEvent, PongEvent, ErrorEvent],
    Field(discriminator="event"),
]

_event_adapter = TypeAdapter(RealtimeEvent)


def parse_event(data: dict) -> RealtimeEvent:
    """Validate an outbound event payload (raises pydantic.ValidationError)"""
    return _event_adapter.validate_python(data)


class PingMessage(BaseModel):
    action: Literal["ping"]


class SubscribeGlobalMessage(BaseModel):
    action: Literal["subscribe_global"]


class UnsubscribeGlobalMessage(BaseModel):
    action: Literal["unsubscribe_global"]


ClientMessage = Annotated[
    Union[PingMessage, SubscribeGlobalMessage, UnsubscribeGlobalMessage],
    Field(discriminator="action"),
]

_client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(raw: str) -> ClientMessage:
    """Validate an inbound client frame (raises pydantic.ValidationError)"""
    return _client_message_adapter.validate_json(raw)
