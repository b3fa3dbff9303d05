"""
Unit tests for realtime event variants and client frame parsing
"""
import pytest
from pydantic import ValidationError

from src.domain.events import (
    ForceLogoutEvent,
    PingMessage,
    SessionJoinedEvent,
    SubscribeGlobalMessage,
    parse_client_message,
    parse_event,
)


def test_force_logout_serializes_with_tag_and_timestamp():
    data = ForceLogoutEvent(reason="password_changed", message="Please log in again.").model_dump()

    assert data["event"] == "forceLogout"
    assert data["reason"] == "password_changed"
    assert data["timestamp"]


def test_parse_event_picks_variant_by_tag():
    event = parse_event({"event": "sessionJoined", "account_id": "a", "connection_id": "c"})

    assert isinstance(event, SessionJoinedEvent)


def test_parse_event_rejects_unknown_tag():
    with pytest.raises(ValidationError):
        parse_event({"event": "somethingElse"})


def test_parse_event_rejects_missing_fields():
    with pytest.raises(ValidationError):
        parse_event({"event": "forceLogout", "reason": "password_changed"})


def test_parse_client_message():
    assert isinstance(parse_client_message('{"action": "ping"}'), PingMessage)
    assert isinstance(parse_client_message('{"action": "subscribe_global"}'), SubscribeGlobalMessage)


@pytest.mark.parametrize("raw", ['{"action": "shutdown"}', "not json", "{}"])
def test_parse_client_message_rejects_garbage(raw):
    with pytest.raises(ValidationError):
        parse_client_message(raw)
