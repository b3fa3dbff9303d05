"""
Unit tests for the HTTP and logging email adapters
"""
import json

import httpx
import pytest

from src.adapter.services.email_service import (
    HttpEmailService,
    LoggingEmailService,
    build_variables,
)
from src.app.errors import EmailDeliveryError
from src.app.services.email_service import EmailTemplate, send_quietly


def make_service(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpEmailService(
        api_url="https://mail.example.com/send",
        api_key="test-key",
        from_email="no-reply@example.com",
        frontend_url="https://shop.example.com/",
        client=client,
    )


def test_build_variables_adds_link_for_token_templates():
    variables = build_variables(
        "https://shop.example.com", EmailTemplate.PASSWORD_RESET, {"token": "abc"}
    )

    assert variables["link"] == "https://shop.example.com/reset-password?token=abc"


def test_build_variables_leaves_other_templates_alone():
    variables = build_variables(
        "https://shop.example.com", EmailTemplate.SECURITY_ALERT, {"event": "Password Changed"}
    )

    assert "link" not in variables


@pytest.mark.asyncio
async def test_send_template_posts_payload():
    requests = []

    def handler(request: httpx.Request):
        requests.append(request)
        return httpx.Response(202)

    service = make_service(handler)
    await service.send_template(EmailTemplate.EMAIL_VERIFICATION, "jane.doe@example.com", {"token": "t0k"})
    await service.close()

    body = json.loads(requests[0].content)
    assert body["to"] == "jane.doe@example.com"
    assert body["template_id"] == "email-verification"
    assert body["variables"]["link"] == "https://shop.example.com/verify-email?token=t0k"


@pytest.mark.asyncio
async def test_provider_rejection_raises_delivery_error():
    service = make_service(lambda request: httpx.Response(500))

    with pytest.raises(EmailDeliveryError):
        await service.send_template(EmailTemplate.PASSWORD_RESET, "jane.doe@example.com", {"token": "x"})


@pytest.mark.asyncio
async def test_network_error_raises_delivery_error():
    def handler(request):
        raise httpx.ConnectError("unreachable")

    service = make_service(handler)

    with pytest.raises(EmailDeliveryError):
        await service.send_template(EmailTemplate.PASSWORD_RESET, "jane.doe@example.com", {"token": "x"})

    assert await send_quietly(service, EmailTemplate.PASSWORD_RESET, "jane.doe@example.com", {}) is False


@pytest.mark.asyncio
async def test_logging_service_never_logs_token(caplog):
    service = LoggingEmailService(frontend_url="https://shop.example.com")

    with caplog.at_level("INFO"):
        await service.send_template(EmailTemplate.PASSWORD_RESET, "jane.doe@example.com", {"token": "secret-token"})

    assert "secret-token" not in caplog.text
    assert "password-reset" in caplog.text
