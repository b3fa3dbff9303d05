"""
Email Adapters

HttpEmailService posts templated messages to a transactional email HTTP
API. LoggingEmailService only logs, for development and tests.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from src.app.errors import EmailDeliveryError
from src.app.services.email_service import EmailService, EmailTemplate

logger = logging.getLogger(__name__)

# Frontend route that consumes each token-bearing template
LINK_PATHS = {
    EmailTemplate.EMAIL_VERIFICATION: "/verify-email",
    EmailTemplate.PASSWORD_RESET: "/reset-password",
    EmailTemplate.EMAIL_CHANGE: "/confirm-email-change",
}


def build_variables(frontend_url: str, template_id: str, variables: Dict[str, Any]) -> Dict[str, Any]:
    """Add the action link for templates that carry a token"""
    path = LINK_PATHS.get(template_id)
    if path is None or "token" not in variables:
        return dict(variables)

    link = f"{frontend_url.rstrip('/')}{path}?{urlencode({'token': variables['token']})}"
    return {**variables, "link": link}


class HttpEmailService(EmailService):
    """Transactional email over HTTP with bearer API key"""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        from_email: str,
        frontend_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.from_email = from_email
        self.frontend_url = frontend_url
        self.timeout = timeout
        self._http_client = client

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._http_client

    async def close(self) -> None:
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def send_template(
        self, template_id: str, to_address: str, variables: Dict[str, Any]
    ) -> None:
        http = await self._get_http_client()

        payload = {
            "to": to_address,
            "from": self.from_email,
            "template_id": template_id,
            "variables": build_variables(self.frontend_url, template_id, variables),
        }

        try:
            resp = await http.post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email provider unreachable: {e}") from e

        if resp.status_code not in (200, 201, 202):
            raise EmailDeliveryError(
                f"Email provider rejected {template_id}: {resp.status_code}"
            )

        logger.info("Sent %s email", template_id)


class LoggingEmailService(EmailService):
    """Writes outgoing emails to the log instead of sending them"""

    def __init__(self, frontend_url: str):
        self.frontend_url = frontend_url

    async def send_template(
        self, template_id: str, to_address: str, variables: Dict[str, Any]
    ) -> None:
        rendered = build_variables(self.frontend_url, template_id, variables)
        logger.info("Email %s to %s (variables: %s)", template_id, to_address, sorted(rendered))

    async def close(self) -> None:
        return None
