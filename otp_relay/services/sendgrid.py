"""SendGrid dynamic-template sender."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..domain.dispatch import DispatchRequest, DispatchVariant
from .errors import InternalFault, ProviderError
from .providers import NotificationProvider, mask_address

logger = logging.getLogger(__name__)

OTP_TEMPLATE_KEY = "otp_code"  # fills {{otp_code}} in the template


def build_template_payload(request: DispatchRequest, variant: DispatchVariant) -> dict[str, Any]:
    """Body for POST /v3/mail/send with a single recipient and the OTP as template data."""
    if variant.sender is None or not variant.template_id:
        raise InternalFault(f"variant {variant.name} has no sender or template configured")
    return {
        "personalizations": [
            {
                "to": [{"email": request.recipient_address}],
                "dynamic_template_data": {OTP_TEMPLATE_KEY: request.code},
            }
        ],
        "from": {"email": variant.sender.email, "name": variant.sender.name},
        "template_id": variant.template_id,
    }


class SendGridProvider(NotificationProvider):
    def __init__(
        self,
        *,
        api_key: Optional[str],
        api_url: str,
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout
        self._transport = transport
        if not api_key:
            logger.info("SendGrid delivery disabled; missing settings: SENDGRID_API_KEY")

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    async def deliver(self, request: DispatchRequest, variant: DispatchVariant) -> Any:
        if not self._api_key:
            raise InternalFault("email provider is not configured")

        payload = build_template_payload(request, variant)
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(self._api_url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("[SendGrid] request failed: %s", exc.__class__.__name__)
            raise ProviderError(str(exc) or exc.__class__.__name__) from exc

        if not resp.is_success:
            logger.warning("[SendGrid] %s rejected with status %s", variant.name, resp.status_code)
            raise ProviderError(resp.text, status_code=resp.status_code)

        logger.info("[SendGrid] %s sent to %s", variant.name, mask_address(request.recipient_address))
        return resp.text or None
