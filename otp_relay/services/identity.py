"""Supabase Auth passwordless sign-in (the provider generates and mails the code)."""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..domain.dispatch import DispatchRequest, DispatchVariant
from .errors import InternalFault, ProviderError
from .providers import NotificationProvider, mask_address

logger = logging.getLogger(__name__)

OTP_PATH = "/auth/v1/otp"

# GoTrue reports errors under different keys depending on version and endpoint
_ERROR_KEYS = ("msg", "error_description", "message", "error")


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in _ERROR_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return resp.text or f"identity provider returned {resp.status_code}"


class SupabaseOtpProvider(NotificationProvider):
    def __init__(
        self,
        *,
        base_url: Optional[str],
        service_key: Optional[str],
        timeout: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._service_key = service_key
        self._timeout = timeout
        self._transport = transport
        missing = [
            key
            for key, value in [
                ("SUPABASE_URL", base_url),
                ("SUPABASE_SERVICE_ROLE_KEY", service_key),
            ]
            if not value
        ]
        if missing:
            logger.info("Supabase OTP disabled; missing settings: %s", ", ".join(missing))

    @property
    def enabled(self) -> bool:
        return bool(self._base_url and self._service_key)

    async def deliver(self, request: DispatchRequest, variant: DispatchVariant) -> Any:
        if not self._base_url or not self._service_key:
            raise InternalFault("identity provider is not configured")

        headers = {
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
            "Content-Type": "application/json",
        }
        body = {"email": request.recipient_address, "create_user": True, "data": {}}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(f"{self._base_url}{OTP_PATH}", json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("[Supabase] request failed: %s", exc.__class__.__name__)
            raise ProviderError(str(exc) or exc.__class__.__name__) from exc

        if not resp.is_success:
            message = _error_message(resp)
            logger.warning("[Supabase] %s rejected with status %s: %s", variant.name, resp.status_code, message)
            raise ProviderError(message, status_code=resp.status_code)

        logger.info("[Supabase] %s issued for %s", variant.name, mask_address(request.recipient_address))
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            return resp.text
