from __future__ import annotations
import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from ..domain.dispatch import DispatchRequest, DispatchResult, DispatchVariant, ProviderKind
from ..domain.schemas.otp import IdentityOtpIn, IdentityOtpOut, OtpEmailIn, OtpSentOut
from ..observability.metrics import OTP_DISPATCHED
from .errors import InvalidInput, ProviderError, UpstreamFailure
from .providers import NotificationProvider

log = logging.getLogger(__name__)

REDACTED_PROVIDER_ERROR = "upstream provider error"


def decode_body(raw: bytes) -> dict[str, Any]:
    """Parse a request body; anything but a JSON object is a client error."""
    try:
        body = json.loads(raw) if raw else None
    except ValueError as exc:  # JSONDecodeError and bad utf-8
        raise InvalidInput(f"Invalid JSON body: {exc}") from exc
    if not isinstance(body, dict):
        raise InvalidInput("Request body must be a JSON object")
    return body


def _validation_message(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ())) or "body"
    return f"Invalid {field}: {err.get('msg', 'invalid value')}"


class OtpDispatchHandler:
    """
    Validates an OTP request and hands it to the variant's provider.

    One instance per deployed variant; holds no per-request state, so a
    single instance serves any number of concurrent requests.
    """

    def __init__(
        self,
        variant: DispatchVariant,
        provider: NotificationProvider,
        *,
        redact_errors: bool = False,
    ) -> None:
        self.variant = variant
        self.provider = provider
        self.redact_errors = redact_errors

    def parse(self, body: dict[str, Any]) -> DispatchRequest:
        schema: type[BaseModel] = OtpEmailIn if self.variant.requires_code else IdentityOtpIn
        try:
            data = schema.model_validate(body)
        except ValidationError as exc:
            raise InvalidInput(_validation_message(exc)) from exc

        if not data.email:
            raise InvalidInput("Email is required")
        if self.variant.requires_code:
            otp = data.otp
            if otp is None or otp == "":
                raise InvalidInput("OTP is required")
            return DispatchRequest(recipient_address=data.email, code=otp)
        return DispatchRequest(recipient_address=data.email)

    async def dispatch(self, body: dict[str, Any]) -> DispatchResult:
        name = self.variant.name
        try:
            request = self.parse(body)
        except InvalidInput as exc:
            OTP_DISPATCHED.labels(variant=name, outcome="invalid_input").inc()
            log.info("%s rejected input: %s", name, exc.message)
            raise

        try:
            payload = await self.provider.deliver(request, self.variant)
        except ProviderError as exc:
            OTP_DISPATCHED.labels(variant=name, outcome="upstream_error").inc()
            message = REDACTED_PROVIDER_ERROR if self.redact_errors else exc.message
            raise UpstreamFailure(message, status_code=self.variant.upstream_error_status) from exc

        OTP_DISPATCHED.labels(variant=name, outcome="sent").inc()
        return DispatchResult(succeeded=True, provider_response=payload)

    def success_body(self, result: DispatchResult) -> dict[str, Any]:
        if self.variant.provider_kind is ProviderKind.IDENTITY:
            return IdentityOtpOut(data=result.provider_response).model_dump()
        return OtpSentOut(success=result.succeeded).model_dump()
