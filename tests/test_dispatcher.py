from typing import Any

import pytest

from otp_relay.domain.dispatch import (
    AUTH_OTP, DELETE_OTP, RISK_OTP, DispatchRequest, DispatchVariant, ProviderKind, build_variants,
)
from otp_relay.services.dispatcher import OtpDispatchHandler, decode_body
from otp_relay.services.errors import InvalidInput, ProviderError, UpstreamFailure
from otp_relay.services.providers import NotificationProvider, mask_address
from otp_relay.services.sendgrid import build_template_payload


class FakeProvider(NotificationProvider):
    def __init__(self, response: Any = None, error: ProviderError | None = None):
        self.response = response
        self.error = error
        self.requests: list[DispatchRequest] = []

    @property
    def enabled(self) -> bool:
        return True

    async def deliver(self, request: DispatchRequest, variant: DispatchVariant) -> Any:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def variants(settings_factory):
    return build_variants(settings_factory())


def test_variants_use_distinct_templates(variants):
    assert variants[DELETE_OTP].template_id != variants[RISK_OTP].template_id
    assert variants[AUTH_OTP].provider_kind is ProviderKind.IDENTITY
    assert variants[DELETE_OTP].upstream_error_status == 500
    assert variants[AUTH_OTP].upstream_error_status == 400


@pytest.mark.parametrize(
    "email, otp",
    [("a@b.com", "123456"), ("  spaced@b.com ", "000001"), ("UPPER@B.COM", 987654)],
)
def test_template_payload_is_verbatim(variants, email, otp):
    payload = build_template_payload(DispatchRequest(recipient_address=email, code=otp), variants[RISK_OTP])

    assert payload["personalizations"][0]["to"][0]["email"] == email
    assert payload["personalizations"][0]["dynamic_template_data"]["otp_code"] == otp
    assert len(payload["personalizations"]) == 1


def test_decode_body():
    assert decode_body(b'{"email": "a@b.com"}') == {"email": "a@b.com"}
    with pytest.raises(InvalidInput):
        decode_body(b"{")
    with pytest.raises(InvalidInput):
        decode_body(b"null")


def test_mask_address():
    assert mask_address("someone@example.com") == "som***@example.com"
    assert "someone" not in mask_address("someone")


@pytest.mark.asyncio
async def test_dispatch_success_email(variants):
    provider = FakeProvider(response="")
    handler = OtpDispatchHandler(variants[DELETE_OTP], provider)

    result = await handler.dispatch({"email": "a@b.com", "otp": "42"})

    assert result.succeeded is True
    assert provider.requests == [DispatchRequest(recipient_address="a@b.com", code="42")]
    assert handler.success_body(result) == {"success": True}


@pytest.mark.asyncio
async def test_dispatch_success_identity(variants):
    data = {"user": None, "session": None}
    handler = OtpDispatchHandler(variants[AUTH_OTP], FakeProvider(response=data))

    result = await handler.dispatch({"email": "a@b.com"})

    assert handler.success_body(result) == {"message": "OTP sent successfully", "data": data}


@pytest.mark.asyncio
async def test_invalid_input_never_reaches_provider(variants):
    provider = FakeProvider()
    handler = OtpDispatchHandler(variants[AUTH_OTP], provider)

    with pytest.raises(InvalidInput) as exc_info:
        await handler.dispatch({})

    assert exc_info.value.status_code == 400
    assert provider.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("name, expected_status", [(DELETE_OTP, 500), (RISK_OTP, 500), (AUTH_OTP, 400)])
async def test_upstream_failure_status_follows_variant(variants, name, expected_status):
    provider = FakeProvider(error=ProviderError("rate limited", status_code=429))
    handler = OtpDispatchHandler(variants[name], provider)

    with pytest.raises(UpstreamFailure) as exc_info:
        await handler.dispatch({"email": "a@b.com", "otp": "1"})

    assert exc_info.value.status_code == expected_status
    assert exc_info.value.message == "rate limited"


@pytest.mark.asyncio
async def test_redaction_hides_provider_text(variants):
    provider = FakeProvider(error=ProviderError("account suspended: key SG.abc", status_code=401))
    handler = OtpDispatchHandler(variants[DELETE_OTP], provider, redact_errors=True)

    with pytest.raises(UpstreamFailure) as exc_info:
        await handler.dispatch({"email": "a@b.com", "otp": "1"})

    assert exc_info.value.message == "upstream provider error"


@pytest.mark.asyncio
async def test_repeated_dispatch_calls_provider_each_time(variants):
    provider = FakeProvider(response="")
    handler = OtpDispatchHandler(variants[RISK_OTP], provider)
    body = {"email": "a@b.com", "otp": "9"}

    await handler.dispatch(body)
    await handler.dispatch(body)

    assert len(provider.requests) == 2
