from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from ..config import Settings


class ProviderKind(str, Enum):
    EMAIL = "email"        # transactional email, caller supplies the code
    IDENTITY = "identity"  # identity provider generates and sends the code


@dataclass(frozen=True)
class SenderIdentity:
    email: str
    name: str


@dataclass(frozen=True)
class DispatchVariant:
    """One deployed flavour of the dispatch handler."""
    name: str
    path: str
    provider_kind: ProviderKind
    template_id: Optional[str] = None
    sender: Optional[SenderIdentity] = None
    upstream_error_status: int = 500

    @property
    def requires_code(self) -> bool:
        return self.provider_kind is ProviderKind.EMAIL


@dataclass(frozen=True)
class DispatchRequest:
    recipient_address: str
    code: Optional[Union[str, int]] = None


@dataclass(frozen=True)
class DispatchResult:
    succeeded: bool
    provider_response: Any = None


DELETE_OTP = "delete_otp"
RISK_OTP = "risk_otp"
AUTH_OTP = "auth_otp"


def build_variants(settings: Settings) -> dict[str, DispatchVariant]:
    sender = SenderIdentity(email=settings.SENDER_EMAIL, name=settings.SENDER_NAME)
    variants = [
        DispatchVariant(
            name=DELETE_OTP,
            path="/send-delete-otp",
            provider_kind=ProviderKind.EMAIL,
            template_id=settings.DELETE_OTP_TEMPLATE_ID,
            sender=sender,
            upstream_error_status=500,
        ),
        DispatchVariant(
            name=RISK_OTP,
            path="/send-risk-otp",
            provider_kind=ProviderKind.EMAIL,
            template_id=settings.RISK_OTP_TEMPLATE_ID,
            sender=sender,
            upstream_error_status=500,
        ),
        # provider errors here are usually a bad address, hence 400
        DispatchVariant(
            name=AUTH_OTP,
            path="/send-otp-email",
            provider_kind=ProviderKind.IDENTITY,
            upstream_error_status=400,
        ),
    ]
    return {v.name: v for v in variants}
