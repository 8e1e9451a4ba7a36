"""Builds providers and dispatch handlers from settings."""
from __future__ import annotations
from typing import Optional

import httpx

from ..config import Settings
from ..domain.dispatch import DispatchVariant, ProviderKind, build_variants
from .dispatcher import OtpDispatchHandler
from .identity import SupabaseOtpProvider
from .providers import NotificationProvider
from .sendgrid import SendGridProvider


def build_providers(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> dict[ProviderKind, NotificationProvider]:
    return {
        ProviderKind.EMAIL: SendGridProvider(
            api_key=settings.SENDGRID_API_KEY,
            api_url=settings.SENDGRID_API_URL,
            timeout=settings.PROVIDER_TIMEOUT_SEC,
            transport=transport,
        ),
        ProviderKind.IDENTITY: SupabaseOtpProvider(
            base_url=settings.SUPABASE_URL,
            service_key=settings.SUPABASE_SERVICE_ROLE_KEY,
            timeout=settings.PROVIDER_TIMEOUT_SEC,
            transport=transport,
        ),
    }


def build_handlers(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> dict[str, OtpDispatchHandler]:
    providers = build_providers(settings, transport)
    variants: dict[str, DispatchVariant] = build_variants(settings)
    return {
        name: OtpDispatchHandler(
            variant,
            providers[variant.provider_kind],
            redact_errors=settings.REDACT_PROVIDER_ERRORS,
        )
        for name, variant in variants.items()
    }
