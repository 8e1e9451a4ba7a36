from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any

from ..domain.dispatch import DispatchRequest, DispatchVariant


class NotificationProvider(ABC):
    """Upstream service that delivers (and possibly generates) the OTP."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        ...

    @abstractmethod
    async def deliver(self, request: DispatchRequest, variant: DispatchVariant) -> Any:
        """
        Perform exactly one outbound call for the request.

        Returns the provider's payload on success. Raises ProviderError when
        the provider answers with a failure or cannot be reached, and
        InternalFault when the provider is not configured.
        """
        ...


def mask_address(address: str) -> str:
    # keep enough to correlate logs without writing the full address
    local, _, domain = address.partition("@")
    return f"{local[:3]}***@{domain}" if domain else f"{address[:3]}***"
