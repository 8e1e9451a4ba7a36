from __future__ import annotations
from fastapi import status


class DispatchError(Exception):
    """Terminal failure of a dispatch request; carries the HTTP status to report."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInput(DispatchError):
    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamFailure(DispatchError):
    # status is picked per variant (500 for email, 400 for the identity provider)
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InternalFault(DispatchError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ProviderError(Exception):
    """Raised by providers when the upstream call did not succeed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
