"""Custom exceptions raised by completion clients."""

from __future__ import annotations


class ProviderError(RuntimeError):
    """Base error raised for completion failures."""


class ProviderConfigError(ProviderError):
    """Raised when configuration is missing or invalid."""


class ProviderResponseError(ProviderError):
    """Raised when the endpoint returns an unusable response body."""


class NetworkError(ProviderError):
    """Raised when the request never produced an HTTP response."""


class RequestFailed(ProviderError):
    """Raised for a non-2xx response that was not (or no longer) retried."""

    def __init__(self, status: int, detail: str | None = None) -> None:
        message = f"Completion request failed with HTTP {status}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status = status
