# src/specpilot/exceptions.py

"""Exception taxonomy shared by the service layer and the API routes."""

from __future__ import annotations

from typing import Optional


class SpecPilotError(Exception):
    """Base exception for all SpecPilot errors."""


class ConfigurationError(SpecPilotError):
    """Raised when a required environment variable is absent.

    Always raised before any network attempt and never retried.
    """

    def __init__(self, variable: str, message: Optional[str] = None) -> None:
        self.variable = variable
        super().__init__(message or f"{variable} environment variable is not configured.")


class ProviderError(SpecPilotError):
    """Raised when a text-generation provider call fails.

    Attributes:
        provider: Provider identifier ("openai" or "anthropic").
        status_code: HTTP status returned by the provider, when known.
    """

    PERMISSION_HINT = "check API key permissions"

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None) -> None:
        self.provider = provider
        self.status_code = status_code
        self.detail = message
        super().__init__(self._format())

    def _format(self) -> str:
        status = f" (HTTP {self.status_code})" if self.status_code is not None else ""
        text = f"{self.provider}{status}: {self.detail}"
        if self.status_code == 403:
            text += f" - {self.PERMISSION_HINT}"
        return text

    @property
    def is_forbidden(self) -> bool:
        return self.status_code == 403


class ProviderFallbackError(ProviderError):
    """Raised when both the primary provider and its fallback failed."""

    def __init__(self, primary: ProviderError, fallback: ProviderError) -> None:
        self.primary = primary
        self.fallback = fallback
        super().__init__(
            provider=f"{primary.provider}+{fallback.provider}",
            message=f"{primary} | fallback failed: {fallback}",
            status_code=fallback.status_code,
        )

    def _format(self) -> str:
        return self.detail


class RemoteServiceError(SpecPilotError):
    """Raised when the code-generation service returns a non-success response."""

    def __init__(self, operation: str, status_code: Optional[int], body: str) -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"{operation} failed: {body}"
        else:
            message = f"{operation} responded with status: {status_code}. Details: {body}"
        super().__init__(message)


class UnsupportedFrameworkError(SpecPilotError):
    """Raised when a framework identifier has no entry in the framework table."""

    def __init__(self, target: str, framework: str) -> None:
        self.target = target
        self.framework = framework
        super().__init__(f"Unsupported {target} framework: {framework}")


class ValidationWarning(UserWarning):
    """Non-fatal: a specification does not start with the expected marker.

    Returned by validation helpers, never raised.
    """
