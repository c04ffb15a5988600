# src/specpilot/api/errors.py

from fastapi import HTTPException, status

from specpilot.exceptions import (
    ConfigurationError,
    ProviderError,
    RemoteServiceError,
    SpecPilotError,
    UnsupportedFrameworkError,
)

_STATUS_BY_ERROR = (
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (UnsupportedFrameworkError, status.HTTP_400_BAD_REQUEST),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
    (RemoteServiceError, status.HTTP_502_BAD_GATEWAY),
)


def to_http_exception(error: SpecPilotError) -> HTTPException:
    """Translate a service-layer error into the HTTP error the client sees."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
