"""Provider-agnostic exceptions for cloud API failures."""

from __future__ import annotations

from cloud_control.core.exceptions import CloudControlError


class ProviderError(CloudControlError):
    """Base class for failures reported by the cloud provider."""


class ProviderCredentialsError(ProviderError):
    """Credentials are missing, incomplete or rejected."""


class ProviderConnectionError(ProviderError):
    """Provider endpoint could not be reached."""


class ProviderCallError(ProviderError):
    """A provider API call returned an error.

    Parameters
    ----------
    message : str
        Human-readable error message
    error_code : str | None
        Provider error code (e.g. ``UnauthorizedOperation``)
    operation : str | None
        Name of the API operation that failed
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.operation = operation
