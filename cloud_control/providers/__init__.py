"""Cloud provider clients and their exceptions."""

from __future__ import annotations

from cloud_control.providers.aws import EC2Manager
from cloud_control.providers.exceptions import (
    ProviderCallError,
    ProviderConnectionError,
    ProviderCredentialsError,
    ProviderError,
)

__all__ = [
    "EC2Manager",
    "ProviderError",
    "ProviderCredentialsError",
    "ProviderCallError",
    "ProviderConnectionError",
]
