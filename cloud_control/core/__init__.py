"""Core cloud-control functionality."""

from __future__ import annotations

from cloud_control.core.interfaces import ComputeProvider, Confirm
from cloud_control.core.models import InstanceDetails, InstanceReport

__all__ = [
    "ComputeProvider",
    "Confirm",
    "InstanceDetails",
    "InstanceReport",
]
