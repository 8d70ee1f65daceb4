"""AWS provider implementation."""

from cloud_control.providers.aws.compute import EC2Manager

__all__ = ["EC2Manager"]
