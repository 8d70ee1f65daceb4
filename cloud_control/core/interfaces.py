"""Protocols for the collaborators injected into the lifecycle pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from cloud_control.core.models import InstanceReport


class ComputeProvider(Protocol):
    """Cloud compute client issuing one request per operation."""

    region: str

    def describe_instances(self, state_values: Sequence[str]) -> InstanceReport: ...

    def describe_instance_type_offerings(self) -> list[str]: ...

    def stop_instances(
        self,
        instance_ids: Sequence[str],
        force: bool = False,
        hibernate: bool = False,
        dry_run: bool = False,
    ) -> None: ...

    def start_instances(self, instance_ids: Sequence[str], dry_run: bool = False) -> None: ...

    def run_instances(self, ami_id: str, instance_type: str, count: int) -> InstanceReport: ...


class Confirm(Protocol):
    """Blocking yes/no question put to the operator."""

    def __call__(self, prompt: str) -> bool: ...
