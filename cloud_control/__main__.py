#!/usr/bin/env python3
"""cloud-control - inspect and control EC2 instances from the command line."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import boto3

for _boto_module in ["botocore", "boto3", "urllib3"]:
    logging.getLogger(_boto_module).setLevel(logging.WARNING)

from cloud_control.cli.main import main  # noqa: E402
from cloud_control.core.config import AwsConfig, ConfigLoader  # noqa: E402
from cloud_control.core.interfaces import ComputeProvider  # noqa: E402
from cloud_control.core.prompt import ConfirmationGate, console_confirm  # noqa: E402
from cloud_control.core.reports import ReportStore  # noqa: E402
from cloud_control.lifecycle import LifecycleManager  # noqa: E402
from cloud_control.providers.aws.compute import EC2Manager  # noqa: E402


class CloudControl:
    """Main interface for cloud-control commands.

    The AWS config file is read and the provider client created on first
    use, so constructing this class never touches the filesystem or network.

    Parameters
    ----------
    aws_config : str | None
        Path to the AWS config file; see ConfigLoader.resolve_aws_config_path
    compute_provider_factory : Callable[[AwsConfig], ComputeProvider] | None
        Optional factory creating the provider client from loaded AWS settings
    confirm : Callable[[str], bool] | None
        Optional yes/no question; defaults to reading the terminal
    boto3_client_factory : Callable | None
        Optional factory for boto3 clients passed to EC2Manager
    clock : Callable[[], datetime] | None
        Optional time source for snapshot filenames
    """

    def __init__(
        self,
        aws_config: str | None = None,
        compute_provider_factory: Callable[[AwsConfig], ComputeProvider] | None = None,
        confirm: Callable[[str], bool] | None = None,
        boto3_client_factory: Callable | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._aws_config_path = aws_config
        self._config_loader = ConfigLoader()
        self._boto3_client_factory = boto3_client_factory or boto3.client
        self._compute_provider_factory_override = compute_provider_factory
        self._confirm = confirm or console_confirm
        self._clock = clock
        self._lifecycle_manager: LifecycleManager | None = None

    @property
    def compute_provider_factory(self) -> Callable[[AwsConfig], ComputeProvider]:
        """Get the compute provider factory."""
        if self._compute_provider_factory_override is not None:
            return self._compute_provider_factory_override
        return self._create_compute_provider

    def _create_compute_provider(self, aws_config: AwsConfig) -> ComputeProvider:
        return EC2Manager(
            region=aws_config.region,
            aws_access_key_id=aws_config.aws_access_key_id,
            aws_secret_access_key=aws_config.aws_secret_access_key,
            boto3_client_factory=self._boto3_client_factory,
        )

    @property
    def lifecycle_manager(self) -> LifecycleManager:
        """Get the lifecycle manager, loading AWS settings on first access."""
        if self._lifecycle_manager is None:
            aws_config = self._config_loader.load_aws_config(self._aws_config_path)
            self._lifecycle_manager = LifecycleManager(
                compute_provider=self.compute_provider_factory(aws_config),
                report_store=ReportStore(self._config_loader.report_dir(), clock=self._clock),
                gate=ConfirmationGate(self._confirm),
                config_loader=self._config_loader,
            )
        return self._lifecycle_manager

    def list_instances(self) -> Path:
        """List stopped, running and pending instances and write a snapshot."""
        return self.lifecycle_manager.list_instances()

    def list_instance_types(self) -> Path:
        """Write the instance types available in the configured region."""
        return self.lifecycle_manager.list_instance_types()

    def stop_all_instances(self) -> None:
        """Stop all running instances."""
        return self.lifecycle_manager.stop_all_instances()

    def stop_instances(self, report_path: str) -> None:
        """Stop the instances listed in an instance report."""
        return self.lifecycle_manager.stop_instances(report_path)

    def start_all_instances(self) -> None:
        """Start all stopped instances."""
        return self.lifecycle_manager.start_all_instances()

    def start_instances(self, report_path: str) -> None:
        """Start the instances listed in an instance report."""
        return self.lifecycle_manager.start_instances(report_path)

    def launch_instances(self, config_path: str) -> Path | None:
        """Launch instances described by a launch configuration file."""
        return self.lifecycle_manager.launch_instances(config_path)

    def run_action(self, action: str, path: str | None = None) -> Any:
        """Run one named action, passing ``path`` to the file-driven ones."""
        method = getattr(self, action)
        if path is None:
            return method()
        return method(path)


if __name__ == "__main__":
    main()
