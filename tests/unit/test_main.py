"""Tests for CloudControl wiring."""

from unittest.mock import MagicMock

import pytest

from cloud_control.__main__ import CloudControl
from cloud_control.core.config import AwsConfig
from cloud_control.core.exceptions import ConfigNotFoundError
from cloud_control.providers.aws.compute import EC2Manager


def test_construction_touches_nothing(tmp_path) -> None:
    CloudControl(aws_config=str(tmp_path / "missing"))


def test_missing_aws_config_raised_on_first_use(tmp_path) -> None:
    cloud_control = CloudControl(aws_config=str(tmp_path / "missing"))

    with pytest.raises(ConfigNotFoundError):
        cloud_control.list_instances()


def test_default_provider_is_ec2_manager_with_config_credentials(aws_config_file) -> None:
    client_factory = MagicMock()
    cloud_control = CloudControl(
        aws_config=str(aws_config_file), boto3_client_factory=client_factory
    )

    provider = cloud_control.lifecycle_manager.compute_provider

    assert isinstance(provider, EC2Manager)
    client_factory.assert_called_once_with(
        "ec2",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def test_provider_factory_receives_loaded_config(aws_config_file, fake_ec2) -> None:
    received = []

    def factory(aws_config: AwsConfig):
        received.append(aws_config)
        return fake_ec2

    cloud_control = CloudControl(aws_config=str(aws_config_file), compute_provider_factory=factory)

    assert cloud_control.lifecycle_manager.compute_provider is fake_ec2
    assert cloud_control.lifecycle_manager is cloud_control.lifecycle_manager
    assert [c.region for c in received] == ["us-east-1"]


def test_report_dir_from_environment(aws_config_file, fake_ec2, monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("CLOUD_CONTROL_REPORT_DIR", str(tmp_path / "reports"))

    cloud_control = CloudControl(
        aws_config=str(aws_config_file), compute_provider_factory=lambda c: fake_ec2
    )

    assert cloud_control.lifecycle_manager.report_store.directory == tmp_path / "reports"


def test_run_action_passes_path(aws_config_file, fake_ec2, write_report) -> None:
    path = write_report([])
    cloud_control = CloudControl(
        aws_config=str(aws_config_file), compute_provider_factory=lambda c: fake_ec2
    )

    cloud_control.run_action("stop_instances", str(path))

    assert fake_ec2.calls == []
