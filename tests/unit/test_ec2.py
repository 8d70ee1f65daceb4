"""Tests for EC2Manager against a mocked EC2 endpoint."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    InvalidRegionError,
    NoCredentialsError,
)
from moto import mock_aws

from cloud_control.providers.aws.compute import EC2Manager
from cloud_control.providers.aws.utils import (
    instance_details_from_response,
    resolve_instance_name,
)
from cloud_control.providers.exceptions import (
    ProviderCallError,
    ProviderConnectionError,
    ProviderCredentialsError,
    ProviderError,
)


@pytest.fixture(scope="function")
def ec2_manager(aws_credentials):
    """Return EC2Manager backed by moto."""
    with mock_aws():
        yield EC2Manager(region="us-east-1")


@pytest.fixture
def image_id(ec2_manager) -> str:
    return ec2_manager.ec2_client.describe_images()["Images"][0]["ImageId"]


def _launch(ec2_manager, image_id, name=None, count=1):
    kwargs = {}
    if name is not None:
        kwargs["TagSpecifications"] = [
            {"ResourceType": "instance", "Tags": [{"Key": "Name", "Value": name}]}
        ]
    response = ec2_manager.ec2_client.run_instances(
        ImageId=image_id, InstanceType="t3.micro", MinCount=count, MaxCount=count, **kwargs
    )
    return [instance["InstanceId"] for instance in response["Instances"]]


def _state_of(ec2_manager, instance_id):
    response = ec2_manager.ec2_client.describe_instances(InstanceIds=[instance_id])
    return response["Reservations"][0]["Instances"][0]["State"]["Name"]


class TestResolveInstanceName:
    def test_missing_name_tag(self) -> None:
        assert resolve_instance_name(None) == "None"
        assert resolve_instance_name([{"Key": "Owner", "Value": "ops"}]) == "None"

    def test_name_is_query_escaped(self) -> None:
        tags = [{"Key": "Name", "Value": "web server/01"}]

        assert resolve_instance_name(tags) == "web+server%2F01"

    def test_absent_ips_become_empty_strings(self) -> None:
        details = instance_details_from_response(
            {"InstanceId": "i-1", "InstanceType": "t3.micro", "State": {"Name": "stopped"}}
        )

        assert details.private_ip == ""
        assert details.public_ip == ""
        assert details.name == "None"


class TestDescribeInstances:
    def test_filters_by_state(self, ec2_manager, image_id) -> None:
        running_id, stopped_id = _launch(ec2_manager, image_id, count=2)
        ec2_manager.ec2_client.stop_instances(InstanceIds=[stopped_id])

        running = ec2_manager.describe_instances(["running"])
        stopped = ec2_manager.describe_instances(["stopped"])

        assert [i.instance_id for i in running] == [running_id]
        assert [i.instance_id for i in stopped] == [stopped_id]
        assert stopped.instances[0].instance_state == "stopped"

    def test_names_from_tags(self, ec2_manager, image_id) -> None:
        _launch(ec2_manager, image_id, name="web 1")
        _launch(ec2_manager, image_id)

        report = ec2_manager.describe_instances(["running", "stopped", "pending"])

        assert sorted(i.name for i in report) == ["None", "web+1"]
        assert all(i.instance_type == "t3.micro" for i in report)
        assert all(i.private_ip for i in report)

    def test_no_instances(self, ec2_manager) -> None:
        assert len(ec2_manager.describe_instances(["running"])) == 0


def test_describe_instance_type_offerings_is_sorted(ec2_manager) -> None:
    offerings = ec2_manager.describe_instance_type_offerings()

    assert offerings
    assert offerings == sorted(offerings)
    assert "t3.micro" in offerings


def test_stop_instances(ec2_manager, image_id) -> None:
    instance_ids = _launch(ec2_manager, image_id, count=2)

    ec2_manager.stop_instances(instance_ids)

    assert [_state_of(ec2_manager, i) for i in instance_ids] == ["stopped", "stopped"]


def test_start_instances(ec2_manager, image_id) -> None:
    (instance_id,) = _launch(ec2_manager, image_id)
    ec2_manager.ec2_client.stop_instances(InstanceIds=[instance_id])

    ec2_manager.start_instances([instance_id])

    assert _state_of(ec2_manager, instance_id) == "running"


def test_stop_unknown_instance_raises_provider_error(ec2_manager) -> None:
    with pytest.raises(ProviderCallError) as exc_info:
        ec2_manager.stop_instances(["i-0123456789abcdef0"])

    assert exc_info.value.error_code.startswith("InvalidInstanceID")


def test_run_instances_launches_exact_count(ec2_manager, image_id) -> None:
    report = ec2_manager.run_instances(ami_id=image_id, instance_type="t3.small", count=3)

    assert len(report) == 3
    assert len(set(report.instance_ids())) == 3
    assert all(i.instance_type == "t3.small" for i in report)
    assert len(ec2_manager.describe_instances(["pending", "running"])) == 3


class TestWithStubClient:
    @pytest.fixture
    def client(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def manager(self, client) -> EC2Manager:
        return EC2Manager(
            region="eu-west-1",
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
            boto3_client_factory=MagicMock(return_value=client),
        )

    def test_client_created_with_region_and_keys(self, manager) -> None:
        manager.boto3_client_factory.assert_called_once_with(
            "ec2",
            region_name="eu-west-1",
            aws_access_key_id="AKIA",
            aws_secret_access_key="secret",
        )

    def test_stop_is_a_single_bulk_call(self, manager, client) -> None:
        manager.stop_instances(["i-1", "i-2"])

        client.stop_instances.assert_called_once_with(
            InstanceIds=["i-1", "i-2"], DryRun=False, Force=False, Hibernate=False
        )

    def test_dry_run_acknowledgment_is_not_an_error(self, manager, client) -> None:
        client.stop_instances.side_effect = ClientError(
            {"Error": {"Code": "DryRunOperation", "Message": "Request would have succeeded"}},
            "StopInstances",
        )

        manager.stop_instances(["i-1"], dry_run=True)

        client.stop_instances.assert_called_once_with(
            InstanceIds=["i-1"], DryRun=True, Force=False, Hibernate=False
        )

    def test_start_dry_run_acknowledgment_is_not_an_error(self, manager, client) -> None:
        client.start_instances.side_effect = ClientError(
            {"Error": {"Code": "DryRunOperation", "Message": "Request would have succeeded"}},
            "StartInstances",
        )

        manager.start_instances(["i-1"], dry_run=True)

    def test_missing_credentials(self, manager, client) -> None:
        client.run_instances.side_effect = NoCredentialsError()

        with pytest.raises(ProviderCredentialsError):
            manager.run_instances(ami_id="ami-1", instance_type="t3.micro", count=1)

    def test_describe_follows_every_page(self, manager, client) -> None:
        client.get_paginator.return_value.paginate.return_value = [
            {"Reservations": [{"Instances": [{"InstanceId": "i-1"}]}]},
            {"Reservations": [{"Instances": [{"InstanceId": "i-2"}, {"InstanceId": "i-3"}]}]},
        ]

        report = manager.describe_instances(["running"])

        assert report.instance_ids() == ["i-1", "i-2", "i-3"]
        client.get_paginator.return_value.paginate.assert_called_once_with(
            Filters=[{"Name": "instance-state-name", "Values": ["running"]}]
        )

    def test_connect_timeout_during_describe(self, manager, client) -> None:
        client.get_paginator.return_value.paginate.side_effect = ConnectTimeoutError(
            endpoint_url="https://ec2.eu-west-1.amazonaws.com"
        )

        with pytest.raises(ProviderConnectionError, match="Connect timeout"):
            manager.describe_instances(["running"])


def test_invalid_region_while_creating_client() -> None:
    factory = MagicMock(side_effect=InvalidRegionError(region_name="us east 1"))

    with pytest.raises(ProviderError, match="us east 1"):
        EC2Manager(region="us east 1", boto3_client_factory=factory)
