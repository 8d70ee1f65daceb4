"""EC2 instance management for cloud-control."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

import boto3

from cloud_control.constants import INSTANCE_STATE_FILTER
from cloud_control.core.models import InstanceReport
from cloud_control.providers.aws.errors import handle_aws_errors
from cloud_control.providers.aws.utils import parse_reservation, parse_reservations

logger = logging.getLogger(__name__)


class EC2Manager:
    """Issue EC2 describe and bulk lifecycle requests.

    Every method makes a single logical request. Nothing is retried,
    polled or waited on; state transitions are reported at call level only.
    """

    def __init__(
        self,
        region: str,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        boto3_client_factory: Callable[..., Any] | None = None,
    ) -> None:
        """Initialize EC2 manager.

        Parameters
        ----------
        region : str
            AWS region for EC2 operations
        aws_access_key_id : str | None
            Static access key. If None, boto3 resolves credentials itself
        aws_secret_access_key : str | None
            Static secret key matching ``aws_access_key_id``
        boto3_client_factory : Callable[..., Any] | None
            Optional factory for creating boto3 clients. If None, uses boto3.client

        Raises
        ------
        ProviderError
            If the client cannot be created, e.g. for a malformed region name
        """
        self.region = region
        self.boto3_client_factory = boto3_client_factory or boto3.client
        with handle_aws_errors():
            self.ec2_client = self.boto3_client_factory(
                "ec2",
                region_name=region,
                aws_access_key_id=aws_access_key_id,
                aws_secret_access_key=aws_secret_access_key,
            )

    def describe_instances(self, state_values: Sequence[str]) -> InstanceReport:
        """List instances whose lifecycle state is one of ``state_values``.

        Parameters
        ----------
        state_values : Sequence[str]
            Acceptable values for the ``instance-state-name`` filter

        Returns
        -------
        InstanceReport
            Matching instances in provider enumeration order
        """
        logger.debug(
            "Describing instances in %s with state in %s", self.region, list(state_values)
        )

        with handle_aws_errors():
            paginator = self.ec2_client.get_paginator("describe_instances")
            page_iterator = paginator.paginate(
                Filters=[{"Name": INSTANCE_STATE_FILTER, "Values": list(state_values)}]
            )
            reservations = [
                reservation
                for page in page_iterator
                for reservation in page.get("Reservations", [])
            ]

        return parse_reservations(reservations)

    def describe_instance_type_offerings(self) -> list[str]:
        """List instance types offered in the manager's region, sorted by name."""
        with handle_aws_errors():
            paginator = self.ec2_client.get_paginator("describe_instance_type_offerings")
            offerings = [
                offering["InstanceType"]
                for page in paginator.paginate(DryRun=False)
                for offering in page.get("InstanceTypeOfferings", [])
            ]

        return sorted(offerings)

    def stop_instances(
        self,
        instance_ids: Sequence[str],
        force: bool = False,
        hibernate: bool = False,
        dry_run: bool = False,
    ) -> None:
        """Request a stop of every instance in one call.

        Parameters
        ----------
        instance_ids : Sequence[str]
            Instances to stop
        force : bool
            Force the stop without a graceful OS shutdown
        hibernate : bool
            Hibernate instead of stopping
        dry_run : bool
            Only validate the request; the dry-run acknowledgment is not an error

        Raises
        ------
        ProviderCallError
            If EC2 rejects the request for any reason other than a dry run
        """
        logger.debug("Stopping %d instance(s): %s", len(instance_ids), list(instance_ids))

        with handle_aws_errors(tolerate_dry_run=True):
            self.ec2_client.stop_instances(
                InstanceIds=list(instance_ids),
                DryRun=dry_run,
                Force=force,
                Hibernate=hibernate,
            )

    def start_instances(self, instance_ids: Sequence[str], dry_run: bool = False) -> None:
        """Request a start of every instance in one call.

        Parameters
        ----------
        instance_ids : Sequence[str]
            Instances to start
        dry_run : bool
            Only validate the request; the dry-run acknowledgment is not an error

        Raises
        ------
        ProviderCallError
            If EC2 rejects the request for any reason other than a dry run
        """
        logger.debug("Starting %d instance(s): %s", len(instance_ids), list(instance_ids))

        with handle_aws_errors(tolerate_dry_run=True):
            self.ec2_client.start_instances(InstanceIds=list(instance_ids), DryRun=dry_run)

    def run_instances(self, ami_id: str, instance_type: str, count: int) -> InstanceReport:
        """Launch exactly ``count`` instances of one AMI and type.

        Parameters
        ----------
        ami_id : str
            Image to launch
        instance_type : str
            Instance type for every new instance
        count : int
            Number of instances; used as both MinCount and MaxCount

        Returns
        -------
        InstanceReport
            The new instances as returned in the reservation
        """
        logger.debug("Launching %d x %s from %s", count, instance_type, ami_id)

        with handle_aws_errors():
            reservation = self.ec2_client.run_instances(
                ImageId=ami_id,
                InstanceType=instance_type,
                MinCount=count,
                MaxCount=count,
            )

        return parse_reservation(reservation)
