"""AWS-specific utility functions for cloud-control."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any
from urllib.parse import quote_plus

from cloud_control.constants import MISSING_NAME_PLACEHOLDER
from cloud_control.core.models import InstanceDetails, InstanceReport


def resolve_instance_name(tags: Iterable[dict[str, str]] | None) -> str:
    """Resolve the display name of an instance from its tag set.

    Parameters
    ----------
    tags : Iterable[dict[str, str]] | None
        EC2 tag list (``[{"Key": ..., "Value": ...}]``)

    Returns
    -------
    str
        Query-escaped ``Name`` tag value, or ``"None"`` if the tag is absent
    """
    name = MISSING_NAME_PLACEHOLDER
    for tag in tags or []:
        if tag.get("Key") == "Name":
            name = quote_plus(tag.get("Value", ""))
    return name


def instance_details_from_response(instance: dict[str, Any]) -> InstanceDetails:
    """Normalize one EC2 instance description into InstanceDetails.

    Parameters
    ----------
    instance : dict[str, Any]
        Instance dictionary from a boto3 describe or run response

    Returns
    -------
    InstanceDetails
        Flattened instance details; absent values become empty strings
    """
    return InstanceDetails(
        name=resolve_instance_name(instance.get("Tags")),
        instance_id=instance.get("InstanceId") or "",
        instance_type=instance.get("InstanceType") or "",
        instance_state=(instance.get("State") or {}).get("Name") or "",
        private_ip=instance.get("PrivateIpAddress") or "",
        public_ip=instance.get("PublicIpAddress") or "",
    )


def parse_reservations(reservations: Iterable[dict[str, Any]]) -> InstanceReport:
    """Flatten reservation-grouped instances into a report.

    Parameters
    ----------
    reservations : Iterable[dict[str, Any]]
        ``Reservations`` entries from describe_instances pages

    Returns
    -------
    InstanceReport
        Report in provider enumeration order
    """
    return InstanceReport(
        tuple(
            instance_details_from_response(instance)
            for reservation in reservations
            for instance in reservation.get("Instances", [])
        )
    )


def parse_reservation(reservation: dict[str, Any]) -> InstanceReport:
    """Build a report from the single reservation returned by run_instances."""
    return parse_reservations([reservation])


def get_aws_credentials_error_message() -> str:
    """Get standard AWS credentials error message.

    Returns
    -------
    str
        Formatted AWS credentials error message
    """
    return (
        "Cloud credentials not found\n\n"
        "Add them to the [default] section of your AWS config file:\n"
        "  aws_access_key_id = ...\n"
        "  aws_secret_access_key = ...\n\n"
        "Or point cloud-control at another file:\n"
        "  cloud-control --aws-config path/to/config --list-instances"
    )
