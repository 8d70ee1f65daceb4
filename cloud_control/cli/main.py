"""CLI entry point for cloud-control."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import fire

from cloud_control.core.exceptions import CloudControlError, UsageError
from cloud_control.logging import StreamFormatter, StreamRoutingFilter
from cloud_control.providers import (
    ProviderCallError,
    ProviderConnectionError,
    ProviderCredentialsError,
)
from cloud_control.providers.aws.utils import get_aws_credentials_error_message
from cloud_control.utils import log_and_print_error

logger = logging.getLogger(__name__)

ACTIONS = (
    "list_instances",
    "list_instance_types",
    "stop_all_instances",
    "stop_instances",
    "start_all_instances",
    "start_instances",
    "launch_instances",
)
"""Action flags, in the order they are reported in usage errors."""

FILE_ACTIONS = frozenset({"stop_instances", "start_instances", "launch_instances"})
"""Actions that need a report or launch configuration path."""

USAGE = (
    "Usage: cloud-control [--aws-config PATH] ACTION [FILE]\n\n"
    "Actions:\n"
    "  --list-instances         List all instances (running, stopped or pending)\n"
    "  --list-instance-types    List available instance types for region\n"
    "  --stop-all-instances     Stop all running instances\n"
    "  --stop-instances FILE    Stop instances specified in instance report\n"
    "  --start-all-instances    Start all stopped instances\n"
    "  --start-instances FILE   Start all instances specified in instance report\n"
    "  --launch-instances FILE  Launch instances from a config file"
)


def get_cloud_control_class() -> type:
    """Get CloudControl class on-demand to avoid circular imports.

    Returns
    -------
    type
        CloudControl class
    """
    from cloud_control.__main__ import CloudControl

    return CloudControl


def flag_name(action: str) -> str:
    return "--" + action.replace("_", "-")


def select_action(
    flags: dict[str, Any], path: str | None = None
) -> tuple[str, str | None] | None:
    """Resolve the single requested action and its file argument.

    File-driven actions accept their path either as the flag value
    (``--stop-instances report.json``) or as the positional argument.

    Parameters
    ----------
    flags : dict[str, Any]
        Action flag values as parsed by fire, keyed by action name
    path : str | None
        Positional file argument

    Returns
    -------
    tuple[str, str | None] | None
        ``(action, path)``, or None if no action was requested

    Raises
    ------
    UsageError
        If several actions are requested, a file is missing, or a value is
        passed to an action that takes none
    """
    selected = [
        action for action in ACTIONS if flags.get(action) not in (None, False)
    ]

    if not selected:
        return None

    if len(selected) > 1:
        raise UsageError(
            "Choose exactly one action, got: " + ", ".join(flag_name(a) for a in selected)
        )

    action = selected[0]
    value = flags[action]
    flag_path = None if value is True else str(value)
    positional = None if path is None else str(path)

    if action not in FILE_ACTIONS:
        if flag_path is not None or positional is not None:
            raise UsageError(f"{flag_name(action)} does not take a file argument")
        return action, None

    if flag_path is not None and positional is not None:
        raise UsageError(f"{flag_name(action)} takes one file, got two")

    target = flag_path or positional
    if target is None:
        kind = "Instance config" if action == "launch_instances" else "Instance details"
        raise UsageError(f"{kind} file required but not supplied")

    return action, target


def cloud_control(
    path: str | None = None,
    list_instances: bool | str = False,
    list_instance_types: bool | str = False,
    stop_all_instances: bool | str = False,
    stop_instances: bool | str = False,
    start_all_instances: bool | str = False,
    start_instances: bool | str = False,
    launch_instances: bool | str = False,
    aws_config: str | None = None,
) -> None:
    """Inspect and control EC2 instances.

    Parameters
    ----------
    path : str | None
        Instance report (stop/start) or launch configuration (launch)
    list_instances : bool | str
        List all instances and write an ``all`` snapshot
    list_instance_types : bool | str
        List available instance types for region
    stop_all_instances : bool | str
        Stop all running instances
    stop_instances : bool | str
        Stop instances specified in instance report
    start_all_instances : bool | str
        Start all stopped instances
    start_instances : bool | str
        Start all instances specified in instance report
    launch_instances : bool | str
        Launch instances from a config file and write a ``launch`` snapshot
    aws_config : str | None
        Path to AWS config file (default: ~/.aws/config)
    """
    selection = select_action(
        {
            "list_instances": list_instances,
            "list_instance_types": list_instance_types,
            "stop_all_instances": stop_all_instances,
            "stop_instances": stop_instances,
            "start_all_instances": start_all_instances,
            "start_instances": start_instances,
            "launch_instances": launch_instances,
        },
        path=path,
    )

    if selection is None:
        print(USAGE)
        return

    action, target = selection
    CloudControl = get_cloud_control_class()
    CloudControl(aws_config=aws_config).run_action(action, target)


def handle_credentials_error(debug_mode: bool) -> None:
    """Handle provider credentials error.

    Parameters
    ----------
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderCredentialsError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    print(get_aws_credentials_error_message(), file=sys.stderr)
    sys.exit(1)


def handle_api_error(error: ProviderCallError, debug_mode: bool) -> None:
    """Handle provider API error with context-specific messages.

    Parameters
    ----------
    error : ProviderCallError
        The API error that was raised
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    ProviderCallError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    error_code = error.error_code
    error_msg = str(error)

    if error_code == "UnauthorizedOperation":
        print("Insufficient IAM permissions\n", file=sys.stderr)
        print(
            "Your cloud credentials don't have the required permissions.",
            file=sys.stderr,
        )
        print("Contact your cloud administrator to grant:", file=sys.stderr)
        print(
            "  - ec2:DescribeInstances, ec2:DescribeInstanceTypeOfferings",
            file=sys.stderr,
        )
        print(
            "  - ec2:StopInstances, ec2:StartInstances, ec2:RunInstances",
            file=sys.stderr,
        )
    elif error_code == "InvalidParameterValue" and "instance type" in error_msg.lower():
        print("Invalid instance type\n", file=sys.stderr)
        print("This usually means:", file=sys.stderr)
        print("  - Instance type not available in this region", file=sys.stderr)
        print("  - Typo in instance type name\n", file=sys.stderr)
        print("Fix it:", file=sys.stderr)
        print("  cloud-control --list-instance-types", file=sys.stderr)
    elif error_code in ["InstanceLimitExceeded", "RequestLimitExceeded"]:
        print("Cloud quota exceeded\n", file=sys.stderr)
        print("This usually means:", file=sys.stderr)
        print("  - Too many instances running", file=sys.stderr)
        print("  - Need to request quota increase\n", file=sys.stderr)
        print("Fix it:", file=sys.stderr)
        print("  https://console.aws.amazon.com/servicequotas/", file=sys.stderr)
        print("  cloud-control --list-instances", file=sys.stderr)
    elif error_code in ["AuthFailure", "ExpiredToken", "RequestExpired"]:
        print("Cloud credentials were rejected or have expired\n", file=sys.stderr)
        print("Fix it:", file=sys.stderr)
        print(
            "  Update aws_access_key_id / aws_secret_access_key in your AWS config file",
            file=sys.stderr,
        )
    else:
        print(f"Cloud API error: {error_msg}", file=sys.stderr)

    sys.exit(1)


def handle_connection_error(error: ProviderConnectionError, debug_mode: bool) -> None:
    """Handle an unreachable provider endpoint."""
    if debug_mode:
        raise

    print(f"Cannot reach the cloud provider: {error}\n", file=sys.stderr)
    print("Check the region in your AWS config file and your network.", file=sys.stderr)
    sys.exit(1)


def handle_error(error: CloudControlError, debug_mode: bool) -> None:
    """Handle any other cloud-control error.

    Parameters
    ----------
    error : CloudControlError
        Configuration, report, usage or write error
    debug_mode : bool
        Whether debug mode is enabled

    Raises
    ------
    CloudControlError
        Re-raised if debug mode is enabled
    """
    if debug_mode:
        raise

    log_and_print_error("%s", error)
    if isinstance(error, UsageError):
        print(f"\n{USAGE}", file=sys.stderr)
    sys.exit(1)


def configure_logging() -> None:
    """Route log records to stdout or stderr based on their ``stream`` extra."""
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(StreamFormatter("%(message)s"))
    stdout_handler.addFilter(StreamRoutingFilter("stdout"))

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(StreamFormatter("%(message)s"))
    stderr_handler.addFilter(StreamRoutingFilter("stderr"))

    verbose = os.environ.get("CLOUD_CONTROL_VERBOSE") == "1"

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        handlers=[stdout_handler, stderr_handler],
    )

    for boto_module in ["botocore", "boto3", "urllib3"]:
        logging.getLogger(boto_module).setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> None:
    """Entry point for the Fire CLI with graceful error handling.

    Every error raised by a command reaches this function, which prints a
    message and exits with status 1. A declined confirmation is not an
    error and exits 0.

    Parameters
    ----------
    argv : list[str] | None
        Command line arguments; defaults to sys.argv[1:]
    """
    configure_logging()

    debug_mode = os.environ.get("CLOUD_CONTROL_DEBUG") == "1"

    try:
        fire.Fire(cloud_control, command=argv, name="cloud-control")
    except ProviderCredentialsError:
        handle_credentials_error(debug_mode)
    except ProviderCallError as e:
        handle_api_error(e, debug_mode)
    except ProviderConnectionError as e:
        handle_connection_error(e, debug_mode)
    except CloudControlError as e:
        handle_error(e, debug_mode)
