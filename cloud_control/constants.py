"""Global constants for cloud-control.

This module contains application-wide constants shared by the lifecycle
pipeline, the report store and the CLI.
"""

from enum import Enum

DEFAULT_AWS_CONFIG_PATH = "~/.aws/config"
"""Default location of the AWS config file.

The file is INI formatted and must carry a ``[default]`` section with at
least a ``region`` key. Overridden by ``--aws-config`` or the
``CLOUD_CONTROL_AWS_CONFIG`` environment variable.
"""

AWS_CONFIG_SECTION = "default"
"""INI section of the AWS config file holding region and credentials."""

LAUNCH_CONFIG_SECTION = "instance"
"""INI section (or YAML mapping key) of a launch configuration file."""

DEFAULT_REPORT_DIR = "."
"""Directory that receives snapshot files unless CLOUD_CONTROL_REPORT_DIR is set."""

REPORT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
"""Timestamp embedded in snapshot filenames.

Second resolution. Spaces are replaced with underscores before the
timestamp is used in a filename, so two snapshots of the same kind written
within one wall-clock second collide.
"""

REPORT_FILENAME_TEMPLATE = "{kind}_instance_details_{timestamp}.json"
"""Filename template for instance snapshots."""

INSTANCE_TYPES_FILENAME_TEMPLATE = "instance_types_{region}.txt"
"""Filename template for the instance type offering listing."""

MISSING_NAME_PLACEHOLDER = "None"
"""Name recorded for instances that carry no ``Name`` tag."""

INSTANCE_STATE_FILTER = "instance-state-name"
"""EC2 describe filter used to select instances by lifecycle state."""

LISTED_INSTANCE_STATES = ["stopped", "running", "pending"]
"""States reported by the instance listing."""

DRY_RUN_ERROR_CODE = "DryRunOperation"
"""EC2 error code meaning the request was valid but deliberately not executed."""

DEFAULT_NAME_COLUMN_WIDTH = 19
"""Maximum displayed width of the NAME column in instance listings."""

AFFIRMATIVE_ANSWER = "y"
"""Operator answer, compared case-insensitively, that confirms an action."""


class ReportKind(Enum):
    """Kinds of instance snapshot written to disk."""

    ALL = "all"
    LAUNCH = "launch"


class Transition(Enum):
    """Bulk lifecycle transitions the executor can issue."""

    STOP = "stop"
    START = "start"
