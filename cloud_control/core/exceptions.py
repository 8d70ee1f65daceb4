"""Error kinds raised by the cloud-control pipeline.

Every stage raises one of these and lets it propagate; the CLI entry point
is the only place that maps them to messages and exit codes.
"""

from __future__ import annotations


class CloudControlError(Exception):
    """Base class for all cloud-control errors."""


class UsageError(CloudControlError):
    """Command line did not describe exactly one runnable action."""


class ConfigError(CloudControlError):
    """Configuration could not be loaded."""


class ConfigNotFoundError(ConfigError):
    """Configuration file does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"No config file found at: {path}")


class ConfigParseError(ConfigError):
    """Configuration file is malformed or a key is missing or mistyped."""


class ReportError(CloudControlError):
    """Instance report could not be loaded."""


class ReportNotFoundError(ReportError):
    """Instance report file does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"No instance report file found at: {path}")


class ReportParseError(ReportError):
    """Instance report file is not a valid serialized report."""


class InvalidReportError(ReportParseError):
    """Report parsed, but an entry cannot be used as a batch target."""


class WriteError(CloudControlError):
    """Snapshot or listing could not be persisted.

    Parameters
    ----------
    path : str
        File that was being written
    cause : OSError
        Underlying I/O failure
    """

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause}")
