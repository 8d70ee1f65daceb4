"""Reading and writing instance snapshots on disk."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from datetime import datetime
from pathlib import Path

from cloud_control.constants import (
    INSTANCE_TYPES_FILENAME_TEMPLATE,
    REPORT_FILENAME_TEMPLATE,
    REPORT_TIMESTAMP_FORMAT,
    ReportKind,
)
from cloud_control.core.exceptions import ReportNotFoundError, ReportParseError, WriteError
from cloud_control.core.models import InstanceReport

logger = logging.getLogger(__name__)


def report_filename(kind: ReportKind, moment: datetime) -> str:
    """Build the snapshot filename for a report kind and point in time.

    Parameters
    ----------
    kind : ReportKind
        Kind of snapshot
    moment : datetime
        Time of the write; only second resolution is kept

    Returns
    -------
    str
        Filename such as ``all_instance_details_2024-05-01_12:30:00.json``
    """
    timestamp = moment.strftime(REPORT_TIMESTAMP_FORMAT).replace(" ", "_")
    return REPORT_FILENAME_TEMPLATE.format(kind=kind.value, timestamp=timestamp)


class ReportStore:
    """Filesystem store for instance snapshots.

    Snapshots are never updated in place: every write creates a new file
    named after its kind and the current time.

    Parameters
    ----------
    directory : Path | str
        Directory that receives written files
    clock : Callable[[], datetime] | None
        Source of the current time. If None, uses datetime.now
    """

    def __init__(
        self,
        directory: Path | str = ".",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.clock = clock or datetime.now

    def load(self, path: str | Path) -> InstanceReport:
        """Load a snapshot file in full.

        Parameters
        ----------
        path : str | Path
            Snapshot file to read

        Returns
        -------
        InstanceReport
            Every entry of the file, in file order

        Raises
        ------
        ReportNotFoundError
            If the path does not exist
        ReportParseError
            If the file cannot be read or is not a valid snapshot
        """
        report_path = Path(path)

        if not report_path.exists():
            raise ReportNotFoundError(str(path))

        try:
            content = report_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReportParseError(f"Failed to read report file {path}: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ReportParseError(f"Invalid JSON in {path}: {e}") from e

        try:
            report = InstanceReport.from_dict(data)
        except ReportParseError as e:
            raise ReportParseError(f"Invalid instance report {path}: {e}") from e

        logger.debug("Loaded %d instance(s) from %s", len(report), path)
        return report

    def write(self, report: InstanceReport, kind: ReportKind) -> Path:
        """Persist a snapshot to a new timestamped file.

        Parameters
        ----------
        report : InstanceReport
            Instances to persist
        kind : ReportKind
            Kind of snapshot; embedded in the filename

        Returns
        -------
        Path
            Path of the written file

        Raises
        ------
        WriteError
            If the file cannot be written. A partially written file is left
            in place.
        """
        path = self.directory / report_filename(kind, self.clock())
        self._write_text(path, json.dumps(report.to_dict()))
        logger.debug("Wrote %d instance(s) to %s", len(report), path)
        return path

    def write_instance_types(self, region: str, instance_types: Iterable[str]) -> Path:
        """Persist an instance type listing, one type per line."""
        path = self.directory / INSTANCE_TYPES_FILENAME_TEMPLATE.format(region=region)
        self._write_text(path, "".join(f"{instance_type}\n" for instance_type in instance_types))
        return path

    def _write_text(self, path: Path, content: str) -> None:
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise WriteError(str(path), e) from e
