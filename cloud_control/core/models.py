"""Instance snapshot data model."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import asdict, dataclass, fields
from typing import Any

from cloud_control.core.exceptions import InvalidReportError, ReportParseError


@dataclass(frozen=True)
class InstanceDetails:
    """Observed attributes of one instance at fetch time.

    Attributes
    ----------
    name : str
        Escaped ``Name`` tag value, or ``"None"`` when the tag is absent
    instance_id : str
        Provider-issued instance identifier
    instance_type : str
        Instance size/class (e.g. ``t3.micro``)
    instance_state : str
        Lifecycle state at fetch time; may be stale when acted on
    private_ip : str
        Private address, empty when not assigned
    public_ip : str
        Public address, empty when not assigned
    """

    name: str
    instance_id: str
    instance_type: str
    instance_state: str
    private_ip: str = ""
    public_ip: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> InstanceDetails:
        """Build details from one serialized report entry.

        Parameters
        ----------
        data : Any
            Decoded JSON object for one instance

        Returns
        -------
        InstanceDetails
            Parsed instance details

        Raises
        ------
        ReportParseError
            If the entry is not an object, lacks a field or has a non-string value
        """
        if not isinstance(data, dict):
            raise ReportParseError(f"Instance entry must be an object, got {type(data).__name__}")

        values = {}
        for field in fields(cls):
            if field.name not in data:
                raise ReportParseError(f"Instance entry is missing '{field.name}'")
            value = data[field.name]
            if not isinstance(value, str):
                raise ReportParseError(
                    f"Instance entry field '{field.name}' must be a string, "
                    f"got {type(value).__name__}"
                )
            values[field.name] = value

        return cls(**values)


@dataclass(frozen=True)
class InstanceReport:
    """Ordered, immutable collection of instance details.

    Order is the provider (or source file) enumeration order.
    """

    instances: tuple[InstanceDetails, ...] = ()

    def __iter__(self) -> Iterator[InstanceDetails]:
        return iter(self.instances)

    def __len__(self) -> int:
        return len(self.instances)

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        return {"instances": [instance.to_dict() for instance in self.instances]}

    @classmethod
    def from_dict(cls, data: Any) -> InstanceReport:
        """Build a report from its decoded JSON form.

        Parameters
        ----------
        data : Any
            Decoded JSON document

        Returns
        -------
        InstanceReport
            Parsed report

        Raises
        ------
        ReportParseError
            If the document or any entry is malformed; no entry is skipped
        """
        if not isinstance(data, dict) or "instances" not in data:
            raise ReportParseError("Report must be an object with an 'instances' list")

        entries = data["instances"]
        if not isinstance(entries, list):
            raise ReportParseError("Report 'instances' must be a list")

        return cls(tuple(InstanceDetails.from_dict(entry) for entry in entries))

    def instance_ids(self) -> list[str]:
        """Return the ids of every instance, in report order.

        Raises
        ------
        InvalidReportError
            If any entry has an empty instance id
        """
        ids = []
        for position, instance in enumerate(self.instances):
            if not instance.instance_id.strip():
                raise InvalidReportError(
                    f"Instance entry {position} ({instance.name}) has no instance_id"
                )
            ids.append(instance.instance_id)
        return ids
