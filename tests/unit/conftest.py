"""Pytest configuration and fixtures for cloud-control tests."""

import json
import os
import sys
from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

import pytest

unit_root = Path(__file__).parent
if str(unit_root) not in sys.path:
    sys.path.insert(0, str(unit_root))

from fakes import FakeEC2Manager, ScriptedConfirm  # noqa: E402

from cloud_control.core.models import InstanceDetails  # noqa: E402
from cloud_control.core.prompt import ConfirmationGate  # noqa: E402
from cloud_control.core.reports import ReportStore  # noqa: E402
from cloud_control.lifecycle import LifecycleManager  # noqa: E402

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45)


@pytest.fixture(autouse=True)
def cleanup_cloud_control_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure cloud-control environment variables from the host do not leak in."""
    for name in (
        "CLOUD_CONTROL_AWS_CONFIG",
        "CLOUD_CONTROL_REPORT_DIR",
        "CLOUD_CONTROL_DEBUG",
        "CLOUD_CONTROL_VERBOSE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def aws_credentials() -> Generator[None, None, None]:
    """Fixture to set AWS credentials for testing with proper cleanup.

    Sets mock AWS credentials in environment variables for the duration of the test,
    then restores the original environment state.

    Yields
    ------
    None
        Control back to test after setting credentials
    """
    names = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_DEFAULT_REGION")
    original = {name: os.environ.get(name) for name in names}

    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"

    yield

    for name, value in original.items():
        if value is not None:
            os.environ[name] = value
        else:
            os.environ.pop(name, None)


@pytest.fixture
def running_instances() -> list[InstanceDetails]:
    """Two running instances and one stopped instance."""
    return [
        InstanceDetails(
            name="web-1",
            instance_id="i-0aaaaaaaaaaaaaaa1",
            instance_type="t3.micro",
            instance_state="running",
            private_ip="10.0.0.11",
            public_ip="54.0.0.11",
        ),
        InstanceDetails(
            name="web-2",
            instance_id="i-0aaaaaaaaaaaaaaa2",
            instance_type="t3.small",
            instance_state="running",
            private_ip="10.0.0.12",
            public_ip="",
        ),
        InstanceDetails(
            name="None",
            instance_id="i-0bbbbbbbbbbbbbbb1",
            instance_type="m5.large",
            instance_state="stopped",
            private_ip="10.0.0.21",
            public_ip="",
        ),
    ]


@pytest.fixture
def fake_ec2(running_instances: list[InstanceDetails]) -> FakeEC2Manager:
    return FakeEC2Manager(region="us-east-1", instances=running_instances)


@pytest.fixture
def report_store(tmp_path: Path) -> ReportStore:
    return ReportStore(tmp_path, clock=lambda: FIXED_NOW)


@pytest.fixture
def make_lifecycle(
    fake_ec2: FakeEC2Manager, report_store: ReportStore
) -> Callable[[str], tuple[LifecycleManager, ScriptedConfirm]]:
    """Build a LifecycleManager whose operator always gives ``answer``."""

    def _make(answer: str = "y") -> tuple[LifecycleManager, ScriptedConfirm]:
        confirm = ScriptedConfirm(answer)
        manager = LifecycleManager(
            compute_provider=fake_ec2,
            report_store=report_store,
            gate=ConfirmationGate(confirm),
        )
        return manager, confirm

    return _make


@pytest.fixture
def write_report(tmp_path: Path) -> Callable[..., Path]:
    """Helper fixture to write a snapshot file.

    Returns
    -------
    callable
        Function taking a list of entry dicts (or a raw document) and a
        filename, returning the written path
    """

    def _write(entries: Any, filename: str = "report.json") -> Path:
        path = tmp_path / filename
        document = {"instances": entries} if isinstance(entries, list) else entries
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def aws_config_file(tmp_path: Path) -> Path:
    """AWS config file with region and static credentials."""
    path = tmp_path / "aws_config"
    path.write_text(
        "[default]\n"
        "region = us-east-1\n"
        "aws_access_key_id = testing\n"
        "aws_secret_access_key = testing\n"
        "output = json\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def launch_config_file(tmp_path: Path) -> Callable[..., Path]:
    """Helper fixture to write an INI launch configuration."""

    def _write(count: str = "3", **overrides: str) -> Path:
        values = {
            "ami_id": "ami-1",
            "ami_name": "ubuntu-jammy",
            "instance_type": "t3.micro",
            "count": count,
        }
        values.update(overrides)
        path = tmp_path / "launch.ini"
        body = "".join(f"{key} = {value}\n" for key, value in values.items())
        path.write_text(f"[instance]\n{body}", encoding="utf-8")
        return path

    return _write
