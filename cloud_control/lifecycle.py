from __future__ import annotations

import logging
from pathlib import Path

from cloud_control.constants import LISTED_INSTANCE_STATES, ReportKind, Transition
from cloud_control.core.config import ConfigLoader
from cloud_control.core.interfaces import ComputeProvider
from cloud_control.core.models import InstanceReport
from cloud_control.core.prompt import ConfirmationGate
from cloud_control.core.reports import ReportStore
from cloud_control.utils import truncate_name

logger = logging.getLogger(__name__)

STATES_BEFORE = {
    Transition.STOP: ["running"],
    Transition.START: ["stopped"],
}

EMPTY_TARGET_MESSAGES = {
    Transition.STOP: "No running instances",
    Transition.START: "No stopped instances",
}


class LifecycleManager:
    """Run instance lifecycle commands (list, stop, start, launch).

    Each command is one pass through the same pipeline: resolve the target
    instances, ask the operator, issue a single bulk request, and write a
    snapshot where the command produces one. Errors are never handled here;
    they propagate to the CLI entry point.

    Parameters
    ----------
    compute_provider : ComputeProvider
        Client issuing describe and bulk lifecycle requests
    report_store : ReportStore
        Reads and writes instance snapshots
    gate : ConfirmationGate
        Asks the operator before any mutating request
    config_loader : ConfigLoader | None
        Loads launch configuration files
    """

    def __init__(
        self,
        compute_provider: ComputeProvider,
        report_store: ReportStore,
        gate: ConfirmationGate,
        config_loader: ConfigLoader | None = None,
    ) -> None:
        self.compute_provider = compute_provider
        self.report_store = report_store
        self.gate = gate
        self.config_loader = config_loader or ConfigLoader()

    def list_instances(self) -> Path:
        """Print stopped, running and pending instances and snapshot them.

        Returns
        -------
        Path
            Snapshot file of kind ``all``
        """
        report = self.compute_provider.describe_instances(LISTED_INSTANCE_STATES)
        print_instance_report(report)

        output_path = self.report_store.write(report, ReportKind.ALL)
        print(f"\nOutput written to {output_path}")
        return output_path

    def list_instance_types(self) -> Path:
        """Write the instance types offered in the provider's region."""
        offerings = self.compute_provider.describe_instance_type_offerings()
        output_path = self.report_store.write_instance_types(
            self.compute_provider.region, offerings
        )
        print(f"\nOutput written to {output_path}")
        return output_path

    def stop_all_instances(self) -> None:
        """Stop every running instance after confirmation."""
        self._transition_all(Transition.STOP)

    def stop_instances(self, report_path: str) -> None:
        """Stop the instances listed in a snapshot file after confirmation."""
        self._transition_report(Transition.STOP, report_path)

    def start_all_instances(self) -> None:
        """Start every stopped instance after confirmation.

        Only existing instances are started; nothing new is created.
        """
        self._transition_all(Transition.START)

    def start_instances(self, report_path: str) -> None:
        """Start the instances listed in a snapshot file after confirmation."""
        self._transition_report(Transition.START, report_path)

    def launch_instances(self, config_path: str) -> Path | None:
        """Launch new instances described by a configuration file.

        Parameters
        ----------
        config_path : str
            INI or YAML launch configuration

        Returns
        -------
        Path | None
            Snapshot of kind ``launch`` with the new instances, or None if the
            operator declined
        """
        launch_config = self.config_loader.load_launch_config(config_path)

        if not self.gate.confirm_launch(launch_config):
            print("Bye!")
            return None

        logger.info(
            "Launching %d x %s from %s...",
            launch_config.count,
            launch_config.instance_type,
            launch_config.ami_id,
            extra={"stream": "stdout"},
        )
        report = self.compute_provider.run_instances(
            ami_id=launch_config.ami_id,
            instance_type=launch_config.instance_type,
            count=launch_config.count,
        )

        output_path = self.report_store.write(report, ReportKind.LAUNCH)
        print(f"\nOutput written to {output_path}")
        print("Done!")
        return output_path

    def _transition_all(self, transition: Transition) -> None:
        report = self.compute_provider.describe_instances(STATES_BEFORE[transition])

        if not len(report):
            print(EMPTY_TARGET_MESSAGES[transition])
            return

        self._confirm_and_execute(report, transition)

    def _transition_report(self, transition: Transition, report_path: str) -> None:
        report = self.report_store.load(report_path)

        if not len(report):
            print(f"No instances in report {report_path}")
            return

        self._confirm_and_execute(report, transition)

    def _confirm_and_execute(self, report: InstanceReport, transition: Transition) -> None:
        instance_ids = report.instance_ids()

        if not self.gate.confirm_transition(report, transition):
            print("Bye!")
            return

        if transition is Transition.STOP:
            logger.info(
                "Stopping %d instance(s)...", len(instance_ids), extra={"stream": "stdout"}
            )
            self.compute_provider.stop_instances(instance_ids, force=False, hibernate=False)
        else:
            logger.info(
                "Starting %d instance(s)...", len(instance_ids), extra={"stream": "stdout"}
            )
            self.compute_provider.start_instances(instance_ids)

        print("Done!")


def print_instance_report(report: InstanceReport) -> None:
    """Print instance details as a fixed-width table."""
    if not len(report):
        print("No instances found")
        return

    print(
        f"{'NAME':<20} {'INSTANCE-ID':<20} {'STATE':<10} {'TYPE':<15} "
        f"{'PUBLIC-IP':<16} {'PRIVATE-IP':<16}"
    )
    print("-" * 102)

    for instance in report:
        print(
            f"{truncate_name(instance.name):<20} {instance.instance_id:<20} "
            f"{instance.instance_state:<10} {instance.instance_type:<15} "
            f"{instance.public_ip:<16} {instance.private_ip:<16}"
        )
