"""Operator confirmation before any mutating request."""

from __future__ import annotations

import logging

from cloud_control.constants import AFFIRMATIVE_ANSWER, Transition
from cloud_control.core.config import LaunchConfig
from cloud_control.core.interfaces import Confirm
from cloud_control.core.models import InstanceReport

logger = logging.getLogger(__name__)

CONTINUE_PROMPT = "Continue: (y/n) "

TRANSITION_PAST_TENSE = {
    Transition.STOP: "stopped",
    Transition.START: "started",
}


def is_affirmative(answer: str) -> bool:
    """Return True only for a case-insensitive ``y``."""
    return answer.strip().lower() == AFFIRMATIVE_ANSWER


def console_confirm(prompt: str) -> bool:
    """Ask the operator on the terminal and block until a line is entered.

    Parameters
    ----------
    prompt : str
        Question shown before reading input

    Returns
    -------
    bool
        True if the operator answered ``y``; end of input counts as a decline
    """
    try:
        answer = input(prompt)
    except EOFError:
        print()
        return False

    return is_affirmative(answer)


def render_transition_targets(report: InstanceReport, transition: Transition) -> str:
    """Render the instances a transition will act on."""
    header = f"The following instances will be {TRANSITION_PAST_TENSE[transition]}:"
    lines = ["", header, "-" * len(header), ""]
    lines.extend(
        f"Name: {instance.name}, ID: {instance.instance_id}, "
        f"Instance type: {instance.instance_type}"
        for instance in report
    )
    return "\n".join(lines)


def render_launch_request(config: LaunchConfig) -> str:
    """Render the parameters of a launch request."""
    header = "Launch request details:"
    return "\n".join(
        [
            "",
            header,
            "-" * len(header),
            "",
            f"AMI Name: {config.ami_name or config.ami_id}",
            f"AMI ID: {config.ami_id}",
            f"Instance type: {config.instance_type}",
            f"Count: {config.count}",
        ]
    )


class ConfirmationGate:
    """Show the operator what is about to happen and ask for a ``y``.

    The gate never mutates anything; a decline guarantees the caller makes
    no provider request.

    Parameters
    ----------
    confirm : Confirm
        Blocking yes/no question, e.g. console_confirm
    """

    def __init__(self, confirm: Confirm = console_confirm) -> None:
        self.confirm = confirm

    def confirm_transition(self, report: InstanceReport, transition: Transition) -> bool:
        print(render_transition_targets(report, transition))
        return self._ask()

    def confirm_launch(self, config: LaunchConfig) -> bool:
        print(render_launch_request(config))
        return self._ask()

    def _ask(self) -> bool:
        accepted = self.confirm(f"\n{CONTINUE_PROMPT}")
        logger.debug("Operator %s", "confirmed" if accepted else "declined")
        return accepted
