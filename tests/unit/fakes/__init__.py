"""Test doubles injected in place of AWS and the terminal."""

from fakes.fake_confirm import ScriptedConfirm
from fakes.fake_ec2_manager import FakeEC2Manager

__all__ = ["FakeEC2Manager", "ScriptedConfirm"]
