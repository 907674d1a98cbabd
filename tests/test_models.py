"""Tests for launch request and outcome models."""

from pathlib import Path

import pytest
from pydantic import TypeAdapter, ValidationError

from simlaunch.models.launch import (
    Crashed,
    CrashReport,
    ExitedNonZero,
    LaunchOutcome,
    LaunchRequest,
    ProcessFailed,
    SignalTerminated,
    Success,
    TimedOut,
)
from simlaunch.models.toolchain import Toolchain


def test_name_is_bundle_base_name_without_extension():
    request = LaunchRequest(app_path=Path("/tmp/build/KitchenSink.app"))

    assert request.name == "KitchenSink"


def test_auto_exit_hides_by_default():
    assert LaunchRequest(app_path=Path("A.app"), auto_exit=True).hidden is True
    assert LaunchRequest(app_path=Path("A.app"), auto_exit=True, hide=False).hidden is False
    assert LaunchRequest(app_path=Path("A.app")).hide is None
    assert LaunchRequest(app_path=Path("A.app")).hidden is False


def test_request_is_immutable():
    request = LaunchRequest(app_path=Path("A.app"))

    with pytest.raises(ValidationError):
        request.unit = True


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        LaunchRequest(app_path=Path("A.app"), timeout_ms=0)


@pytest.mark.parametrize(
    ("outcome", "ok", "message"),
    [
        (Success(), True, "launch finished"),
        (Crashed(report=CrashReport(path=Path("/r/_a.plist"), text_path=Path("/r/a"))), False, "launch crashed"),
        (TimedOut(), False, "launch timed out"),
        (SignalTerminated(signal="SIGKILL"), False, "signal received: SIGKILL"),
        (ProcessFailed(error="boom"), False, "boom"),
        (ExitedNonZero(exit_code=3), False, "exited with 3"),
    ],
)
def test_outcome_descriptions(outcome, ok, message):
    assert outcome.ok is ok
    assert outcome.describe() == message


def test_outcome_union_is_discriminated_by_kind():
    adapter = TypeAdapter(LaunchOutcome)

    outcome = adapter.validate_python({"kind": "exited_non_zero", "exit_code": 2})

    assert isinstance(outcome, ExitedNonZero)
    assert outcome.kind == "exited_non_zero"
    assert Success(payload={"a": 1}).model_dump(mode="json") == {
        "kind": "success",
        "payload": {"a": 1},
    }


def test_toolchain_id():
    toolchain = Toolchain(path=Path("/Applications/Xcode.app/Contents/Developer"), version="15.2", build="15C500b")

    assert toolchain.id == "15.2:15C500b"
