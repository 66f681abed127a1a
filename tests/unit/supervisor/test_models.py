import dataclasses

import pytest

from r2pilot.exceptions import ProcessExitError
from r2pilot.supervisor import ProcessState, TerminationInfo


class TestProcessState:
    def test_values(self) -> None:
        assert ProcessState.STOPPED == "stopped"
        assert ProcessState.RUNNING == "running"
        assert ProcessState.DEAD == "dead"


class TestTerminationInfo:
    def test_defaults(self) -> None:
        info = TerminationInfo(state=ProcessState.STOPPED)

        assert info.err() is None
        assert info.combined_output() == ""
        assert info.exit_code is None
        assert info.pid is None

    def test_accessors_return_fields(self) -> None:
        error = ProcessExitError("radare2 exited with code 3", exit_code=3)
        info = TerminationInfo(
            state=ProcessState.DEAD, error=error, output="boom", exit_code=3
        )

        assert info.err() is error
        assert info.combined_output() == "boom"

    def test_is_immutable(self) -> None:
        info = TerminationInfo(state=ProcessState.STOPPED)

        with pytest.raises(dataclasses.FrozenInstanceError):
            info.state = ProcessState.DEAD  # pyright: ignore[reportAttributeAccessIssue]
