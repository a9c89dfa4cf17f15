"""Tests for NavigationState."""

from __future__ import annotations

import pytest

from collector.errors import CommandSyntaxError, DataSourceError
from collector.navigation.state import NavigationState


def test_fresh_state() -> None:
    """Test a new state starts at the first trial."""
    state = NavigationState(length=3)
    assert state.position == 0
    assert state.trial_number == 0
    assert not state.is_terminal


def test_commit_advances_and_counts() -> None:
    """Test committing moves the position and counts the trial."""
    state = NavigationState(length=3)
    state.commit(state.next_position(None).unwrap())
    state.commit(state.next_position("mod proc index: r-1").unwrap())
    assert state.position == 0
    assert state.trial_number == 2


def test_terminal_state() -> None:
    """Test reaching the length ends the experiment."""
    state = NavigationState(length=1)
    state.commit(state.next_position(None).unwrap())
    assert state.is_terminal


def test_empty_procedure_is_terminal() -> None:
    """Test a procedure without trials is over immediately."""
    assert NavigationState(length=0).is_terminal


def test_failed_command_leaves_state_unchanged() -> None:
    """Test a malformed command does not move the position."""
    state = NavigationState(length=5, position=2)
    with pytest.raises(CommandSyntaxError):
        state.commit(state.next_position("mod proc index:").unwrap())
    assert state.position == 2
    assert state.trial_number == 0


def test_resume_from_responses() -> None:
    """Test resuming uses the last recorded trial's next position."""
    responses = [
        [{"Exp_Trial_Number": "0", "Exp_Next_Proc_Index": "1"}],
        [
            {"Exp_Trial_Number": "1", "Exp_Next_Proc_Index": "4"},
            {"Exp_Trial_Number": "1", "Exp_Next_Proc_Index": "4"},
        ],
    ]
    state = NavigationState.resume(10, responses)
    assert state.trial_number == 2
    assert state.position == 4


def test_resume_without_responses() -> None:
    """Test resuming with nothing recorded starts from scratch."""
    state = NavigationState.resume(10, [])
    assert state.position == 0
    assert state.trial_number == 0


@pytest.mark.parametrize(
    "last_row",
    [
        {"Exp_Trial_Number": "3"},
        {"Exp_Trial_Number": "3", "Exp_Next_Proc_Index": "next"},
        {"Exp_Next_Proc_Index": "4"},
    ],
)
def test_resume_unusable_row(last_row: dict[str, str]) -> None:
    """Test stored rows without resume information are reported."""
    with pytest.raises(DataSourceError, match="resume information"):
        NavigationState.resume(10, [[last_row]])


def test_invalid_length() -> None:
    """Test negative lengths are rejected."""
    with pytest.raises(ValueError, match="length"):
        NavigationState(length=-1)
