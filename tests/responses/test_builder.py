"""Tests for the response set builder."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from collector.responses.builder import (
    finalize_response_set,
    group_responses,
    stringify,
)
from collector.responses.models import ParticipantContext, ResponseSet

FIXED = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _clock() -> datetime:
    return FIXED


class TestFinalizeResponseSet:
    """Tests for finalize_response_set()."""

    def test_added_fields(self, participant: ParticipantContext) -> None:
        """Test every row gets the bookkeeping fields."""
        response_set = finalize_response_set(
            [{"Response": "a"}, {"Response": "b"}],
            current_position=3,
            next_position=4,
            participant=participant,
            trial_number=2,
            clock=_clock,
        )

        assert len(response_set.rows) == 2
        for row in response_set.rows:
            assert row["Exp_Username"] == "p01"
            assert row["Exp_ID"] == "a1"
            assert row["Exp_Name"] == "demo"
            assert row["Exp_Date"] == "2024-05-01"
            assert row["Exp_Timestamp"] == str(int(FIXED.timestamp() * 1000))
            assert row["Exp_Trial_Number"] == "2"
            assert row["Exp_Proc_Index"] == "3"
            assert row["Exp_Next_Proc_Index"] == "4"
        assert response_set.column("Response") == ["a", "b"]

    def test_values_stringified(self, participant: ParticipantContext) -> None:
        """Test all values become text."""
        response_set = finalize_response_set(
            [{"RT": 512.0, "Correct": True, "Choice": None, 3: [1, 2]}],
            0,
            1,
            participant,
            0,
            clock=_clock,
        )
        row = response_set.first
        assert row["RT"] == "512"
        assert row["Correct"] == "true"
        assert row["Choice"] == ""
        assert row["3"] == "[1, 2]"
        assert all(isinstance(v, str) for v in row.values())

    def test_added_fields_override_raw(self, participant: ParticipantContext) -> None:
        """Test a trial cannot spoof bookkeeping fields."""
        response_set = finalize_response_set(
            [{"Exp_Proc_Index": "99"}], 1, 2, participant, 0, clock=_clock
        )
        assert response_set.position == 1

    def test_empty_raw_set(self, participant: ParticipantContext) -> None:
        """Test an empty submission still records one row."""
        response_set = finalize_response_set([], 0, 1, participant, 0, clock=_clock)
        assert len(response_set.rows) == 1
        assert response_set.next_position == 1

    def test_frozen(self, participant: ParticipantContext) -> None:
        """Test finalized response sets cannot be modified."""
        response_set = finalize_response_set(
            [{"Response": "a"}], 0, 1, participant, 0, clock=_clock
        )
        with pytest.raises(TypeError):
            response_set.first["Response"] = "b"  # type: ignore[index]
        with pytest.raises(ValidationError):
            response_set.rows = ()  # type: ignore[misc]

    def test_raw_rows_not_shared(self, participant: ParticipantContext) -> None:
        """Test later edits to the raw rows do not reach the response set."""
        raw = [{"Response": "a"}]
        response_set = finalize_response_set(raw, 0, 1, participant, 0, clock=_clock)
        raw[0]["Response"] = "changed"
        assert response_set.first["Response"] == "a"

    def test_command_property(self, participant: ParticipantContext) -> None:
        """Test the navigation command is read from the first row."""
        response_set = finalize_response_set(
            [{"Exp_Command": "mod proc index: r-1"}, {}],
            0,
            0,
            participant,
            0,
            clock=_clock,
        )
        assert response_set.command == "mod proc index: r-1"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("text", "text"),
        (7, "7"),
        (1.5, "1.5"),
        (False, "false"),
        ({"a": 1}, '{"a": 1}'),
    ],
)
def test_stringify(value: object, expected: str) -> None:
    """Test uniform text encoding."""
    assert stringify(value) == expected


def test_group_responses() -> None:
    """Test stored rows are grouped and ordered by trial number."""
    rows = [
        {"Exp_Trial_Number": "1", "Response": "c"},
        {"Exp_Trial_Number": "0", "Response": "a"},
        {"Exp_Trial_Number": "0", "Response": "b"},
        {"Response": "orphan"},
    ]
    groups = group_responses(rows)
    assert [[r["Response"] for r in g] for g in groups] == [["a", "b"], ["c"]]


def test_response_set_requires_rows() -> None:
    """Test a response set needs at least one row."""
    with pytest.raises(ValidationError):
        ResponseSet(rows=())


def test_participant_requires_username() -> None:
    """Test participants need a non-empty username."""
    with pytest.raises(ValidationError, match="username"):
        ParticipantContext(username="  ", session_id="1")
