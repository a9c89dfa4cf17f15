"""Tests for procedure integrity validation."""

from __future__ import annotations

import logging

import pytest

from collector.errors import ReferentialIntegrityError
from collector.procedure.models import TrialDescriptor
from collector.validation.validator import (
    MISSING_TRIAL_TYPE_COLUMN,
    check_procedure,
    validate_procedure,
)

TRIAL_TYPES = {"instruct", "study", "test"}
STIMULI = [{"Cue": "sun"}, {"Cue": "salt"}]


def _trial(
    trial_type: str | None,
    row_number: int = 0,
    post_level: int = 0,
    **columns: str,
) -> TrialDescriptor:
    return TrialDescriptor(
        trial_type=trial_type,
        row_number=row_number,
        post_level=post_level,
        columns=columns,
    )


class TestValidateProcedure:
    """Tests for validate_procedure."""

    def test_valid_procedure(self) -> None:
        """Test a valid procedure has no findings."""
        procedure = [
            _trial("instruct"),
            _trial("study", 1, Stimuli="2::3"),
            _trial("test", 1, 1, Stimuli="2::3"),
        ]
        assert validate_procedure(procedure, TRIAL_TYPES, STIMULI) == []

    def test_empty_procedure(self) -> None:
        """Test an empty procedure is valid."""
        assert validate_procedure([], TRIAL_TYPES, STIMULI) == []

    def test_unknown_trial_type(self) -> None:
        """Test an unknown type is reported with its spreadsheet row."""
        procedure = [_trial("instruct"), _trial("instruct", 1), _trial("survey", 2)]

        findings = validate_procedure(procedure, TRIAL_TYPES, STIMULI)

        assert findings == [
            'In row 4, under column "Trial Type", the type "survey" does not exist.'
        ]

    def test_unknown_post_trial_type(self) -> None:
        """Test post-level findings name the prefixed column."""
        procedure = [_trial("instruct"), _trial("survey", 0, 2)]

        findings = validate_procedure(procedure, TRIAL_TYPES, STIMULI)

        assert findings == [
            'In row 2, under column "Post 2 Trial Type", '
            'the type "survey" does not exist.'
        ]

    def test_missing_trial_type_column(self) -> None:
        """Test a procedure without trial types yields one finding only."""
        procedure = [_trial(None, Stimuli="40"), _trial(None, 1)]

        findings = validate_procedure(procedure, TRIAL_TYPES, STIMULI)

        assert findings == [MISSING_TRIAL_TYPE_COLUMN]

    def test_missing_stimulus_row(self) -> None:
        """Test every out-of-range stimulus index is reported."""
        procedure = [_trial("study", 0, Stimuli="3::5")]

        findings = validate_procedure(procedure, TRIAL_TYPES, STIMULI)

        assert findings == [
            'In row 2, in the "Stimuli" column, the stimuli row 4 does not exist.',
            'In row 2, in the "Stimuli" column, the stimuli row 5 does not exist.',
        ]

    def test_empty_stimuli_cell(self) -> None:
        """Test an empty stimuli cell is not an error."""
        procedure = [_trial("instruct", Stimuli="")]
        assert validate_procedure(procedure, TRIAL_TYPES, []) == []

    def test_both_kinds_of_finding(self) -> None:
        """Test type and stimulus findings are collected together."""
        procedure = [_trial("survey", 0, 1, Stimuli="9")]

        findings = validate_procedure(procedure, TRIAL_TYPES, STIMULI)

        assert len(findings) == 2
        assert '"Post 1 Trial Type"' in findings[0]
        assert '"Post 1 Stimuli"' in findings[1]


class TestCheckProcedure:
    """Tests for check_procedure."""

    def test_logs_findings(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test findings are logged with the document name."""
        procedure = [_trial("survey")]

        with caplog.at_level(logging.ERROR, logger="collector.validation"):
            findings = check_procedure(
                procedure, TRIAL_TYPES, STIMULI, source="procedures/main.csv"
            )

        assert len(findings) == 1
        assert 'Errors found in the procedure file "procedures/main.csv"' in caplog.text
        assert "survey" in caplog.text

    def test_valid_procedure_logs_nothing(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a valid procedure is not reported."""
        with caplog.at_level(logging.ERROR, logger="collector.validation"):
            assert check_procedure([_trial("instruct")], TRIAL_TYPES, STIMULI) == []
        assert caplog.text == ""

    def test_strict_raises(self) -> None:
        """Test strict mode raises with every finding attached."""
        procedure = [_trial("survey", Stimuli="9")]

        with pytest.raises(ReferentialIntegrityError) as exc_info:
            check_procedure(procedure, TRIAL_TYPES, STIMULI, strict=True)

        assert len(exc_info.value.findings) == 2
