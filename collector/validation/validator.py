"""Integrity validator.

Cross-checks a compiled procedure against the trial-type catalog and the
stimulus table. Findings are returned as human-readable strings naming the
spreadsheet row (raw row index + 2, counting the header) and column.
"""

from __future__ import annotations

import logging
from collections.abc import Container, Sequence

from collector.data.ranges import HEADER_OFFSET, iter_stimulus_indices
from collector.errors import ReferentialIntegrityError
from collector.procedure.models import STIMULI, TrialDescriptor

logger = logging.getLogger(__name__)

MISSING_TRIAL_TYPE_COLUMN = 'Missing the required "Trial Type" column'


def validate_procedure(
    procedure: Sequence[TrialDescriptor],
    trial_types: Container[str],
    stimuli: Sequence[object],
) -> list[str]:
    """Collect referential errors in a compiled procedure.

    Parameters
    ----------
    procedure : Sequence[TrialDescriptor]
        Compiled procedure.
    trial_types : Container[str]
        Names of the registered trial types.
    stimuli : Sequence[object]
        Stimulus table; only its length is used.

    Returns
    -------
    list[str]
        Findings; empty if the procedure is valid. A procedure without a
        ``Trial Type`` column produces a single finding and nothing else is
        checked.

    Examples
    --------
    >>> trial = TrialDescriptor(trial_type="survey", row_number=0)
    >>> validate_procedure([trial], {"instruct"}, [])
    ['In row 2, under column "Trial Type", the type "survey" does not exist.']
    """
    if not procedure:
        return []

    if procedure[0].trial_type is None:
        return [MISSING_TRIAL_TYPE_COLUMN]

    findings: list[str] = []
    for trial in procedure:
        row = trial.row_number + HEADER_OFFSET
        prefix = trial.column_prefix

        if trial.trial_type not in trial_types:
            findings.append(
                f'In row {row}, under column "{prefix}Trial Type", '
                f'the type "{trial.trial_type}" does not exist.'
            )

        if STIMULI in trial.columns:
            for index in iter_stimulus_indices(trial.stimuli):
                if index >= len(stimuli):
                    findings.append(
                        f'In row {row}, in the "{prefix}Stimuli" column, '
                        f"the stimuli row {index + HEADER_OFFSET} does not exist."
                    )
    return findings


def check_procedure(
    procedure: Sequence[TrialDescriptor],
    trial_types: Container[str],
    stimuli: Sequence[object],
    source: str | None = None,
    strict: bool = False,
) -> list[str]:
    """Validate a procedure and report findings to the operator log.

    Parameters
    ----------
    procedure : Sequence[TrialDescriptor]
        Compiled procedure.
    trial_types : Container[str]
        Names of the registered trial types.
    stimuli : Sequence[object]
        Stimulus table.
    source : str | None
        Name of the procedure document, used in the report.
    strict : bool
        Raise instead of only logging when findings exist.

    Returns
    -------
    list[str]
        Findings.

    Raises
    ------
    ReferentialIntegrityError
        If ``strict`` is set and there are findings.
    """
    findings = validate_procedure(procedure, trial_types, stimuli)
    if not findings:
        return findings

    error = ReferentialIntegrityError(findings, source=source)
    if strict:
        raise error
    logger.error("%s", error)
    return findings
