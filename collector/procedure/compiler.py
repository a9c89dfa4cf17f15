"""Procedure compiler.

A raw procedure row can describe several consecutive trials. Columns named
``Post <N> <field>`` belong to the trial at level ``N``; untagged columns
belong to level 0. Each level inherits the columns it does not set itself
from the previous level of the same row, never from another row.

Examples
--------
>>> rows = [{"Trial Type": "study", "Stimuli": "2", "Post 1 Trial Type": "test"}]
>>> [(t.trial_type, t.post_level, t.stimuli) for t in compile_procedure(rows)]
[('study', 0, '2'), ('test', 1, '2')]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence

from collector.procedure.models import (
    POST_LEVEL,
    ROW_NUMBER,
    TRIAL_TYPE,
    Procedure,
    TrialDescriptor,
)

logger = logging.getLogger(__name__)

_POST_HEADER = re.compile(r"Post (\d+) (.*)")


def parse_post_header(raw_header: str) -> tuple[int, str]:
    """Split a procedure column header into its level and field name.

    Parameters
    ----------
    raw_header : str
        Column header from the procedure file.

    Returns
    -------
    tuple[int, str]
        Level and field name. Untagged headers are level 0.

    Examples
    --------
    >>> parse_post_header("Post 2 Trial Type")
    (2, 'Trial Type')
    >>> parse_post_header("Stimuli")
    (0, 'Stimuli')
    """
    match = _POST_HEADER.fullmatch(raw_header.strip())
    if match is None:
        return 0, raw_header
    return int(match.group(1)), match.group(2).strip()


def split_row_into_trials(
    row: Mapping[str, str], row_index: int
) -> list[TrialDescriptor]:
    """Build the trial descriptors encoded by one raw procedure row.

    Parameters
    ----------
    row : Mapping[str, str]
        Raw procedure row.
    row_index : int
        0-based index of the row in the procedure file.

    Returns
    -------
    list[TrialDescriptor]
        Descriptors in ascending level order. Levels whose trial type is the
        empty string are left out.
    """
    levels: dict[int, dict[str, str]] = {}
    for raw_header, value in row.items():
        level, header = parse_post_header(raw_header)
        if header in (ROW_NUMBER, POST_LEVEL):
            logger.warning(
                "Ignoring reserved column %r in procedure row %d", raw_header, row_index
            )
            continue
        levels.setdefault(level, {})[header] = value

    trials: list[TrialDescriptor] = []
    previous: dict[str, str] | None = None
    for level in sorted(levels):
        fields = levels[level]
        if previous is not None:
            for header, value in previous.items():
                fields.setdefault(header, value)
        previous = fields

        trial_type = fields.get(TRIAL_TYPE)
        if trial_type == "":
            continue

        trials.append(
            TrialDescriptor(
                trial_type=trial_type,
                row_number=row_index,
                post_level=level,
                columns={h: v for h, v in fields.items() if h != TRIAL_TYPE},
            )
        )
    return trials


def compile_procedure(raw_rows: Sequence[Mapping[str, str]]) -> Procedure:
    """Compile raw procedure rows into an ordered trial sequence.

    Parameters
    ----------
    raw_rows : Sequence[Mapping[str, str]]
        Rows of the procedure file, in file (or shuffled) order.

    Returns
    -------
    Procedure
        Frozen sequence of trial descriptors, ordered by row then level.
    """
    procedure: list[TrialDescriptor] = []
    for row_index, row in enumerate(raw_rows):
        procedure.extend(split_row_into_trials(row, row_index))

    logger.debug(
        "Compiled %d procedure rows into %d trials", len(raw_rows), len(procedure)
    )
    return tuple(procedure)


def used_trial_types(procedure: Iterable[TrialDescriptor]) -> list[str]:
    """Return the distinct trial types of a procedure in order of first use."""
    seen: dict[str, None] = {}
    for trial in procedure:
        if trial.trial_type is not None:
            seen.setdefault(trial.trial_type, None)
    return list(seen)
