"""Response set builder.

Adds bookkeeping fields to the raw responses of a just-completed trial and
encodes every value as text, so the server always receives the same
encoding regardless of what the trial produced.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from collector.responses.models import (
    DATE_FIELD,
    EXPERIMENT_FIELD,
    ID_FIELD,
    NEXT_POSITION_FIELD,
    POSITION_FIELD,
    TIMESTAMP_FIELD,
    TRIAL_NUMBER_FIELD,
    USERNAME_FIELD,
    ParticipantContext,
    ResponseSet,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def stringify(value: Any) -> str:
    """Encode a response value as text.

    Parameters
    ----------
    value : Any
        Value produced by a trial.

    Returns
    -------
    str
        Text encoding of the value.

    Examples
    --------
    >>> stringify(None)
    ''
    >>> stringify(True)
    'true'
    >>> stringify(3.0)
    '3'
    >>> stringify([1, "a"])
    '[1, "a"]'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value)
    return str(value)


def finalize_response_set(
    raw_responses: Sequence[Mapping[str, Any]],
    current_position: int,
    next_position: int,
    participant: ParticipantContext,
    trial_number: int,
    clock: Callable[[], datetime] = _now,
) -> ResponseSet:
    """Finalize the raw responses of one trial.

    Parameters
    ----------
    raw_responses : Sequence[Mapping[str, Any]]
        Rows produced by the trial. An empty sequence yields a single row
        holding only the bookkeeping fields.
    current_position : int
        Procedure position the trial ran at.
    next_position : int
        Procedure position navigation moves to.
    participant : ParticipantContext
        Participant the responses belong to.
    trial_number : int
        Number of trials completed before this one.
    clock : Callable[[], datetime]
        Source of the wall-clock time.

    Returns
    -------
    ResponseSet
        Frozen response set with every value stringified.

    Examples
    --------
    >>> ctx = ParticipantContext(username="p01", session_id="1", experiment="demo")
    >>> responses = finalize_response_set([{"Response": 4}], 0, 1, ctx, 0)
    >>> responses.first["Response"], responses.first["Exp_Next_Proc_Index"]
    ('4', '1')
    """
    moment = clock()
    added: dict[str, Any] = {
        USERNAME_FIELD: participant.username,
        ID_FIELD: participant.session_id,
        EXPERIMENT_FIELD: participant.experiment,
        DATE_FIELD: moment.date().isoformat(),
        TIMESTAMP_FIELD: moment.timestamp() * 1000,
        TRIAL_NUMBER_FIELD: trial_number,
        POSITION_FIELD: current_position,
        NEXT_POSITION_FIELD: next_position,
    }

    rows = raw_responses or [{}]
    finalized = []
    for row in rows:
        merged = {**row, **added}
        finalized.append({str(k): stringify(v) for k, v in merged.items()})
    return ResponseSet(rows=tuple(finalized))


def group_responses(
    rows: Sequence[Mapping[str, str]],
) -> list[list[Mapping[str, str]]]:
    """Group stored response rows into response sets by trial number.

    Rows without a usable trial number are skipped. Sets are returned in
    trial-number order.

    Parameters
    ----------
    rows : Sequence[Mapping[str, str]]
        Response rows as stored by the server.

    Returns
    -------
    list[list[Mapping[str, str]]]
        One list of rows per recorded trial.
    """
    sets: dict[int, list[Mapping[str, str]]] = {}
    for row in rows:
        try:
            trial_number = int(row[TRIAL_NUMBER_FIELD])
        except (KeyError, ValueError):
            continue
        sets.setdefault(trial_number, []).append(row)
    return [sets[n] for n in sorted(sets)]
