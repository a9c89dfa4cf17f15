"""Response sets: finalization of raw trial responses."""

from __future__ import annotations

from collector.responses.builder import (
    finalize_response_set,
    group_responses,
    stringify,
)
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

__all__ = [
    "ParticipantContext",
    "ResponseSet",
    "finalize_response_set",
    "group_responses",
    "stringify",
    "USERNAME_FIELD",
    "ID_FIELD",
    "EXPERIMENT_FIELD",
    "DATE_FIELD",
    "TIMESTAMP_FIELD",
    "TRIAL_NUMBER_FIELD",
    "POSITION_FIELD",
    "NEXT_POSITION_FIELD",
]
