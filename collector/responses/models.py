"""Participant and response set models."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import Field, field_validator

from collector.data.base import CollectorBaseModel
from collector.navigation.commands import COMMAND_FIELD
from collector.navigation.state import NEXT_POSITION_FIELD, TRIAL_NUMBER_FIELD

USERNAME_FIELD = "Exp_Username"
ID_FIELD = "Exp_ID"
EXPERIMENT_FIELD = "Exp_Name"
DATE_FIELD = "Exp_Date"
TIMESTAMP_FIELD = "Exp_Timestamp"
POSITION_FIELD = "Exp_Proc_Index"

__all__ = [
    "ParticipantContext",
    "ResponseSet",
    "COMMAND_FIELD",
    "USERNAME_FIELD",
    "ID_FIELD",
    "EXPERIMENT_FIELD",
    "DATE_FIELD",
    "TIMESTAMP_FIELD",
    "TRIAL_NUMBER_FIELD",
    "POSITION_FIELD",
    "NEXT_POSITION_FIELD",
]


class ParticipantContext(CollectorBaseModel):
    """Identity of the participant session responses belong to.

    Attributes
    ----------
    username : str
        Participant username (must be non-empty).
    session_id : str
        Identifier of this session.
    experiment : str
        Name of the experiment.

    Examples
    --------
    >>> ctx = ParticipantContext(username="p01", session_id="a1", experiment="demo")
    >>> ctx.username
    'p01'
    """

    username: str = Field(..., description="Participant username")
    session_id: str = Field(..., description="Session identifier")
    experiment: str = Field(default="", description="Experiment name")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Validate username is non-empty."""
        if not v or not v.strip():
            raise ValueError("username must be non-empty")
        return v.strip()


class ResponseSet(CollectorBaseModel):
    """Finalized responses of one trial.

    Every row is a read-only mapping of column -> text. Response sets are
    compared by identity in the submission queue, so two equal sets from
    different trials are still delivered separately.

    Attributes
    ----------
    rows : tuple[Mapping[str, str], ...]
        One row per stimulus or question presented on the trial.
    """

    rows: tuple[Mapping[str, str], ...] = Field(..., min_length=1)

    @field_validator("rows")
    @classmethod
    def freeze_rows(
        cls, v: tuple[Mapping[str, str], ...]
    ) -> tuple[Mapping[str, str], ...]:
        """Copy every row into a read-only mapping."""
        return tuple(MappingProxyType(dict(row)) for row in v)

    @property
    def first(self) -> Mapping[str, str]:
        """First response row."""
        return self.rows[0]

    @property
    def command(self) -> str | None:
        """Navigation command of the first row, if any."""
        return self.first.get(COMMAND_FIELD)

    @property
    def trial_number(self) -> int:
        """0-based number of the trial these responses belong to."""
        return int(self.first[TRIAL_NUMBER_FIELD])

    @property
    def position(self) -> int:
        """Procedure position the trial was run at."""
        return int(self.first[POSITION_FIELD])

    @property
    def next_position(self) -> int:
        """Procedure position navigation moved to after the trial."""
        return int(self.first[NEXT_POSITION_FIELD])

    def column(self, name: str) -> list[str]:
        """Return the values of one column across all rows."""
        return [row.get(name, "") for row in self.rows]
