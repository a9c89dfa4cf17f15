"""Interface to the component that shows trials to the participant."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from pydantic import Field, field_validator

from collector.data.base import CollectorBaseModel
from collector.data.tables import Row, freeze_rows
from collector.procedure.models import TRIAL_TYPE


def _empty_rows() -> tuple[Row, ...]:
    """Return empty row tuple."""
    return ()


class TrialValues(CollectorBaseModel):
    """Everything a renderer needs to show one trial.

    Attributes
    ----------
    procedure : Mapping[str, str]
        The trial's procedure columns, including ``Trial Type``.
    stimuli : tuple[Mapping[str, str], ...]
        Stimulus rows referenced by the trial.
    position : int
        Procedure position of the trial.
    trial_number : int
        Number of trials completed before this one.
    is_end : bool
        Whether this is the end-of-experiment trial.
    """

    procedure: Mapping[str, str]
    stimuli: tuple[Mapping[str, str], ...] = Field(default_factory=_empty_rows)
    position: int = Field(..., ge=0)
    trial_number: int = Field(default=0, ge=0)
    is_end: bool = False

    @field_validator("stimuli")
    @classmethod
    def freeze_stimuli(
        cls, v: tuple[Mapping[str, str], ...]
    ) -> tuple[Mapping[str, str], ...]:
        """Copy stimulus rows into read-only mappings."""
        return freeze_rows(v)

    @property
    def trial_type(self) -> str | None:
        """Trial type to render."""
        return self.procedure.get(TRIAL_TYPE)


class TrialRenderer(Protocol):
    """Shows trials and collects the participant's raw responses."""

    async def prepare(self, trial_types: Sequence[str]) -> None:
        """Get ready to render the given trial types."""
        ...

    async def present(self, values: TrialValues) -> Sequence[Mapping[str, Any]]:
        """Show a trial and return its raw response rows once submitted.

        For the end-of-experiment trial the returned rows are ignored.
        """
        ...
