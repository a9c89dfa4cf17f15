"""Experiment runtime settings."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ExperimentSettings(BaseModel):
    """Runtime behaviour of an experiment session.

    Parameters
    ----------
    name : str
        Experiment name recorded with every response.
    allow_keyboard_shortcuts_to_change_trial : bool
        Whether operator shortcuts may skip forward or back.
    end_trial_type : str
        Trial type shown once the procedure is finished.
    shuffle_seed : str | None
        Fixed shuffle seed; a random one is drawn per participant if None.

    Examples
    --------
    >>> ExperimentSettings().end_trial_type
    'end-of-experiment'
    """

    name: str = Field(default="experiment", description="Experiment name")
    allow_keyboard_shortcuts_to_change_trial: bool = Field(
        default=False, description="Allow operator navigation shortcuts"
    )
    end_trial_type: str = Field(
        default="end-of-experiment", description="Trial type shown at the end"
    )
    shuffle_seed: str | None = Field(default=None, description="Fixed shuffle seed")
