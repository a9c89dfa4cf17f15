"""Experiment sessions: loading, trial types and the run loop."""

from __future__ import annotations

from collector.experiment.catalog import TrialType, load_trial_types
from collector.experiment.engine import Experiment, create_experiment
from collector.experiment.loader import (
    Condition,
    ExperimentData,
    generate_shuffle_seed,
    load_conditions,
    load_experiment_data,
    select_condition,
)
from collector.experiment.renderer import TrialRenderer, TrialValues

__all__ = [
    # Session
    "Experiment",
    "create_experiment",
    # Loading
    "Condition",
    "ExperimentData",
    "generate_shuffle_seed",
    "load_conditions",
    "load_experiment_data",
    "select_condition",
    # Trial types
    "TrialType",
    "load_trial_types",
    # Rendering
    "TrialRenderer",
    "TrialValues",
]
