"""Procedure compilation.

Turns raw procedure rows into the flat, ordered sequence of trial
descriptors that the experiment walks through.
"""

from __future__ import annotations

from collector.procedure.compiler import (
    compile_procedure,
    parse_post_header,
    split_row_into_trials,
    used_trial_types,
)
from collector.procedure.models import (
    POST_LEVEL,
    ROW_NUMBER,
    STIMULI,
    TRIAL_TYPE,
    Procedure,
    TrialDescriptor,
)

__all__ = [
    # Models
    "TrialDescriptor",
    "Procedure",
    "TRIAL_TYPE",
    "ROW_NUMBER",
    "POST_LEVEL",
    "STIMULI",
    # Compiler
    "compile_procedure",
    "parse_post_header",
    "split_row_into_trials",
    "used_trial_types",
]
