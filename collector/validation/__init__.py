"""Referential integrity checks for compiled procedures."""

from __future__ import annotations

from collector.validation.validator import (
    MISSING_TRIAL_TYPE_COLUMN,
    check_procedure,
    validate_procedure,
)

__all__ = [
    "MISSING_TRIAL_TYPE_COLUMN",
    "check_procedure",
    "validate_procedure",
]
