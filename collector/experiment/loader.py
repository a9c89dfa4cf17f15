"""Experiment loading.

Selects a condition, builds its stimuli table and compiled procedure, and
regroups the participant's previously stored responses so an interrupted
session can resume where it stopped.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from pydantic import Field, field_validator

from collector.config.paths import PathsConfig
from collector.data.base import CollectorBaseModel
from collector.data.tables import Row, TabularSource, freeze_rows
from collector.errors import DataSourceError
from collector.procedure.compiler import compile_procedure
from collector.procedure.models import Procedure
from collector.responses.builder import group_responses
from collector.responses.models import ResponseSet

logger = logging.getLogger(__name__)

PROCEDURE_COLUMN = "Procedure"
STIMULI_COLUMN = "Stimuli"


def _empty_columns() -> dict[str, str]:
    """Return empty column dict."""
    return {}


class Condition(CollectorBaseModel):
    """Which procedure and stimuli files a session uses.

    Attributes
    ----------
    procedure : str
        Procedure file name, relative to the procedures directory.
    stimuli : str
        Stimuli file name, relative to the stimuli directory.
    columns : Mapping[str, str]
        Any other columns of the conditions table, read-only.

    Examples
    --------
    >>> c = Condition.from_row({"Procedure": "p.csv", "Stimuli": "s.csv", "N": "1"})
    >>> c.procedure, dict(c.columns)
    ('p.csv', {'N': '1'})
    """

    procedure: str = Field(..., min_length=1, description="Procedure file")
    stimuli: str = Field(..., min_length=1, description="Stimuli file")
    columns: Mapping[str, str] = Field(default_factory=_empty_columns)

    @field_validator("columns")
    @classmethod
    def freeze_columns(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Copy the columns into a read-only mapping."""
        return MappingProxyType(dict(v))

    @classmethod
    def from_row(cls, row: Mapping[str, str]) -> Condition:
        """Build a condition from a row of the conditions table.

        Raises
        ------
        DataSourceError
            If the row lacks a ``Procedure`` or ``Stimuli`` value.
        """
        missing = [c for c in (PROCEDURE_COLUMN, STIMULI_COLUMN) if not row.get(c)]
        if missing:
            raise DataSourceError(f"Condition is missing required columns: {missing}")
        return cls(
            procedure=row[PROCEDURE_COLUMN],
            stimuli=row[STIMULI_COLUMN],
            columns={
                k: v
                for k, v in row.items()
                if k not in (PROCEDURE_COLUMN, STIMULI_COLUMN)
            },
        )


class ExperimentData(CollectorBaseModel):
    """All data of one participant session, frozen at load time.

    Attributes
    ----------
    condition : Condition
        Selected condition.
    shuffle_seed : str
        Seed shuffles are derived from.
    stimuli : tuple[Mapping[str, str], ...]
        Stimulus table.
    procedure : Procedure
        Compiled procedure.
    responses : tuple[ResponseSet, ...]
        Previously stored response sets, ordered by trial number.
    procedure_name : str
        Document name of the procedure file.
    """

    condition: Condition
    shuffle_seed: str
    stimuli: tuple[Mapping[str, str], ...]
    procedure: Procedure
    responses: tuple[ResponseSet, ...] = ()
    procedure_name: str = ""

    @field_validator("stimuli")
    @classmethod
    def freeze_stimuli(
        cls, v: tuple[Mapping[str, str], ...]
    ) -> tuple[Mapping[str, str], ...]:
        """Copy stimulus rows into read-only mappings."""
        return freeze_rows(v)


def generate_shuffle_seed() -> str:
    """Draw a fresh per-participant shuffle seed."""
    return secrets.token_hex(8)


def load_conditions(source: TabularSource, paths: PathsConfig) -> list[Condition]:
    """Read every condition of the conditions table.

    Raises
    ------
    DataSourceError
        If the table is missing or a row lacks a required column.
    """
    return [Condition.from_row(row) for row in source.fetch(paths.conditions)]


def select_condition(
    source: TabularSource, paths: PathsConfig, index: int
) -> Condition:
    """Return the condition at ``index`` of the conditions table.

    Raises
    ------
    DataSourceError
        If ``index`` is out of range.
    """
    conditions = load_conditions(source, paths)
    if not 0 <= index < len(conditions):
        raise DataSourceError(
            f"Condition index {index} out of range; "
            f"{paths.conditions} has {len(conditions)} conditions"
        )
    return conditions[index]


def load_experiment_data(
    source: TabularSource,
    condition: Condition,
    paths: PathsConfig,
    shuffle_seed: str,
    prior_responses: Sequence[Row] = (),
) -> ExperimentData:
    """Build the session data for ``condition``.

    Stimuli are shuffled with ``<seed>-stim`` and the raw procedure with
    ``<seed>-proc`` before compilation, so a participant always sees the same
    order on reload.

    Parameters
    ----------
    source : TabularSource
        Source of the procedure and stimuli documents.
    condition : Condition
        Selected condition.
    paths : PathsConfig
        Experiment file locations.
    shuffle_seed : str
        Participant's shuffle seed.
    prior_responses : Sequence[Row]
        Response rows stored in earlier visits.

    Returns
    -------
    ExperimentData
        Frozen session data.
    """
    stimuli_name = f"{paths.stimuli_dir}/{condition.stimuli}"
    procedure_name = f"{paths.procedures_dir}/{condition.procedure}"

    stimuli = source.fetch(stimuli_name, seed=f"{shuffle_seed}-stim")
    raw_procedure = source.fetch(procedure_name, seed=f"{shuffle_seed}-proc")
    procedure = compile_procedure(raw_procedure)

    responses = tuple(
        ResponseSet(rows=tuple(rows)) for rows in group_responses(prior_responses)
    )

    logger.info(
        "Loaded %s: %d trials, %d stimuli, %d prior response sets",
        procedure_name,
        len(procedure),
        len(stimuli),
        len(responses),
    )
    return ExperimentData(
        condition=condition,
        shuffle_seed=shuffle_seed,
        stimuli=stimuli,
        procedure=procedure,
        responses=responses,
        procedure_name=procedure_name,
    )
