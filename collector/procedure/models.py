"""Trial descriptor model.

A trial descriptor is one compiled trial: the reserved fields every trial
has (trial type, originating row, post level) plus the open set of domain
columns copied from the procedure file.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pydantic import Field, field_validator

from collector.data.base import CollectorBaseModel

TRIAL_TYPE = "Trial Type"
ROW_NUMBER = "Row Number"
POST_LEVEL = "Post Level"
STIMULI = "Stimuli"

RESERVED_COLUMNS = frozenset({TRIAL_TYPE, ROW_NUMBER, POST_LEVEL})


def _empty_columns() -> dict[str, str]:
    """Return empty column dict."""
    return {}


class TrialDescriptor(CollectorBaseModel):
    """One compiled trial of a procedure.

    Attributes
    ----------
    trial_type : str | None
        Key into the trial-type catalog. None if the procedure has no
        ``Trial Type`` column at all.
    row_number : int
        0-based index of the raw procedure row this trial came from.
    post_level : int
        Level of this trial within its raw row (0 for the primary trial).
    columns : Mapping[str, str]
        Read-only domain columns (e.g. ``Stimuli``), after inheritance.

    Examples
    --------
    >>> trial = TrialDescriptor(
    ...     trial_type="instruct",
    ...     row_number=0,
    ...     post_level=1,
    ...     columns={"Stimuli": "2"},
    ... )
    >>> trial.as_row()["Post Level"]
    '1'
    >>> trial.get("Stimuli")
    '2'
    """

    trial_type: str | None = Field(default=None, description="Trial type name")
    row_number: int = Field(..., ge=0, description="Originating raw row index")
    post_level: int = Field(default=0, ge=0, description="Level within raw row")
    columns: Mapping[str, str] = Field(
        default_factory=_empty_columns, description="Domain columns"
    )

    @field_validator("columns")
    @classmethod
    def validate_columns(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        """Reject reserved field names and freeze the columns."""
        clashes = RESERVED_COLUMNS.intersection(v)
        if clashes:
            raise ValueError(
                f"columns must not contain reserved fields: {sorted(clashes)}"
            )
        return MappingProxyType(dict(v))

    @property
    def stimuli(self) -> str | None:
        """Stimulus range expression, if the trial has one."""
        return self.columns.get(STIMULI)

    @property
    def column_prefix(self) -> str:
        """Spreadsheet column prefix of this trial's level (``"Post N "``)."""
        return "" if self.post_level == 0 else f"Post {self.post_level} "

    def get(self, column: str, default: str | None = None) -> str | None:
        """Look up a column by its spreadsheet name.

        Parameters
        ----------
        column : str
            Column name, reserved or domain.
        default : str | None
            Value returned when the column is absent.

        Returns
        -------
        str | None
            String-encoded column value.
        """
        return self.as_row().get(column, default)

    def as_row(self) -> MappingProxyType[str, str]:
        """Return the descriptor as a read-only column -> text mapping."""
        row = dict(self.columns)
        if self.trial_type is not None:
            row[TRIAL_TYPE] = self.trial_type
        row[ROW_NUMBER] = str(self.row_number)
        row[POST_LEVEL] = str(self.post_level)
        return MappingProxyType(row)


Procedure = tuple[TrialDescriptor, ...]
