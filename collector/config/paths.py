"""Paths configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class PathsConfig(BaseModel):
    """Locations of experiment files, relative to ``root``.

    Parameters
    ----------
    root : Path
        Experiment root directory.
    conditions : str
        Conditions table.
    procedures_dir : str
        Directory holding procedure files.
    stimuli_dir : str
        Directory holding stimuli files.
    trial_types_dir : str
        Directory holding one subdirectory per trial type.

    Examples
    --------
    >>> config = PathsConfig(root=Path("study"))
    >>> config.trial_types_path
    PosixPath('study/trial-types')
    """

    root: Path = Field(default=Path("."), description="Experiment root")
    conditions: str = Field(
        default="experiment/conditions.csv", description="Conditions table"
    )
    procedures_dir: str = Field(
        default="experiment/procedures", description="Procedure files"
    )
    stimuli_dir: str = Field(default="experiment/stimuli", description="Stimuli files")
    trial_types_dir: str = Field(default="trial-types", description="Trial types")

    @property
    def trial_types_path(self) -> Path:
        """Absolute-or-relative path of the trial types directory."""
        return self.root / self.trial_types_dir
