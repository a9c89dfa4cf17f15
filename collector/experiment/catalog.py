"""Trial-type catalog.

Each trial type lives in its own directory holding a ``display.html`` and,
optionally, a ``script.js`` and a ``style.css``. Directories without a
display file are not trial types.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import Field, field_validator

from collector.data.base import CollectorBaseModel

logger = logging.getLogger(__name__)

DISPLAY_FILE = "display.html"
SCRIPT_FILE = "script.js"
STYLE_FILE = "style.css"


class TrialType(CollectorBaseModel):
    """A registered trial type.

    Attributes
    ----------
    name : str
        Trial type name, as used in the ``Trial Type`` column.
    display : str
        HTML shown for the trial.
    script : str | None
        JavaScript run by the trial.
    style : str | None
        CSS applied to the trial.

    Examples
    --------
    >>> TrialType(name="instruct", display="<p>@{Text}</p>").script is None
    True
    """

    name: str = Field(..., description="Trial type name")
    display: str = Field(..., description="Display HTML")
    script: str | None = Field(default=None, description="Trial script")
    style: str | None = Field(default=None, description="Trial stylesheet")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is non-empty."""
        if not v or not v.strip():
            raise ValueError("name must be non-empty")
        return v


def load_trial_types(directory: Path) -> Mapping[str, TrialType]:
    """Load every trial type below ``directory``.

    Parameters
    ----------
    directory : Path
        Directory with one subdirectory per trial type.

    Returns
    -------
    Mapping[str, TrialType]
        Read-only catalog keyed by trial type name, sorted by name.

    Raises
    ------
    FileNotFoundError
        If ``directory`` does not exist.
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Trial types directory not found: {directory}")

    catalog: dict[str, TrialType] = {}
    for entry in sorted(directory.iterdir()):
        if not entry.is_dir():
            continue
        display = entry / DISPLAY_FILE
        if not display.is_file():
            logger.debug("Skipping %s: no %s", entry, DISPLAY_FILE)
            continue

        script = entry / SCRIPT_FILE
        style = entry / STYLE_FILE
        catalog[entry.name] = TrialType(
            name=entry.name,
            display=display.read_text(encoding="utf-8"),
            script=script.read_text(encoding="utf-8") if script.is_file() else None,
            style=style.read_text(encoding="utf-8") if style.is_file() else None,
        )

    logger.info("Loaded %d trial types from %s", len(catalog), directory)
    return MappingProxyType(catalog)
