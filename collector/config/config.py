"""Top-level configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from collector.config.experiment import ExperimentSettings
from collector.config.logging import LoggingConfig
from collector.config.paths import PathsConfig
from collector.config.submission import SubmissionConfig


class CollectorConfig(BaseModel):
    """Complete configuration of an experiment deployment.

    Parameters
    ----------
    paths : PathsConfig
        Locations of experiment files.
    submission : SubmissionConfig
        Response delivery settings.
    experiment : ExperimentSettings
        Runtime settings.
    logging : LoggingConfig
        Operator logging.

    Examples
    --------
    >>> config = CollectorConfig()
    >>> config.submission.backoff_base
    2.0
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    submission: SubmissionConfig = Field(default_factory=SubmissionConfig)
    experiment: ExperimentSettings = Field(default_factory=ExperimentSettings)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
