"""Configuration system for the experiment engine.

Provides configuration models, YAML loading with environment overrides, and
logging setup.
"""

from __future__ import annotations

from collector.config.config import CollectorConfig
from collector.config.experiment import ExperimentSettings
from collector.config.loader import (
    load_config,
    load_from_env,
    load_yaml_file,
    merge_configs,
)
from collector.config.logging import LoggingConfig, configure_logging
from collector.config.paths import PathsConfig
from collector.config.submission import SubmissionConfig

__all__ = [
    # Main config
    "CollectorConfig",
    # Config sections
    "PathsConfig",
    "SubmissionConfig",
    "ExperimentSettings",
    "LoggingConfig",
    # Loading
    "load_config",
    "load_yaml_file",
    "merge_configs",
    "load_from_env",
    # Logging
    "configure_logging",
]
