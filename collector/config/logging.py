"""Logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseModel):
    """Configuration for operator logging.

    Parameters
    ----------
    level : LogLevel
        Minimum level of emitted records.
    format : str
        Record format string.
    file : Path | None
        Also write records to this file if set.

    Examples
    --------
    >>> LoggingConfig().level
    'INFO'
    """

    level: LogLevel = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format",
    )
    file: Path | None = Field(default=None, description="Log file")


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger from ``config``.

    Parameters
    ----------
    config : LoggingConfig
        Logging configuration.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, config.level),
        format=config.format,
        handlers=handlers,
        force=True,
    )
