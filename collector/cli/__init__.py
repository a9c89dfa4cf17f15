"""Command-line interface.

Provides operator commands for checking and inspecting experiments.
"""

from __future__ import annotations

from collector.cli.main import cli

__all__ = ["cli"]
