"""CLI entry point for collector package.

Allows running via: python -m collector
"""

from __future__ import annotations

from collector.cli.main import cli

if __name__ == "__main__":
    cli()
