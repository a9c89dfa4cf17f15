"""Root command group for the collector CLI."""

from __future__ import annotations

from pathlib import Path

import click
from pydantic import ValidationError

from collector import __version__
from collector.cli.procedure import compile_procedure_cmd, validate
from collector.cli.responses import status
from collector.cli.utils import print_error
from collector.config import configure_logging, load_config


@click.group()
@click.version_option(__version__, prog_name="collector")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML configuration file",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Path | None, log_level: str | None) -> None:
    r"""Operator tools for collector experiments.

    \b
    Examples:
        $ collector validate my-study/
        $ collector compile my-study/ --condition 1 --format json
        $ collector status data/p01/responses.csv
    """
    try:
        config = load_config(config_file)
    except (ValidationError, ValueError, FileNotFoundError) as e:
        print_error(f"Invalid configuration: {e}")
        ctx.exit(1)

    if log_level is not None:
        config = config.model_copy(
            update={"logging": config.logging.model_copy(update={"level": log_level})}
        )
    configure_logging(config.logging)
    ctx.obj = config


cli.add_command(validate)
cli.add_command(compile_procedure_cmd)
cli.add_command(status)
