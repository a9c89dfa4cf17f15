"""Procedure commands: validation and compiled-procedure inspection."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.table import Table

from collector.cli.utils import console, print_error, print_info, print_success
from collector.config.config import CollectorConfig
from collector.data.tables import CsvDirectorySource
from collector.errors import DataSourceError
from collector.experiment.catalog import load_trial_types
from collector.experiment.loader import (
    load_conditions,
    load_experiment_data,
    select_condition,
)
from collector.validation.validator import validate_procedure


def _config_for_root(ctx: click.Context, root: Path) -> CollectorConfig:
    config: CollectorConfig = ctx.obj or CollectorConfig()
    return config.model_copy(
        update={"paths": config.paths.model_copy(update={"root": root})}
    )


@click.command()
@click.argument(
    "root", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.option(
    "--condition",
    "condition_index",
    type=int,
    help="Validate only this condition (0-based row of the conditions table)",
)
@click.option(
    "--seed",
    default="validate",
    show_default=True,
    help="Shuffle seed used while building tables",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Exit with status 1 if any problem is found",
)
@click.pass_context
def validate(
    ctx: click.Context,
    root: Path,
    condition_index: int | None,
    seed: str,
    strict: bool,
) -> None:
    r"""Check procedures against trial types and stimuli.

    Parameters
    ----------
    ctx : click.Context
        Click context object.
    root : Path
        Experiment root directory.
    condition_index : int | None
        Only validate this condition.
    seed : str
        Shuffle seed.
    strict : bool
        Fail on findings.

    Examples
    --------
    $ collector validate my-study/
    $ collector validate my-study/ --condition 0 --strict
    """
    config = _config_for_root(ctx, root)
    paths = config.paths
    source = CsvDirectorySource(paths.root)

    try:
        trial_types = load_trial_types(paths.trial_types_path)
        if condition_index is None:
            conditions = list(enumerate(load_conditions(source, paths)))
        else:
            conditions = [
                (condition_index, select_condition(source, paths, condition_index))
            ]
    except (DataSourceError, FileNotFoundError) as e:
        print_error(str(e))
        ctx.exit(1)

    total = 0
    for index, condition in conditions:
        try:
            data = load_experiment_data(source, condition, paths, seed)
        except DataSourceError as e:
            print_error(f"Condition {index}: {e}")
            total += 1
            continue

        findings = validate_procedure(data.procedure, trial_types, data.stimuli)
        total += len(findings)
        if not findings:
            print_success(
                f"Condition {index} ({condition.procedure}): "
                f"{len(data.procedure)} trials OK"
            )
            continue

        print_error(
            f'Errors found in the procedure file "{data.procedure_name}":'
        )
        for finding in findings:
            console.print(f"  {finding}")

    if total and strict:
        ctx.exit(1)


@click.command(name="compile")
@click.argument(
    "root", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.option(
    "--condition",
    "condition_index",
    type=int,
    default=0,
    show_default=True,
    help="Condition to compile (0-based row of the conditions table)",
)
@click.option("--seed", default="preview", show_default=True, help="Shuffle seed")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    show_default=True,
    help="Output format",
)
@click.pass_context
def compile_procedure_cmd(
    ctx: click.Context,
    root: Path,
    condition_index: int,
    seed: str,
    output_format: str,
) -> None:
    r"""Show the compiled trial sequence of a condition.

    Parameters
    ----------
    ctx : click.Context
        Click context object.
    root : Path
        Experiment root directory.
    condition_index : int
        Condition to compile.
    seed : str
        Shuffle seed.
    output_format : str
        ``table`` or ``json`` (one JSON object per trial).

    Examples
    --------
    $ collector compile my-study/ --condition 1
    $ collector compile my-study/ --format json > trials.jsonl
    """
    config = _config_for_root(ctx, root)
    source = CsvDirectorySource(config.paths.root)

    try:
        condition = select_condition(source, config.paths, condition_index)
        data = load_experiment_data(source, condition, config.paths, seed)
    except DataSourceError as e:
        print_error(str(e))
        ctx.exit(1)

    if output_format == "json":
        for trial in data.procedure:
            click.echo(json.dumps(dict(trial.as_row())))
        return

    columns: list[str] = []
    for trial in data.procedure:
        for column in trial.columns:
            if column not in columns:
                columns.append(column)

    table = Table(title=data.procedure_name)
    table.add_column("#", justify="right")
    table.add_column("Row", justify="right")
    table.add_column("Level", justify="right")
    table.add_column("Trial Type")
    for column in columns:
        table.add_column(column)

    for position, trial in enumerate(data.procedure):
        table.add_row(
            str(position),
            str(trial.row_number),
            str(trial.post_level),
            trial.trial_type or "",
            *(trial.columns.get(column, "") for column in columns),
        )

    console.print(table)
    print_info(f"{len(data.procedure)} trials")
