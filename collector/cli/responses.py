"""Response commands."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from collector.cli.utils import console, print_error, print_info
from collector.data.tables import CsvDirectorySource
from collector.errors import DataSourceError
from collector.navigation.state import NEXT_POSITION_FIELD, TRIAL_NUMBER_FIELD
from collector.responses.builder import group_responses


@click.command()
@click.argument(
    "responses_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_context
def status(ctx: click.Context, responses_file: Path) -> None:
    r"""Show where a participant would resume from stored responses.

    Parameters
    ----------
    ctx : click.Context
        Click context object.
    responses_file : Path
        CSV file of stored response rows.

    Examples
    --------
    $ collector status data/p01/a1-responses.csv
    """
    source = CsvDirectorySource(responses_file.parent)
    try:
        rows = source.read(responses_file.name)
    except DataSourceError as e:
        print_error(str(e))
        ctx.exit(1)

    sets = group_responses(rows)
    if not sets:
        print_info("No recorded trials; the participant starts at position 0")
        return

    try:
        last = sets[-1][0]
        trial_number = int(last[TRIAL_NUMBER_FIELD]) + 1
        position = int(last[NEXT_POSITION_FIELD])
    except (KeyError, ValueError) as e:
        print_error(f"Stored responses lack resume information: {e}")
        ctx.exit(1)

    table = Table(title=str(responses_file))
    table.add_column("Recorded trials", justify="right")
    table.add_column("Next trial number", justify="right")
    table.add_column("Resume position", justify="right")
    table.add_row(str(len(sets)), str(trial_number), str(position))
    console.print(table)
