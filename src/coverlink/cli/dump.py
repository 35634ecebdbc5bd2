"""coverlink dump command - list the contents of an execution data file."""

from datetime import UTC, datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from coverlink.core.errors import ExecutionDataError
from coverlink.coverage.execdata import parse_execution_data

console = Console()


def _timestamp(millis: int) -> str:
    return datetime.fromtimestamp(millis / 1000, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


@click.command()
@click.argument("exec_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def dump_command(exec_file: Path) -> None:
    """Show sessions and per-class probe counts of EXEC_FILE."""
    try:
        report = parse_execution_data(exec_file.read_bytes())
    except ExecutionDataError as e:
        raise click.ClickException(e.message) from e

    sessions = Table(title="Sessions", show_header=True, box=None, padding=(0, 1))
    sessions.add_column("id")
    sessions.add_column("start")
    sessions.add_column("dump")
    sessions.add_column("classes", justify="right")
    for info in report.session_infos:
        store = report.sessions.get(info.id)
        sessions.add_row(
            info.id, _timestamp(info.start), _timestamp(info.dump), str(len(store or ()))
        )
    console.print(sessions)

    classes = Table(title="Classes", show_header=True, box=None, padding=(0, 1))
    classes.add_column("class")
    classes.add_column("id")
    classes.add_column("probes", justify="right")
    for record in sorted(report.merged, key=lambda r: r.name):
        hit = sum(record.probes)
        classes.add_row(
            record.name,
            f"{record.class_id & 0xFFFFFFFFFFFFFFFF:016x}",
            f"{hit}/{len(record.probes)}",
        )
    console.print(classes)
