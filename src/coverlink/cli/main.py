"""CoverLink CLI - coverlink command."""

import click

from coverlink.cli.analyse import analyse_command
from coverlink.cli.dump import dump_command


@click.group()
@click.version_option(version="0.1.0", prog_name="coverlink")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """CoverLink - JaCoCo execution data to line and branch coverage."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


cli.add_command(analyse_command, name="analyse")
cli.add_command(dump_command, name="dump")


if __name__ == "__main__":
    cli()
