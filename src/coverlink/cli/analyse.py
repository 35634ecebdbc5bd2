"""coverlink analyse command - publish coverage for a project."""

from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from coverlink.config import CoverLinkConfig, load_config
from coverlink.core.errors import ConfigError
from coverlink.core.logging import configure_logging, get_log_file_path
from coverlink.coverage import CoverageSensor, JacocoCliAnalyzer
from coverlink.host import DirectoryClasspath, FilesystemResourceLocator, JsonMeasureSink

console = Console(stderr=True)


def _overrides(
    exec_file: Path | None,
    classes: tuple[Path, ...],
    sources: tuple[Path, ...],
    tests: tuple[Path, ...],
    no_per_test: bool,
    jacoco_cli: Path | None,
) -> dict[str, Any]:
    coverage: dict[str, Any] = {}
    if exec_file is not None:
        coverage["report_path"] = str(exec_file)
    if classes:
        coverage["binary_dirs"] = [str(p) for p in classes]
    if sources:
        coverage["source_dirs"] = [str(p) for p in sources]
    if tests:
        coverage["test_dirs"] = [str(p) for p in tests]
    if no_per_test:
        coverage["read_coverage_per_test"] = False

    overrides: dict[str, Any] = {}
    if coverage:
        overrides["coverage"] = coverage
    if jacoco_cli is not None:
        overrides["jacoco"] = {"cli_jar": str(jacoco_cli)}
    return overrides


def _resolve(root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else root / path


def make_table(sink: JsonMeasureSink) -> Table:
    """Per-file summary of saved measures."""
    table = Table(show_header=True, box=None, padding=(0, 1), pad_edge=False)
    table.add_column("file")
    table.add_column("lines", justify="right")
    table.add_column("covered", justify="right")
    table.add_column("conditions", justify="right")

    for path, measures in sorted(sink.files.items()):
        covered = sum(1 for hits in measures.line_hits.values() if hits > 0)
        total_conditions = sum(total for total, _ in measures.conditions.values())
        covered_conditions = sum(c for _, c in measures.conditions.values())
        table.add_row(
            path,
            str(len(measures.line_hits)),
            str(covered),
            f"{covered_conditions}/{total_conditions}" if total_conditions else "-",
        )
    return table


def run_analysis(root: Path, config: CoverLinkConfig) -> JsonMeasureSink:
    """Run one analysis pass with the filesystem host."""
    coverage = config.coverage
    locator = FilesystemResourceLocator(
        [_resolve(root, d) for d in coverage.source_dirs],
        [_resolve(root, d) for d in coverage.test_dirs],
        base_dir=root,
    )
    classpath = DirectoryClasspath([_resolve(root, d) for d in coverage.binary_dirs])
    report = _resolve(root, coverage.report_path) if coverage.report_path else None

    sensor = CoverageSensor(
        locator,
        classpath,
        JacocoCliAnalyzer(config.jacoco),
        report,
        read_coverage_per_test=coverage.read_coverage_per_test,
        extension=coverage.artifact_extension,
    )
    sink = JsonMeasureSink()
    sensor.analyse(sink)
    return sink


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--exec", "exec_file", type=click.Path(path_type=Path), help="JaCoCo .exec file")
@click.option(
    "--classes", multiple=True, type=click.Path(path_type=Path), help="Compiled class directory"
)
@click.option("--sources", multiple=True, type=click.Path(path_type=Path), help="Main source root")
@click.option("--tests", multiple=True, type=click.Path(path_type=Path), help="Test source root")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write measures as JSON to this file",
)
@click.option("--no-per-test", is_flag=True, help="Skip per-test coverage attribution")
@click.option("--jacoco-cli", type=click.Path(path_type=Path), help="Path to jacococli.jar")
@click.pass_context
def analyse_command(
    ctx: click.Context,
    path: Path,
    exec_file: Path | None,
    classes: tuple[Path, ...],
    sources: tuple[Path, ...],
    tests: tuple[Path, ...],
    output: Path | None,
    no_per_test: bool,
    jacoco_cli: Path | None,
) -> None:
    """Publish line and branch coverage from JaCoCo execution data.

    PATH is the project root (default: current directory).
    """
    root = path.resolve()
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))

    try:
        config = load_config(
            root, **_overrides(exec_file, classes, sources, tests, no_per_test, jacoco_cli)
        )
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)

    sink = run_analysis(root, config)

    if output is not None:
        sink.write(output)
    if sink.files:
        console.print(make_table(sink))
    console.print(f"{len(sink.files)} file(s) with coverage, {len(sink.tests)} test(s) attributed")
    if not sink.files and (log_file := get_log_file_path()) is not None:
        console.print(f"[dim]See log for details: {log_file}[/dim]")
