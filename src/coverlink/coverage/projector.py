"""Projection of source coverage onto host measures.

Status to hit mapping:

    FULLY_COVERED, PARTLY_COVERED  → 1
    NOT_COVERED                    → 0
    EMPTY                          → no entry
    UNKNOWN                        → warning, no entry

Lines with a recorded hit also get a conditions entry when the line has
branches.
"""

from __future__ import annotations

import structlog

from coverlink.coverage.models import CounterStatus, SourceCoverage
from coverlink.host.protocols import InputFile, MeasureBuilder, ResourceLocator, ResourceType

log = structlog.get_logger()


def fully_qualified_class_name(package_name: str, simple_class_name: str) -> str:
    """``("com/foo", "Bar.kt") → "com/foo/Bar"``; empty package gives ``""``."""
    if package_name == "":
        return ""
    stem, dot, _ = simple_class_name.rpartition(".")
    return f"{package_name}/{stem if dot else simple_class_name}"


def resolve_resource(locator: ResourceLocator, coverage: SourceCoverage) -> InputFile | None:
    """Host file receiving the coverage, or None for unknown or test sources."""
    class_name = fully_qualified_class_name(coverage.package_name, coverage.name)
    input_file = locator.find_resource_by_class_name(class_name)
    if input_file is None or input_file.type is ResourceType.TEST:
        return None
    return input_file


def line_hits(status: CounterStatus) -> int | None:
    """Hit indicator for a line status; None when nothing is recorded."""
    match status:
        case CounterStatus.FULLY_COVERED | CounterStatus.PARTLY_COVERED:
            return 1
        case CounterStatus.NOT_COVERED:
            return 0
        case CounterStatus.EMPTY:
            return None
        case CounterStatus.UNKNOWN:
            return None


def project_coverage(
    builder: MeasureBuilder, resource: InputFile, coverage: SourceCoverage
) -> None:
    """Stage line hits and conditions of ``coverage`` on ``builder``.

    Stops at the resource's last line when the compiled class references
    lines beyond it. Saving the builder is left to the caller.
    """
    log.info("projector.analyzing_file", file=f"{resource.relative_path}//{coverage.name}")

    if not coverage.lines:
        return
    line_count = resource.lines()
    line_id = coverage.first_line
    while line_id <= coverage.last_line and line_count >= line_id:
        line = coverage.line(line_id)
        status = line.status
        if status is CounterStatus.UNKNOWN:
            log.warning(
                "projector.unknown_status", line=line_id, resource=resource.relative_path
            )
        hits = line_hits(status)
        if hits is not None:
            builder.line_hits(line_id, hits)
            if line.branches.total > 0:
                builder.conditions(line_id, line.branches.total, line.branches.covered)
        line_id += 1


def covered_lines(coverage: SourceCoverage) -> list[int]:
    """Lines with at least one executed instruction."""
    return [
        line_id
        for line_id in range(coverage.first_line, coverage.last_line + 1)
        if line_hits(coverage.line(line_id).status) == 1
    ]
