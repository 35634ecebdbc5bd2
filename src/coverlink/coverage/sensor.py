"""Coverage sensor: the analysis entry point.

One ``analyse`` call:

1. indexes compiled classes under every binary root;
2. decodes the execution data file (merged store + per-session stores);
3. replays each attributable test session (when enabled);
4. analyzes the merged store against all indexed classes and saves one
   coverage measure per resolved production source file;
5. logs a single summary.

The class index lives only for the duration of the call.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from coverlink.core.logging import clear_run_id, set_run_id
from coverlink.coverage.analyzer import CoverageAnalyzer
from coverlink.coverage.attribution import PerTestCoverage, read_coverage_per_test
from coverlink.coverage.execdata import read_execution_data
from coverlink.coverage.index import DEFAULT_EXTENSION, ArtifactIndex, build_artifact_index
from coverlink.coverage.models import ExecutionDataStore, SourceCoverage
from coverlink.coverage.projector import project_coverage, resolve_resource
from coverlink.host.protocols import (
    Classpath,
    InputFile,
    PerTestCoverageContext,
    ResourceLocator,
    SensorContext,
)

log = structlog.get_logger()

NO_CLASS_FILES_MESSAGE = (
    "No JaCoCo analysis of project coverage can be done since there is no class files."
)
NO_INFORMATION_ABOUT_COVERAGE_DATA_MESSAGE = "No information about coverage per test."
COVERAGE_PER_TEST_MESSAGE = "Information about coverage per test has been collected."
NO_DATA_COLLECTED_MESSAGE = (
    "Coverage information was not collected. "
    "Perhaps you forget to include debug information into compiled classes?"
)


class CoverageSensor:
    """Reads JaCoCo execution data and saves line/branch coverage on the host.

    The sensor holds no per-run state and can be reused across projects.
    """

    def __init__(
        self,
        locator: ResourceLocator,
        classpath: Classpath,
        analyzer: CoverageAnalyzer,
        report: Path | None,
        *,
        read_coverage_per_test: bool = True,
        extension: str = DEFAULT_EXTENSION,
    ) -> None:
        self._locator = locator
        self._classpath = classpath
        self._analyzer = analyzer
        self._report = report
        self._read_coverage_per_test = read_coverage_per_test
        self._extension = extension

    def analyse(self, context: SensorContext) -> None:
        set_run_id()
        try:
            index = build_artifact_index(self._classpath.binary_dirs, extension=self._extension)
            if not index:
                log.info("sensor.no_class_files", message=NO_CLASS_FILES_MESSAGE)
                return
            self._read_execution_data(index, context)
        finally:
            clear_run_id()

    def _read_execution_data(self, index: ArtifactIndex, context: SensorContext) -> None:
        report_path = self._report if self._report is not None and self._report.is_file() else None
        execution_data = read_execution_data(self._report)

        collected_coverage_per_test = False
        if self._read_coverage_per_test:
            per_test = read_coverage_per_test(
                execution_data.sessions, index, self._analyzer, self._locator
            )
            self._save_per_test(per_test, context)
            collected_coverage_per_test = per_test.collected

        analyzed_resources = self._save_coverage(execution_data.merged, index, context)

        if analyzed_resources == 0:
            log.warning("sensor.no_data_collected", message=NO_DATA_COLLECTED_MESSAGE)
        elif collected_coverage_per_test:
            log.info("sensor.coverage_per_test", message=COVERAGE_PER_TEST_MESSAGE)
        elif report_path is not None:
            log.info(
                "sensor.no_coverage_per_test", message=NO_INFORMATION_ABOUT_COVERAGE_DATA_MESSAGE
            )

    def _save_coverage(
        self, merged: ExecutionDataStore, index: ArtifactIndex, context: SensorContext
    ) -> int:
        resolved: dict[str, tuple[InputFile, SourceCoverage]] = {}
        for coverage in self._analyzer.analyze(merged, list(index.values())):
            input_file = resolve_resource(self._locator, coverage)
            if input_file is None:
                continue
            key = input_file.relative_path
            if key not in resolved:
                resolved[key] = (
                    input_file,
                    SourceCoverage(coverage.package_name, coverage.name, dict(coverage.lines)),
                )
                continue
            # Several report entries can map to one file; later lines overwrite.
            log.debug("sensor.duplicate_resource", resource=key, source=coverage.name)
            resolved[key][1].lines.update(coverage.lines)

        for input_file, coverage in resolved.values():
            builder = context.new_coverage(input_file)
            project_coverage(builder, input_file, coverage)
            builder.save()
        return len(resolved)

    def _save_per_test(self, per_test: PerTestCoverage, context: SensorContext) -> None:
        if not isinstance(context, PerTestCoverageContext):
            return
        for session in per_test.sessions:
            for input_file, lines in session.files:
                if lines:
                    context.save_test_coverage(session.test_name, input_file, lines)
