"""Bytecode/source correlation.

An analyzer takes a store of execution data plus candidate class files and
returns per-source-file line counters. Classes without execution data still
show up, reported as not covered.

``JacocoCliAnalyzer`` delegates probe analysis to the JaCoCo command line
tool and reads back its XML report.
"""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from collections.abc import Collection
from pathlib import Path
from typing import Protocol

import structlog

from coverlink.config.models import JacocoConfig
from coverlink.core.errors import AnalysisError, CoverLinkError, ErrorCode
from coverlink.coverage.execdata import write_execution_data
from coverlink.coverage.models import ExecutionDataStore, SourceCoverage
from coverlink.coverage.xml_report import parse_jacoco_xml

log = structlog.get_logger()


class CoverageAnalyzer(Protocol):
    """Correlates execution data with compiled classes."""

    def analyze(
        self, store: ExecutionDataStore, class_files: Collection[Path]
    ) -> list[SourceCoverage]:
        """Return one SourceCoverage per source file of the given classes."""
        ...


class JacocoCliAnalyzer:
    """Analyzer backed by ``java -jar jacococli.jar report``.

    Each call stages the store and the class files in a scratch directory,
    runs the tool, and parses the generated XML. When a run over several
    class files fails, each file is retried alone so one unreadable class
    only drops its own coverage. Failures are logged, never raised.
    """

    def __init__(self, config: JacocoConfig) -> None:
        self._config = config

    def _command(self, exec_file: Path, classes_dir: Path, xml_file: Path) -> list[str]:
        if not self._config.cli_jar:
            raise AnalysisError.tool_missing("jacococli.jar (set jacoco.cli_jar)")
        return [
            self._config.java_executable,
            "-jar",
            self._config.cli_jar,
            "report",
            str(exec_file),
            "--classfiles",
            str(classes_dir),
            "--xml",
            str(xml_file),
            "--quiet",
        ]

    def _stage_classes(self, class_files: Collection[Path], classes_dir: Path) -> None:
        # Names only need to be unique; JaCoCo reads class names from the bytecode.
        for n, class_file in enumerate(class_files):
            shutil.copyfile(class_file, classes_dir / f"{n}_{class_file.name}")

    def analyze(
        self, store: ExecutionDataStore, class_files: Collection[Path]
    ) -> list[SourceCoverage]:
        if not class_files:
            return []

        try:
            sources = self._analyze_batch(store, class_files)
        except (CoverLinkError, OSError) as e:
            if len(class_files) == 1 or not _is_class_specific(e):
                log.warning("analyzer.failed", error=str(e), classes=len(class_files))
                return []
            log.info("analyzer.batch_failed", error=str(e), classes=len(class_files))
            sources = self._analyze_each(store, class_files)

        log.debug("analyzer.done", classes=len(class_files), sources=len(sources))
        return sources

    def _analyze_each(
        self, store: ExecutionDataStore, class_files: Collection[Path]
    ) -> list[SourceCoverage]:
        """Analyze class files one at a time, dropping the ones that fail."""
        merged: dict[tuple[str, str], SourceCoverage] = {}
        for class_file in class_files:
            try:
                sources = self._analyze_batch(store, [class_file])
            except (CoverLinkError, OSError) as e:
                log.warning("analyzer.failed", error=str(e), class_file=str(class_file))
                continue
            for source in sources:
                key = (source.package_name, source.name)
                if key in merged:
                    merged[key].lines.update(source.lines)
                else:
                    merged[key] = source
        return list(merged.values())

    def _analyze_batch(
        self, store: ExecutionDataStore, class_files: Collection[Path]
    ) -> list[SourceCoverage]:
        with tempfile.TemporaryDirectory(prefix="coverlink-") as scratch:
            work = Path(scratch)
            exec_file = work / "jacoco.exec"
            classes_dir = work / "classes"
            xml_file = work / "jacoco.xml"
            classes_dir.mkdir()

            command = self._command(exec_file, classes_dir, xml_file)
            write_execution_data(exec_file, store)
            self._stage_classes(class_files, classes_dir)
            self._run(command)
            return parse_jacoco_xml(xml_file)

    def _run(self, command: list[str]) -> None:
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                timeout=self._config.timeout_sec,
                text=True,
            )
        except FileNotFoundError as e:
            raise AnalysisError.tool_missing(self._config.java_executable) from e
        except subprocess.TimeoutExpired as e:
            raise AnalysisError.timed_out(e.timeout) from e
        if result.returncode != 0:
            raise AnalysisError.tool_failed(result.returncode, result.stderr.strip())


def _is_class_specific(error: Exception) -> bool:
    """Whether retrying with fewer class files could succeed."""
    if isinstance(error, CoverLinkError):
        return error.code not in (ErrorCode.ANALYSIS_TOOL_MISSING, ErrorCode.ANALYSIS_TIMEOUT)
    return True
