"""JaCoCo coverage ingestion.

This package provides:
- Artifact indexing of compiled class directories
- Execution data (.exec) decoding and encoding
- Bytecode/source correlation via the JaCoCo CLI
- Projection of line/branch counters onto host measures
- Per-test coverage attribution

Usage:
    from coverlink.coverage import CoverageSensor, JacocoCliAnalyzer

    sensor = CoverageSensor(locator, classpath, JacocoCliAnalyzer(config.jacoco), report)
    sensor.analyse(context)
"""

from coverlink.coverage.analyzer import CoverageAnalyzer, JacocoCliAnalyzer
from coverlink.coverage.attribution import (
    PerTestCoverage,
    SessionCoverage,
    read_coverage_per_test,
)
from coverlink.coverage.execdata import (
    encode_execution_data,
    parse_execution_data,
    read_execution_data,
    write_execution_data,
)
from coverlink.coverage.index import ArtifactIndex, build_artifact_index
from coverlink.coverage.models import (
    Counter,
    CounterStatus,
    ExecutionData,
    ExecutionDataReport,
    ExecutionDataStore,
    LineCoverage,
    SessionInfo,
    SourceCoverage,
)
from coverlink.coverage.projector import (
    covered_lines,
    fully_qualified_class_name,
    project_coverage,
    resolve_resource,
)
from coverlink.coverage.sensor import CoverageSensor
from coverlink.coverage.xml_report import parse_jacoco_xml

__all__ = [
    # Models
    "Counter",
    "CounterStatus",
    "ExecutionData",
    "ExecutionDataReport",
    "ExecutionDataStore",
    "LineCoverage",
    "SessionInfo",
    "SourceCoverage",
    # Index
    "ArtifactIndex",
    "build_artifact_index",
    # Execution data
    "encode_execution_data",
    "parse_execution_data",
    "read_execution_data",
    "write_execution_data",
    # Analysis
    "CoverageAnalyzer",
    "JacocoCliAnalyzer",
    "parse_jacoco_xml",
    # Projection
    "covered_lines",
    "fully_qualified_class_name",
    "project_coverage",
    "resolve_resource",
    # Attribution
    "PerTestCoverage",
    "SessionCoverage",
    "read_coverage_per_test",
    # Sensor
    "CoverageSensor",
]
