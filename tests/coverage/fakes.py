"""In-memory fakes for the host protocols and the analyzer."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from coverlink.coverage.models import (
    Counter,
    CounterStatus,
    ExecutionDataStore,
    LineCoverage,
    SourceCoverage,
)
from coverlink.host.protocols import ResourceType

_STATUS_COUNTERS = {
    CounterStatus.FULLY_COVERED: Counter(missed=0, covered=3),
    CounterStatus.PARTLY_COVERED: Counter(missed=1, covered=2),
    CounterStatus.NOT_COVERED: Counter(missed=3, covered=0),
    CounterStatus.EMPTY: Counter(),
    CounterStatus.UNKNOWN: Counter(missed=-1, covered=0),
}


def line(status: CounterStatus, branches: tuple[int, int] = (0, 0)) -> LineCoverage:
    """LineCoverage with the given status and (missed, covered) branches."""
    missed, covered = branches
    return LineCoverage(
        instructions=_STATUS_COUNTERS[status], branches=Counter(missed=missed, covered=covered)
    )


def source(
    package: str, name: str, lines: dict[int, LineCoverage] | None = None
) -> SourceCoverage:
    return SourceCoverage(package_name=package, name=name, lines=dict(lines or {}))


@dataclass
class FakeInputFile:
    relative_path: str
    line_count: int = 1000
    type: ResourceType = ResourceType.MAIN

    def lines(self) -> int:
        return self.line_count

    def __hash__(self) -> int:
        return hash(self.relative_path)


@dataclass
class FakeLocator:
    resources: dict[str, FakeInputFile] = field(default_factory=dict)
    queries: list[str] = field(default_factory=list)

    def find_resource_by_class_name(self, class_name: str) -> FakeInputFile | None:
        self.queries.append(class_name)
        return self.resources.get(class_name)


@dataclass
class RecordingBuilder:
    input_file: FakeInputFile
    hits: dict[int, int] = field(default_factory=dict)
    conditions_by_line: dict[int, tuple[int, int]] = field(default_factory=dict)
    saves: int = 0

    def line_hits(self, line: int, hits: int) -> None:
        self.hits[line] = hits

    def conditions(self, line: int, conditions: int, covered_conditions: int) -> None:
        self.conditions_by_line[line] = (conditions, covered_conditions)

    def save(self) -> None:
        self.saves += 1


@dataclass
class RecordingContext:
    builders: list[RecordingBuilder] = field(default_factory=list)

    def new_coverage(self, input_file: FakeInputFile) -> RecordingBuilder:
        builder = RecordingBuilder(input_file)
        self.builders.append(builder)
        return builder

    def by_path(self) -> dict[str, RecordingBuilder]:
        return {b.input_file.relative_path: b for b in self.builders}


@dataclass
class PerTestRecordingContext(RecordingContext):
    tests: dict[str, dict[str, list[int]]] = field(default_factory=dict)

    def save_test_coverage(
        self, test_name: str, input_file: FakeInputFile, lines: Sequence[int]
    ) -> None:
        self.tests.setdefault(test_name, {})[input_file.relative_path] = list(lines)


@dataclass
class FakeAnalyzer:
    """Returns canned coverage; per-store results are keyed by the store's class names."""

    merged_result: list[SourceCoverage] = field(default_factory=list)
    by_names: dict[frozenset[str], list[SourceCoverage]] = field(default_factory=dict)
    calls: list[tuple[frozenset[str], list[Path]]] = field(default_factory=list)

    def analyze(
        self, store: ExecutionDataStore, class_files: Collection[Path]
    ) -> list[SourceCoverage]:
        names = frozenset(store.names)
        self.calls.append((names, sorted(class_files)))
        return self.by_names.get(names, self.merged_result)
