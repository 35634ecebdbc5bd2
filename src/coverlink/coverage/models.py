"""Coverage data model.

Two families of types live here:

- Execution data: raw probe arrays recorded by the JaCoCo agent, grouped into
  stores (one merged store, one store per recorded session).
- Source coverage: per-line instruction and branch counters for one source
  file, produced by correlating execution data with compiled classes.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from coverlink.core.errors import ExecutionDataError


class CounterStatus(Enum):
    """Coverage status of a counter.

    Values match the JaCoCo ICounter status codes. UNKNOWN is never produced
    by a well-formed counter; it marks data that cannot be classified.
    """

    EMPTY = 0
    NOT_COVERED = 1
    FULLY_COVERED = 2
    PARTLY_COVERED = 3
    UNKNOWN = -1


@dataclass(frozen=True, slots=True)
class Counter:
    """Missed/covered item counts (instructions or branches)."""

    missed: int = 0
    covered: int = 0

    @property
    def total(self) -> int:
        return self.missed + self.covered

    @property
    def status(self) -> CounterStatus:
        if self.missed < 0 or self.covered < 0:
            return CounterStatus.UNKNOWN
        if self.covered == 0:
            return CounterStatus.EMPTY if self.missed == 0 else CounterStatus.NOT_COVERED
        return CounterStatus.FULLY_COVERED if self.missed == 0 else CounterStatus.PARTLY_COVERED


EMPTY_COUNTER = Counter()


@dataclass(frozen=True, slots=True)
class LineCoverage:
    """Instruction and branch counters of one source line."""

    instructions: Counter = EMPTY_COUNTER
    branches: Counter = EMPTY_COUNTER

    @property
    def status(self) -> CounterStatus:
        return self.instructions.status


EMPTY_LINE = LineCoverage()


@dataclass(slots=True)
class SourceCoverage:
    """Coverage of one source file.

    ``package_name`` uses slash notation (``com/foo``); ``name`` is the source
    file name (``Bar.kt``). Lines without counters read as EMPTY.
    """

    package_name: str
    name: str
    lines: dict[int, LineCoverage] = field(default_factory=dict)  # line_number → counters

    @property
    def first_line(self) -> int:
        """First line with counters, or -1 when there are none."""
        return min(self.lines) if self.lines else -1

    @property
    def last_line(self) -> int:
        """Last line with counters, or -1 when there are none."""
        return max(self.lines) if self.lines else -1

    def line(self, nr: int) -> LineCoverage:
        return self.lines.get(nr, EMPTY_LINE)


@dataclass(frozen=True, slots=True)
class SessionInfo:
    """One recorded agent session (start and dump times in epoch millis)."""

    id: str
    start: int
    dump: int


@dataclass(frozen=True, slots=True)
class ExecutionData:
    """Probe array recorded for one class."""

    class_id: int
    name: str  # slash-joined class identifier, e.g. com/foo/Bar
    probes: tuple[bool, ...]


class ExecutionDataStore:
    """Execution data keyed by class id.

    Records put for an id already present are merged by OR-ing their probes.
    """

    def __init__(self) -> None:
        self._entries: dict[int, ExecutionData] = {}

    def put(self, data: ExecutionData) -> None:
        existing = self.get(data.class_id)
        if existing is None:
            self._entries[data.class_id] = data
            return
        if existing.name != data.name:
            raise ExecutionDataError.incompatible_record(
                data.class_id, data.name, f"name differs from {existing.name}"
            )
        if len(existing.probes) != len(data.probes):
            raise ExecutionDataError.incompatible_record(
                data.class_id,
                data.name,
                f"probe count {len(data.probes)} differs from {len(existing.probes)}",
            )
        merged = tuple(a or b for a, b in zip(existing.probes, data.probes, strict=True))
        self._entries[data.class_id] = ExecutionData(data.class_id, data.name, merged)

    def get(self, class_id: int) -> ExecutionData | None:
        return self._entries.get(class_id)

    @property
    def contents(self) -> list[ExecutionData]:
        return list(self._entries.values())

    @property
    def names(self) -> set[str]:
        return {data.name for data in self._entries.values()}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ExecutionData]:
        return iter(self._entries.values())


@dataclass(slots=True)
class ExecutionDataReport:
    """Decoded execution data file.

    ``merged`` aggregates every record; ``sessions`` holds each recorded
    session's records in isolation, keyed by session id.
    """

    merged: ExecutionDataStore = field(default_factory=ExecutionDataStore)
    sessions: dict[str, ExecutionDataStore] = field(default_factory=dict)
    session_infos: list[SessionInfo] = field(default_factory=list)
