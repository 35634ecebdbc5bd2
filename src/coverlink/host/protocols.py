"""Contracts for the host analysis platform.

The coverage engine never talks to a concrete platform; it resolves classes
through a ResourceLocator, lists binary roots through a Classpath, and writes
measures through a SensorContext.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable


class ResourceType(Enum):
    MAIN = "main"
    TEST = "test"


class InputFile(Protocol):
    """A source file known to the host."""

    @property
    def type(self) -> ResourceType: ...

    @property
    def relative_path(self) -> str: ...

    def lines(self) -> int:
        """Number of lines in the file."""
        ...


class ResourceLocator(Protocol):
    def find_resource_by_class_name(self, class_name: str) -> InputFile | None:
        """Resolve a slash-joined class identifier, or None if unknown."""
        ...


class Classpath(Protocol):
    @property
    def binary_dirs(self) -> Sequence[Path]: ...


class MeasureBuilder(Protocol):
    """Accumulates coverage facts for one file until saved."""

    def line_hits(self, line: int, hits: int) -> None: ...

    def conditions(self, line: int, conditions: int, covered_conditions: int) -> None: ...

    def save(self) -> None: ...


class SensorContext(Protocol):
    def new_coverage(self, input_file: InputFile) -> MeasureBuilder: ...


@runtime_checkable
class PerTestCoverageContext(Protocol):
    """Optional SensorContext extension receiving per-test covered lines."""

    def save_test_coverage(
        self, test_name: str, input_file: InputFile, lines: Sequence[int]
    ) -> None: ...
