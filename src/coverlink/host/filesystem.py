"""Standalone host backed by the local filesystem.

Resolves classes to source files under configured source roots and collects
saved measures in memory, ready to be written as JSON.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from coverlink.core.errors import InternalError
from coverlink.host.protocols import ResourceType

DEFAULT_SOURCE_SUFFIXES = (".java", ".kt")


@dataclass(frozen=True, slots=True)
class DirectoryClasspath:
    binary_dirs: Sequence[Path]


@dataclass(slots=True)
class SourceFile:
    """A source file on disk; line count is read on first use."""

    path: Path
    relative_path: str
    type: ResourceType = ResourceType.MAIN
    _lines: int | None = field(default=None, repr=False)

    def lines(self) -> int:
        if self._lines is None:
            with self.path.open("rb") as f:
                data = f.read()
            self._lines = data.count(b"\n") + (1 if data and not data.endswith(b"\n") else 0)
        return self._lines

    def __str__(self) -> str:
        return self.relative_path


class FilesystemResourceLocator:
    """Maps class identifiers to ``<root>/<package>/<Outer><suffix>``.

    Nested class suffixes (``$Inner``) are dropped. Source roots are searched
    before test roots; files under test roots resolve as TEST resources.
    """

    def __init__(
        self,
        source_dirs: Iterable[Path],
        test_dirs: Iterable[Path] = (),
        *,
        suffixes: Sequence[str] = DEFAULT_SOURCE_SUFFIXES,
        base_dir: Path | None = None,
    ) -> None:
        self._roots = [(Path(d), ResourceType.MAIN) for d in source_dirs] + [
            (Path(d), ResourceType.TEST) for d in test_dirs
        ]
        self._suffixes = tuple(suffixes)
        self._base_dir = base_dir
        self._cache: dict[str, SourceFile | None] = {}

    def find_resource_by_class_name(self, class_name: str) -> SourceFile | None:
        if not class_name:
            return None
        if class_name not in self._cache:
            self._cache[class_name] = self._lookup(class_name.split("$", 1)[0])
        return self._cache[class_name]

    def _lookup(self, outer_name: str) -> SourceFile | None:
        for root, resource_type in self._roots:
            for suffix in self._suffixes:
                candidate = root / f"{outer_name}{suffix}"
                if candidate.is_file():
                    return SourceFile(
                        path=candidate,
                        relative_path=self._relative(candidate),
                        type=resource_type,
                    )
        return None

    def _relative(self, path: Path) -> str:
        if self._base_dir is not None and path.is_relative_to(self._base_dir):
            return path.relative_to(self._base_dir).as_posix()
        return path.as_posix()


@dataclass(slots=True)
class FileMeasures:
    line_hits: dict[int, int] = field(default_factory=dict)
    conditions: dict[int, tuple[int, int]] = field(default_factory=dict)


class _Builder:
    def __init__(self, sink: JsonMeasureSink, input_file: SourceFile) -> None:
        self._sink = sink
        self._file = input_file
        self._measures = FileMeasures()

    def line_hits(self, line: int, hits: int) -> None:
        self._measures.line_hits[line] = hits

    def conditions(self, line: int, conditions: int, covered_conditions: int) -> None:
        self._measures.conditions[line] = (conditions, covered_conditions)

    def save(self) -> None:
        self._sink._commit(self._file.relative_path, self._measures)


class JsonMeasureSink:
    """SensorContext collecting measures per file.

    Each file accepts one save per pass.
    """

    def __init__(self) -> None:
        self.files: dict[str, FileMeasures] = {}
        self.tests: dict[str, dict[str, list[int]]] = {}

    def new_coverage(self, input_file: SourceFile) -> _Builder:
        return _Builder(self, input_file)

    def save_test_coverage(
        self, test_name: str, input_file: SourceFile, lines: Sequence[int]
    ) -> None:
        per_file = self.tests.setdefault(test_name, {})
        existing = per_file.get(input_file.relative_path, [])
        per_file[input_file.relative_path] = sorted(set(existing) | set(lines))

    def _commit(self, path: str, measures: FileMeasures) -> None:
        if path in self.files:
            raise InternalError.unexpected("coverage saved twice for the same file", path=path)
        self.files[path] = measures

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": {
                path: {
                    "lines": {str(line): hits for line, hits in sorted(m.line_hits.items())},
                    "conditions": {
                        str(line): {"total": total, "covered": covered}
                        for line, (total, covered) in sorted(m.conditions.items())
                    },
                }
                for path, m in sorted(self.files.items())
            },
            "tests": self.tests,
        }

    def write(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n")
