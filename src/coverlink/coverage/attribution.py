"""Per-test coverage attribution.

Agents started with a session id of the form ``"<vm-id> <test-name>"`` dump
one session per test. Each such session is analyzed on its own, restricted
to the classes it actually recorded, to find the lines that test covered.
Sessions without a space in their id (one session for a whole VM) cannot be
attributed and are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from coverlink.coverage.analyzer import CoverageAnalyzer
from coverlink.coverage.index import ArtifactIndex, artifacts_for_names
from coverlink.coverage.models import ExecutionDataStore
from coverlink.coverage.projector import covered_lines, resolve_resource
from coverlink.host.protocols import InputFile, ResourceLocator

log = structlog.get_logger()

SESSION_SEPARATOR = " "


def session_test_name(session_id: str) -> str | None:
    """Test name part of an attributable session id, else None."""
    _, sep, name = session_id.partition(SESSION_SEPARATOR)
    return name if sep else None


@dataclass(slots=True)
class SessionCoverage:
    """Lines covered by one test session, per resolved resource."""

    session_id: str
    test_name: str
    files: list[tuple[InputFile, list[int]]] = field(default_factory=list)

    @property
    def contributed(self) -> bool:
        return any(lines for _, lines in self.files)


@dataclass(slots=True)
class PerTestCoverage:
    sessions: list[SessionCoverage] = field(default_factory=list)

    @property
    def collected(self) -> bool:
        """True when at least one session covered at least one line."""
        return any(s.contributed for s in self.sessions)


def analyze_session(
    session_id: str,
    store: ExecutionDataStore,
    index: ArtifactIndex,
    analyzer: CoverageAnalyzer,
    locator: ResourceLocator,
) -> SessionCoverage | None:
    """Covered lines of one session, or None if the session is not attributable."""
    test_name = session_test_name(session_id)
    if test_name is None:
        log.debug("attribution.session_skipped", session=session_id)
        return None

    result = SessionCoverage(session_id=session_id, test_name=test_name)
    class_files = artifacts_for_names(index, sorted(store.names))
    lines_by_path: dict[str, tuple[InputFile, set[int]]] = {}
    for coverage in analyzer.analyze(store, class_files):
        resource = resolve_resource(locator, coverage)
        if resource is None:
            continue
        entry = lines_by_path.setdefault(resource.relative_path, (resource, set()))
        entry[1].update(covered_lines(coverage))
    result.files = [(resource, sorted(lines)) for resource, lines in lines_by_path.values()]
    return result


def read_coverage_per_test(
    sessions: dict[str, ExecutionDataStore],
    index: ArtifactIndex,
    analyzer: CoverageAnalyzer,
    locator: ResourceLocator,
) -> PerTestCoverage:
    per_test = PerTestCoverage()
    for session_id, store in sessions.items():
        session = analyze_session(session_id, store, index, analyzer, locator)
        if session is None:
            continue
        per_test.sessions.append(session)
        log.debug(
            "attribution.session_analyzed",
            session=session_id,
            files=len(session.files),
            contributed=session.contributed,
        )
    return per_test
