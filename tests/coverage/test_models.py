"""Tests for coverage counters and execution data stores."""

import pytest

from coverlink.core.errors import ErrorCode, ExecutionDataError
from coverlink.coverage.models import (
    Counter,
    CounterStatus,
    ExecutionData,
    ExecutionDataStore,
    LineCoverage,
    SourceCoverage,
)


class TestCounterStatus:
    """Counter status classification."""

    @pytest.mark.parametrize(
        ("missed", "covered", "status"),
        [
            (0, 0, CounterStatus.EMPTY),
            (4, 0, CounterStatus.NOT_COVERED),
            (0, 4, CounterStatus.FULLY_COVERED),
            (1, 3, CounterStatus.PARTLY_COVERED),
            (-1, 0, CounterStatus.UNKNOWN),
        ],
    )
    def test_given_counts_when_status_then_classified(
        self, missed: int, covered: int, status: CounterStatus
    ) -> None:
        assert Counter(missed=missed, covered=covered).status is status


class TestSourceCoverage:
    """Line lookup and range of a source file's coverage."""

    def test_given_lines_when_range_then_min_and_max(self) -> None:
        coverage = SourceCoverage(
            package_name="com/foo",
            name="Bar.kt",
            lines={7: LineCoverage(), 3: LineCoverage(), 12: LineCoverage()},
        )

        assert (coverage.first_line, coverage.last_line) == (3, 12)

    def test_given_missing_line_when_read_then_empty(self) -> None:
        coverage = SourceCoverage(package_name="com/foo", name="Bar.kt")

        assert coverage.line(5).status is CounterStatus.EMPTY
        assert coverage.line(5).branches.total == 0
        assert (coverage.first_line, coverage.last_line) == (-1, -1)


class TestExecutionDataStore:
    """Merging of execution data records."""

    def test_given_same_id_when_put_then_probes_ored(self) -> None:
        """Probes of records with the same class id are OR-ed."""
        # Given
        store = ExecutionDataStore()
        store.put(ExecutionData(1, "a/A", (True, False, False)))

        # When
        store.put(ExecutionData(1, "a/A", (False, False, True)))

        # Then
        merged = store.get(1)
        assert merged is not None
        assert merged.probes == (True, False, True)
        assert len(store) == 1

    def test_given_name_mismatch_when_put_then_rejected(self) -> None:
        """A class id reused for another class name is rejected."""
        store = ExecutionDataStore()
        store.put(ExecutionData(1, "a/A", (True,)))

        with pytest.raises(ExecutionDataError) as exc_info:
            store.put(ExecutionData(1, "b/B", (True,)))

        assert exc_info.value.code == ErrorCode.EXECDATA_INCOMPATIBLE_RECORD

    def test_given_records_when_contents_then_names_exposed(self) -> None:
        store = ExecutionDataStore()
        store.put(ExecutionData(1, "a/A", ()))
        store.put(ExecutionData(2, "b/B", (False,)))

        assert [d.name for d in store.contents] == ["a/A", "b/B"]
        assert store.names == {"a/A", "b/B"}
        assert store.get(3) is None
