"""Tests for JaCoCo XML report parsing."""

from pathlib import Path

import pytest

from coverlink.core.errors import AnalysisError, ErrorCode
from coverlink.coverage.models import Counter, CounterStatus
from coverlink.coverage.xml_report import parse_jacoco_xml

REPORT = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<!DOCTYPE report PUBLIC "-//JACOCO//DTD Report 1.1//EN" "report.dtd">
<report name="coverlink">
  <sessioninfo id="vm1 testFoo" start="1000" dump="2000"/>
  <package name="com/foo">
    <class name="com/foo/Bar" sourcefilename="Bar.kt">
      <method name="run" desc="()V" line="3">
        <counter type="INSTRUCTION" missed="0" covered="4"/>
      </method>
    </class>
    <sourcefile name="Bar.kt">
      <line nr="3" mi="0" ci="4" mb="0" cb="0"/>
      <line nr="4" mi="2" ci="0" mb="2" cb="0"/>
      <line nr="6" mi="1" ci="3" mb="1" cb="3"/>
      <counter type="LINE" missed="1" covered="2"/>
    </sourcefile>
  </package>
  <package name="">
    <sourcefile name="Main.kt">
      <line nr="1" mi="0" ci="1" mb="0" cb="0"/>
    </sourcefile>
  </package>
</report>
"""


@pytest.fixture
def report_file(tmp_path: Path) -> Path:
    path = tmp_path / "jacoco.xml"
    path.write_text(REPORT)
    return path


class TestParseJacocoXml:
    """Parsing of JaCoCo XML reports."""

    def test_given_report_when_parsed_then_one_entry_per_sourcefile(
        self, report_file: Path
    ) -> None:
        sources = parse_jacoco_xml(report_file)

        names = [(s.package_name, s.name) for s in sources]
        assert names == [("com/foo", "Bar.kt"), ("", "Main.kt")]

    def test_given_lines_when_parsed_then_counters_and_range(self, report_file: Path) -> None:
        """Line counters carry instruction and branch counts."""
        # When
        bar = parse_jacoco_xml(report_file)[0]

        # Then
        assert (bar.first_line, bar.last_line) == (3, 6)
        assert bar.line(3).status is CounterStatus.FULLY_COVERED
        assert bar.line(4).status is CounterStatus.NOT_COVERED
        assert bar.line(4).branches == Counter(missed=2, covered=0)
        assert bar.line(5).status is CounterStatus.EMPTY
        assert bar.line(6).status is CounterStatus.PARTLY_COVERED
        assert bar.line(6).branches.total == 4

    def test_given_duplicate_sourcefile_when_parsed_then_last_writer_wins_per_line(
        self, tmp_path: Path
    ) -> None:
        """Repeated sourcefile entries merge per line."""
        # Given
        path = tmp_path / "dup.xml"
        path.write_text(
            '<report name="r">'
            '<package name="p"><sourcefile name="A.kt">'
            '<line nr="1" mi="1" ci="0" mb="0" cb="0"/><line nr="2" mi="1" ci="0" mb="0" cb="0"/>'
            "</sourcefile></package>"
            '<package name="p"><sourcefile name="A.kt">'
            '<line nr="2" mi="0" ci="1" mb="0" cb="0"/>'
            "</sourcefile></package>"
            "</report>"
        )

        # When
        sources = parse_jacoco_xml(path)

        # Then
        assert len(sources) == 1
        assert sources[0].line(1).status is CounterStatus.NOT_COVERED
        assert sources[0].line(2).status is CounterStatus.FULLY_COVERED

    @pytest.mark.parametrize(
        "content",
        [
            "<report><package",
            "<coverage/>",
            '<report><package name="p"><sourcefile name="A.kt"><line nr="x"/></sourcefile>'
            "</package></report>",
        ],
    )
    def test_given_invalid_report_when_parsed_then_analysis_error(
        self, tmp_path: Path, content: str
    ) -> None:
        path = tmp_path / "bad.xml"
        path.write_text(content)

        with pytest.raises(AnalysisError) as exc_info:
            parse_jacoco_xml(path)

        assert exc_info.value.code == ErrorCode.ANALYSIS_INVALID_REPORT

    def test_given_missing_file_when_parsed_then_analysis_error(self, tmp_path: Path) -> None:
        with pytest.raises(AnalysisError):
            parse_jacoco_xml(tmp_path / "absent.xml")
