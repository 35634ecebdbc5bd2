"""JaCoCo XML report reader.

Only the per-line data of ``<sourcefile>`` elements is read; class, method
and aggregate counters are ignored.

Structure:
<report name="...">
  <package name="com/example">
    <class name="com/example/Foo" sourcefilename="Foo.kt">...</class>
    <sourcefile name="Foo.kt">
      <line nr="1" mi="0" ci="1" mb="0" cb="0"/>
      <line nr="2" mi="1" ci="0" mb="1" cb="1"/>
    </sourcefile>
  </package>
</report>
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

from coverlink.core.errors import AnalysisError
from coverlink.coverage.models import Counter, LineCoverage, SourceCoverage


def _int_attr(element: ET.Element, name: str, path: Path) -> int:
    value = element.get(name, "0")
    try:
        return int(value)
    except ValueError as e:
        raise AnalysisError.invalid_report(
            str(path), f"attribute {name}={value!r} is not an integer"
        ) from e


def parse_jacoco_xml(path: Path) -> list[SourceCoverage]:
    """Parse a JaCoCo XML report into one SourceCoverage per source file.

    A source file listed more than once keeps the last counters seen for
    each line.

    Raises:
        AnalysisError: If the file is missing or not a valid report.
    """
    if not path.is_file():
        raise AnalysisError.invalid_report(str(path), "file not found")

    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise AnalysisError.invalid_report(str(path), str(e)) from e

    if root.tag != "report":
        raise AnalysisError.invalid_report(str(path), f"unexpected root element <{root.tag}>")

    sources: dict[tuple[str, str], SourceCoverage] = {}

    for package in root.iter("package"):
        package_name = package.get("name", "")

        for sourcefile in package.findall("sourcefile"):
            filename = sourcefile.get("name", "")
            if not filename:
                continue

            key = (package_name, filename)
            coverage = sources.get(key)
            if coverage is None:
                coverage = sources[key] = SourceCoverage(package_name=package_name, name=filename)

            for line in sourcefile.findall("line"):
                nr = _int_attr(line, "nr", path)
                coverage.lines[nr] = LineCoverage(
                    instructions=Counter(
                        missed=_int_attr(line, "mi", path), covered=_int_attr(line, "ci", path)
                    ),
                    branches=Counter(
                        missed=_int_attr(line, "mb", path), covered=_int_attr(line, "cb", path)
                    ),
                )

    return list(sources.values())
