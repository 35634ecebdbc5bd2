"""Host platform contracts and the filesystem-backed host."""

from coverlink.host.filesystem import (
    DirectoryClasspath,
    FilesystemResourceLocator,
    JsonMeasureSink,
    SourceFile,
)
from coverlink.host.protocols import (
    Classpath,
    InputFile,
    MeasureBuilder,
    ResourceLocator,
    ResourceType,
    SensorContext,
    PerTestCoverageContext,
)

__all__ = [
    # Protocols
    "Classpath",
    "InputFile",
    "MeasureBuilder",
    "ResourceLocator",
    "ResourceType",
    "SensorContext",
    "PerTestCoverageContext",
    # Filesystem host
    "DirectoryClasspath",
    "FilesystemResourceLocator",
    "JsonMeasureSink",
    "SourceFile",
]
