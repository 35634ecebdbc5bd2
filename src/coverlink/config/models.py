"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (COVERLINK__SECTION__KEY)
3. Project YAML (.coverlink/config.yaml)
4. Global YAML (~/.config/coverlink/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    COVERLINK__<SECTION>__<KEY>=<VALUE>

Examples:
    COVERLINK__LOGGING__LEVEL=DEBUG
    COVERLINK__COVERAGE__REPORT_PATH=build/jacoco/test.exec
    COVERLINK__COVERAGE__READ_COVERAGE_PER_TEST=false
    COVERLINK__JACOCO__CLI_JAR=/opt/jacoco/lib/jacococli.jar
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVERLINK__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every analyzed session.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class CoverageConfig(BaseModel):
    """Coverage ingestion configuration.

    Env vars:
        COVERLINK__COVERAGE__REPORT_PATH: JaCoCo execution data file
        COVERLINK__COVERAGE__READ_COVERAGE_PER_TEST: Replay per-test sessions
    """

    binary_dirs: list[str] = Field(
        default_factory=list,
        description="Directories holding compiled classes (e.g. build/classes/kotlin/main).",
    )
    source_dirs: list[str] = Field(
        default_factory=list,
        description="Main source roots used to resolve classes to source files.",
    )
    test_dirs: list[str] = Field(
        default_factory=list,
        description="Test source roots. Classes resolving here never receive measures.",
    )
    report_path: str | None = Field(
        default=None,
        description="JaCoCo execution data file (.exec). Missing file means no data recorded.",
    )
    read_coverage_per_test: bool = Field(
        default=True,
        description="Analyze each '<vm-id> <test-name>' session on its own. "
        "TRADEOFF: one extra analysis per test session.",
    )
    artifact_extension: str = Field(
        default=".class",
        description="Extension of compiled artifacts in binary_dirs.",
    )

    @field_validator("artifact_extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Extension must start with '.', got {v!r}")
        return v


class JacocoConfig(BaseModel):
    """JaCoCo command line tool configuration.

    Env vars:
        COVERLINK__JACOCO__JAVA_EXECUTABLE: Java launcher
        COVERLINK__JACOCO__CLI_JAR: Path to jacococli.jar
        COVERLINK__JACOCO__TIMEOUT_SEC: Per-analysis timeout
    """

    java_executable: str = Field(
        default="java",
        description="Java launcher used to run the JaCoCo CLI.",
    )
    cli_jar: str | None = Field(
        default=None,
        description="Path to jacococli.jar (nodeps). Required for bytecode analysis.",
    )
    timeout_sec: float = Field(
        default=300.0,
        description="Timeout for one analysis run. "
        "RISK: per-test replay runs the tool once per session.",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class CoverLinkConfig(BaseModel):
    """Root configuration for CoverLink.

    All settings can be configured via:
    1. Environment variables: COVERLINK__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
    jacoco: JacocoConfig = Field(default_factory=JacocoConfig)
