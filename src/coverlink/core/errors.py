"""CoverLink error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Execution data
- 4xxx: Analysis
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Execution data (3xxx)
    EXECDATA_INVALID_FILE = 3001
    EXECDATA_INCOMPATIBLE_VERSION = 3002
    EXECDATA_UNKNOWN_BLOCK = 3003
    EXECDATA_TRUNCATED = 3004
    EXECDATA_INCOMPATIBLE_RECORD = 3005

    # Analysis (4xxx)
    ANALYSIS_TOOL_MISSING = 4001
    ANALYSIS_TOOL_FAILED = 4002
    ANALYSIS_INVALID_REPORT = 4003
    ANALYSIS_TIMEOUT = 4004

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class CoverLinkError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CoverLinkError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class ExecutionDataError(CoverLinkError):
    """Malformed or incompatible execution data."""

    @classmethod
    def invalid_file(cls, reason: str = "missing header block") -> "ExecutionDataError":
        return cls(
            code=ErrorCode.EXECDATA_INVALID_FILE,
            message=f"Invalid execution data file: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def incompatible_version(cls, version: int) -> "ExecutionDataError":
        return cls(
            code=ErrorCode.EXECDATA_INCOMPATIBLE_VERSION,
            message=f"Incompatible execution data version {version:#x}",
            details={"version": version},
        )

    @classmethod
    def unknown_block(cls, block_type: int, offset: int) -> "ExecutionDataError":
        return cls(
            code=ErrorCode.EXECDATA_UNKNOWN_BLOCK,
            message=f"Unknown block type {block_type:#x} at offset {offset}",
            details={"block_type": block_type, "offset": offset},
        )

    @classmethod
    def truncated(cls, offset: int, needed: int) -> "ExecutionDataError":
        return cls(
            code=ErrorCode.EXECDATA_TRUNCATED,
            message=f"Unexpected end of execution data at offset {offset} ({needed} bytes needed)",
            details={"offset": offset, "needed": needed},
        )

    @classmethod
    def incompatible_record(cls, class_id: int, name: str, reason: str) -> "ExecutionDataError":
        return cls(
            code=ErrorCode.EXECDATA_INCOMPATIBLE_RECORD,
            message=f"Incompatible execution data for class {name} ({class_id:#018x}): {reason}",
            details={"class_id": class_id, "name": name, "reason": reason},
        )


class AnalysisError(CoverLinkError):
    """Errors from the bytecode/source correlation step."""

    @classmethod
    def tool_missing(cls, tool: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_TOOL_MISSING,
            message=f"Coverage analysis tool not available: {tool}",
            details={"tool": tool},
        )

    @classmethod
    def tool_failed(cls, returncode: int, stderr: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_TOOL_FAILED,
            message=f"Coverage analysis tool exited with status {returncode}: {stderr}",
            retryable=True,
            details={"returncode": returncode, "stderr": stderr},
        )

    @classmethod
    def timed_out(cls, timeout: float) -> "AnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_TIMEOUT,
            message=f"Coverage analysis tool timed out after {timeout}s",
            retryable=True,
            details={"timeout": timeout},
        )

    @classmethod
    def invalid_report(cls, path: str, reason: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_INVALID_REPORT,
            message=f"Invalid coverage report at {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InternalError(CoverLinkError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
