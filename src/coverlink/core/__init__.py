"""Core module exports."""

from coverlink.core.errors import (
    AnalysisError,
    ConfigError,
    CoverLinkError,
    ErrorCode,
    ExecutionDataError,
    InternalError,
)
from coverlink.core.logging import (
    clear_run_id,
    configure_logging,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "AnalysisError",
    "ConfigError",
    "CoverLinkError",
    "ErrorCode",
    "ExecutionDataError",
    "InternalError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_run_id",
    "set_run_id",
]
