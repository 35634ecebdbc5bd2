"""Config module exports."""

from coverlink.config.loader import load_config
from coverlink.config.models import (
    CoverageConfig,
    CoverLinkConfig,
    JacocoConfig,
    LoggingConfig,
)

__all__ = [
    "load_config",
    "CoverLinkConfig",
    "CoverageConfig",
    "JacocoConfig",
    "LoggingConfig",
]
