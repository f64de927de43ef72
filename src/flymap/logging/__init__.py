"""flymap logging — hexagonal logging port and adapters."""

from flymap.logging.port import LoggingPort, LoggingSettings
from flymap.logging.stdlib_adapter import StdlibLoggingAdapter
from flymap.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "LoggingSettings", "StdlibLoggingAdapter", "StructlogAdapter"]
