"""Benchmark dispatcher Lambda: staggered SQS triggers for each runtime under test."""

from .config import (
    DispatcherConfig,
    DispatcherError,
    ConfigurationError,
    TARGETS,
    load_config,
)
from .dispatcher import (
    BenchmarkDispatcher,
    BenchmarkRun,
    DispatchOutcome,
    ScheduledMessage,
    UnknownTargetError,
    ResolutionError,
    delay_seconds,
    schedule_messages,
    DELAY_MAX,
    INVOKE_MAX,
)

__all__ = [
    "BenchmarkDispatcher",
    "BenchmarkRun",
    "DispatcherConfig",
    "DispatchOutcome",
    "ScheduledMessage",
    "DispatcherError",
    "ConfigurationError",
    "UnknownTargetError",
    "ResolutionError",
    "delay_seconds",
    "schedule_messages",
    "load_config",
    "TARGETS",
    "DELAY_MAX",
    "INVOKE_MAX",
]
