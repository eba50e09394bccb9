"""
Queue bindings for the benchmark dispatcher.

The CDK stack injects one queue ARN and one function ARN per runtime under
test as environment variables:

    ARN_PY311_QUEUE, ARN_PY311_FUNCTION
    ARN_PY312_QUEUE, ARN_PY312_FUNCTION
    ARN_PY313_QUEUE, ARN_PY313_FUNCTION

They are read once per container into an immutable DispatcherConfig. Queue
bindings are validated as a whole on every dispatch, so a single missing
binding stops the run for every target.
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

# Runtimes under test, in the order the schedule rule fires them
TARGETS = ("PY311", "PY312", "PY313")


class DispatcherError(Exception):
    """Base class for errors that abort a dispatcher run."""
    pass


class ConfigurationError(DispatcherError):
    """Raised when one or more queue bindings are missing."""

    def __init__(self, message: str, observed: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.observed = observed or {}


def queue_env_var(target: str) -> str:
    """Environment variable holding the queue ARN for a target."""
    return f"ARN_{target}_QUEUE"


def function_env_var(target: str) -> str:
    """Environment variable holding the workload function ARN for a target."""
    return f"ARN_{target}_FUNCTION"


@dataclass(frozen=True)
class DispatcherConfig:
    """
    Immutable target-to-queue bindings.

    Attributes:
        queue_arns: Queue ARN per target (empty string when unset)
        function_arns: Workload function ARN per target, informational only
    """

    queue_arns: Mapping[str, str]
    function_arns: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "queue_arns", MappingProxyType(dict(self.queue_arns)))
        object.__setattr__(self, "function_arns", MappingProxyType(dict(self.function_arns)))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DispatcherConfig":
        """
        Build config from environment variables.

        Missing variables are recorded as empty strings; validate() decides
        whether the result is usable.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            DispatcherConfig
        """
        environ = os.environ if environ is None else environ
        return cls(
            queue_arns={t: environ.get(queue_env_var(t), "") for t in TARGETS},
            function_arns={t: environ.get(function_env_var(t), "") for t in TARGETS},
        )

    def observed_bindings(self) -> Dict[str, str]:
        """Queue bindings keyed by environment variable name, as observed."""
        return {queue_env_var(t): self.queue_arns.get(t, "") for t in TARGETS}

    def missing_targets(self) -> List[str]:
        """Targets without a usable queue binding."""
        return [t for t in TARGETS if not (self.queue_arns.get(t) or "").strip()]

    def validate(self) -> None:
        """
        Check that every target has a queue binding.

        Raises:
            ConfigurationError: If any binding is missing or empty
        """
        missing = self.missing_targets()
        if missing:
            observed = self.observed_bindings()
            logger.error(f"Missing queue ARN environment variable. Observed: {observed}")
            raise ConfigurationError(
                f"Missing queue ARN environment variable for: {', '.join(missing)}",
                observed=observed,
            )

    def queue_arn_for(self, target: str) -> str:
        return self.queue_arns[target]


@lru_cache(maxsize=1)
def load_config() -> DispatcherConfig:
    """Load bindings once per Lambda container."""
    return DispatcherConfig.from_env()
