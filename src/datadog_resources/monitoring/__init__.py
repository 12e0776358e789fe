"""Monitoring module: polling the Datadog API with retries."""

from .retry_handler import (
    OutcomeStatus,
    ProbeResult,
    ProbeStatus,
    RetryableError,
    RetryCancelledError,
    RetryConfig,
    RetryError,
    RetryExhaustedError,
    RetryOutcome,
    RetryRunner,
    retry,
)

__all__ = [
    "RetryRunner",
    "RetryConfig",
    "RetryOutcome",
    "OutcomeStatus",
    "ProbeResult",
    "ProbeStatus",
    "RetryableError",
    "RetryError",
    "RetryExhaustedError",
    "RetryCancelledError",
    "retry",
]
