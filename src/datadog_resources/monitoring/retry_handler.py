"""
Retry handling for polling the Datadog API until a condition holds.

Provides:
- A probe contract: a zero-argument callable reporting success or a
  retryable failure
- A runner that invokes the probe up to an attempt budget, sleeping
  between attempts
- Fixed or exponential delay policies
- Cancellation through an event and an overall deadline
"""

import logging
import random
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from ..config.constants import (
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_ATTEMPTS,
)
from ..config.settings import RetrySettings

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class RetryError(Exception):
    """Base exception for retry failures surfaced to callers."""

    pass


class RetryExhaustedError(RetryError):
    """
    Raised when the attempt budget is consumed without the probe succeeding.

    Attributes:
        last_reason: Reason reported by the final failed attempt
        attempts: Number of probe invocations made
    """

    def __init__(self, last_reason: Optional[str], attempts: int = 0):
        self.last_reason = last_reason
        self.attempts = attempts
        super().__init__(last_reason or "retry attempts exhausted")


class RetryCancelledError(RetryError):
    """Raised when a retry loop was cancelled before reaching a result."""

    def __init__(self, last_reason: Optional[str] = None, attempts: int = 0):
        self.last_reason = last_reason
        self.attempts = attempts
        message = f"retry cancelled after {attempts} attempt(s)"
        if last_reason:
            message += f": {last_reason}"
        super().__init__(message)


class RetryableError(Exception):
    """
    Raised by a probe to signal the condition is not met yet.

    Equivalent to returning ProbeResult.retryable(reason).
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


# =============================================================================
# Probe results and outcomes
# =============================================================================


class ProbeStatus(Enum):
    """Result categories a probe can report."""

    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"


@dataclass(frozen=True)
class ProbeResult:
    """Result of a single probe invocation."""

    status: ProbeStatus
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "ProbeResult":
        return cls(status=ProbeStatus.SUCCESS)

    @classmethod
    def retryable(cls, reason: str) -> "ProbeResult":
        return cls(status=ProbeStatus.RETRYABLE_FAILURE, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is ProbeStatus.SUCCESS


Probe = Callable[[], Union[ProbeResult, None]]


class OutcomeStatus(Enum):
    """Terminal states of a retry loop."""

    SUCCESS = "success"
    EXHAUSTED_RETRIES = "exhausted_retries"
    CANCELLED = "cancelled"


@dataclass
class RetryOutcome:
    """Result of a retry loop."""

    status: OutcomeStatus
    attempts: int = 0
    sleeps: int = 0
    total_delay_seconds: float = 0.0
    last_reason: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def raise_for_status(self) -> None:
        """
        Raise if the loop did not end in success.

        Raises:
            RetryExhaustedError: If the attempt budget was consumed
            RetryCancelledError: If the loop was cancelled
        """
        if self.status is OutcomeStatus.EXHAUSTED_RETRIES:
            raise RetryExhaustedError(self.last_reason, attempts=self.attempts)
        if self.status is OutcomeStatus.CANCELLED:
            raise RetryCancelledError(self.last_reason, attempts=self.attempts)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "attempts": self.attempts,
            "sleeps": self.sleeps,
            "total_delay_seconds": round(self.total_delay_seconds, 2),
            "last_reason": self.last_reason,
        }


# =============================================================================
# Configuration
# =============================================================================


BACKOFF_FIXED = "fixed"
BACKOFF_EXPONENTIAL = "exponential"


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS
    delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS
    backoff: str = BACKOFF_FIXED
    exponential_base: float = 2.0
    max_delay_seconds: float = 300.0
    jitter: bool = False
    jitter_factor: float = 0.1

    def calculate_delay(self, attempt: int, base_delay: Optional[float] = None) -> float:
        """
        Calculate delay before the next attempt.

        Args:
            attempt: Number of the attempt that just failed (1-indexed)
            base_delay: Overrides delay_seconds when given

        Returns:
            Delay in seconds
        """
        delay = self.delay_seconds if base_delay is None else base_delay

        if self.backoff == BACKOFF_EXPONENTIAL:
            delay = min(
                delay * (self.exponential_base ** (attempt - 1)),
                self.max_delay_seconds,
            )

        if self.jitter:
            jitter_range = delay * self.jitter_factor
            delay += random.uniform(-jitter_range, jitter_range)

        return max(0, delay)

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> "RetryConfig":
        """Create from a RetrySettings instance."""
        return cls(
            max_attempts=settings.max_attempts,
            delay_seconds=settings.delay_seconds,
            backoff=settings.backoff,
        )

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if self.backoff not in (BACKOFF_FIXED, BACKOFF_EXPONENTIAL):
            errors.append(
                f"backoff must be '{BACKOFF_FIXED}' or '{BACKOFF_EXPONENTIAL}', "
                f"got {self.backoff!r}"
            )
        if self.delay_seconds < 0:
            errors.append(f"delay_seconds must be >= 0, got {self.delay_seconds}")
        if self.exponential_base < 1:
            errors.append(
                f"exponential_base must be >= 1, got {self.exponential_base}"
            )
        if not 0.0 <= self.jitter_factor <= 1.0:
            errors.append(f"jitter_factor must be 0-1, got {self.jitter_factor}")

        return errors


# =============================================================================
# Runner
# =============================================================================


class RetryRunner:
    """
    Invokes a probe until it succeeds or the attempt budget runs out.

    The probe either returns a ProbeResult, returns None (treated as
    success), or raises RetryableError. Any other exception propagates
    immediately and ends the loop. The runner keeps no state between
    calls to run(), so one instance can be shared.

    Example:
        runner = RetryRunner()

        def rule_is_gone() -> ProbeResult:
            if client_lookup_returns_404():
                return ProbeResult.success()
            return ProbeResult.retryable("rule still exists")

        outcome = runner.run(max_attempts=2, delay_seconds=10, probe=rule_is_gone)
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Optional[Callable[[float], Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize retry runner.

        Args:
            config: Retry configuration (budget, delay, backoff policy)
            sleep: Function used to wait between attempts. If None, waits on
                cancel_event when run() gets one, otherwise time.sleep
            clock: Monotonic clock used for timeouts
        """
        self.config = config or RetryConfig()
        self._sleep = sleep
        self._clock = clock

    def run(
        self,
        max_attempts: Optional[int] = None,
        delay_seconds: Optional[float] = None,
        probe: Optional[Probe] = None,
        cancel_event: Optional[threading.Event] = None,
        timeout_seconds: Optional[float] = None,
    ) -> RetryOutcome:
        """
        Run the probe until success, exhaustion, or cancellation.

        Args:
            max_attempts: Attempt budget (config value if None)
            delay_seconds: Base delay between attempts (config value if None)
            probe: Zero-argument check to invoke on every attempt
            cancel_event: Checked before each probe call and each sleep
            timeout_seconds: Overall deadline, checked at the same points

        Returns:
            RetryOutcome describing the terminal state

        Raises:
            Exception: Whatever the probe raises, except RetryableError
        """
        if probe is None:
            raise TypeError("run() requires a probe callable")
        if max_attempts is None:
            max_attempts = self.config.max_attempts

        outcome = RetryOutcome(status=OutcomeStatus.SUCCESS)

        if max_attempts <= 0:
            logger.warning(
                f"max_attempts={max_attempts}, probe not invoked; treating as success"
            )
            return outcome

        deadline = None
        if timeout_seconds is not None:
            deadline = self._clock() + timeout_seconds

        for attempt in range(1, max_attempts + 1):
            if self._cancelled(cancel_event, deadline):
                return self._cancel(outcome)

            outcome.attempts = attempt
            result = self._invoke(probe)

            if result.ok:
                logger.debug(f"Probe succeeded on attempt {attempt}")
                outcome.status = OutcomeStatus.SUCCESS
                return outcome

            outcome.last_reason = result.reason

            if attempt >= max_attempts:
                break

            if self._cancelled(cancel_event, deadline):
                return self._cancel(outcome)

            delay = self.config.calculate_delay(attempt, base_delay=delay_seconds)
            logger.info(
                f"Attempt {attempt}/{max_attempts} not satisfied: {result.reason}. "
                f"Retrying in {delay:.1f}s..."
            )
            outcome.sleeps += 1
            outcome.total_delay_seconds += delay
            self._wait(delay, cancel_event)

        logger.error(
            f"Retries exhausted after {outcome.attempts} attempt(s): "
            f"{outcome.last_reason}"
        )
        outcome.status = OutcomeStatus.EXHAUSTED_RETRIES
        return outcome

    def _wait(self, delay: float, cancel_event: Optional[threading.Event]) -> None:
        if self._sleep is not None:
            self._sleep(delay)
        elif cancel_event is not None:
            # Returns as soon as the event is set; the next check cancels
            cancel_event.wait(delay)
        else:
            time.sleep(delay)

    @staticmethod
    def _invoke(probe: Probe) -> ProbeResult:
        try:
            result = probe()
        except RetryableError as e:
            return ProbeResult.retryable(e.reason)

        if result is None:
            return ProbeResult.success()
        if not isinstance(result, ProbeResult):
            raise TypeError(
                f"Probe must return ProbeResult or None, got {type(result).__name__}"
            )
        return result

    def _cancelled(
        self, cancel_event: Optional[threading.Event], deadline: Optional[float]
    ) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            return True
        return deadline is not None and self._clock() >= deadline

    @staticmethod
    def _cancel(outcome: RetryOutcome) -> RetryOutcome:
        logger.warning(f"Retry loop cancelled after {outcome.attempts} attempt(s)")
        outcome.status = OutcomeStatus.CANCELLED
        return outcome


# Convenience functions for common retry patterns


def retry(
    max_attempts: int,
    delay_seconds: float,
    probe: Probe,
    runner: Optional[RetryRunner] = None,
) -> RetryOutcome:
    """
    Run a probe with a fixed delay and raise if it never succeeds.

    Args:
        max_attempts: Attempt budget
        delay_seconds: Delay between attempts
        probe: Zero-argument check
        runner: Runner to use (creates default if None)

    Returns:
        The successful RetryOutcome

    Raises:
        RetryExhaustedError: If the budget is consumed, with the last reason

    Example:
        retry(2, 10, lambda: ProbeResult.retryable("still exists"))
    """
    if runner is None:
        runner = RetryRunner()
    outcome = runner.run(
        max_attempts=max_attempts, delay_seconds=delay_seconds, probe=probe
    )
    outcome.raise_for_status()
    return outcome
