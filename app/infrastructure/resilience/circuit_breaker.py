"""Circuit breaker for outbound notification deliveries.

States:
- CLOSED: calls pass through; consecutive transient failures are counted
- OPEN: calls fail fast with a transient CIRCUIT_OPEN result
- HALF_OPEN: after the cool-down one probe call is let through; success
  closes the circuit, failure re-opens it

Only transient failures (timeouts, 5xx, connection errors) trip the
breaker. A permanent error means the request itself was bad, not that the
endpoint is down.
"""

import threading
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, Optional

from infrastructure.logging import get_module_logger
from infrastructure.operations import OperationResult, OperationStatus

logger = get_module_logger()


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Guard a remote endpoint that returns OperationResult.

    Args:
        name: Circuit name (usually ``<channel_type>:<channel_id>``)
        failure_threshold: Consecutive transient failures before opening
        timeout_seconds: Cool-down before a probe call is allowed
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        timeout_seconds: int = 60,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.timeout_seconds = timeout_seconds

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[datetime] = None
        self._probe_in_flight = False
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        with self._lock:
            return self._state

    def call(self, func: Callable[..., OperationResult], *args, **kwargs) -> OperationResult:
        """Run ``func`` unless the circuit is open."""
        with self._lock:
            if self._state == CircuitState.OPEN:
                if self._cooldown_elapsed():
                    logger.info("circuit_breaker_half_open", name=self.name)
                    self._state = CircuitState.HALF_OPEN
                else:
                    return self._reject()
            if self._state == CircuitState.HALF_OPEN:
                if self._probe_in_flight:
                    return self._reject()
                self._probe_in_flight = True

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            logger.exception("circuit_breaker_call_raised", name=self.name, error=str(e))
            result = OperationResult.transient_error(
                f"Unexpected error: {e}", error_code="UNEXPECTED_ERROR"
            )

        with self._lock:
            self._probe_in_flight = False
            if result.status == OperationStatus.TRANSIENT_ERROR:
                self._record_failure(result.message)
            else:
                self._record_success()
        return result

    def _reject(self) -> OperationResult:
        remaining = self.timeout_seconds
        if self._last_failure_time is not None:
            elapsed = (datetime.now(timezone.utc) - self._last_failure_time).total_seconds()
            remaining = max(int(self.timeout_seconds - elapsed), 0)
        logger.warning(
            "circuit_breaker_open",
            name=self.name,
            failure_count=self._failure_count,
            retry_in_seconds=remaining,
        )
        return OperationResult.transient_error(
            f"Circuit '{self.name}' is open, retry in {remaining} seconds",
            error_code="CIRCUIT_OPEN",
            retry_after=remaining,
        )

    def _record_success(self) -> None:
        if self._state != CircuitState.CLOSED:
            logger.info("circuit_breaker_closed", name=self.name)
        self._state = CircuitState.CLOSED
        self._failure_count = 0

    def _record_failure(self, error: str) -> None:
        self._failure_count += 1
        self._last_failure_time = datetime.now(timezone.utc)

        if self._state == CircuitState.HALF_OPEN:
            logger.warning("circuit_breaker_recovery_failed", name=self.name, error=error)
            self._state = CircuitState.OPEN
        elif self._failure_count >= self.failure_threshold:
            logger.error(
                "circuit_breaker_opened",
                name=self.name,
                failure_count=self._failure_count,
                timeout_seconds=self.timeout_seconds,
            )
            self._state = CircuitState.OPEN
        else:
            logger.warning(
                "circuit_breaker_failure",
                name=self.name,
                failure_count=self._failure_count,
                threshold=self.failure_threshold,
            )

    def _cooldown_elapsed(self) -> bool:
        if self._last_failure_time is None:
            return True
        elapsed = datetime.now(timezone.utc) - self._last_failure_time
        return elapsed >= timedelta(seconds=self.timeout_seconds)

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "name": self.name,
                "state": self._state.value,
                "failure_count": self._failure_count,
                "last_failure_time": (
                    self._last_failure_time.isoformat()
                    if self._last_failure_time
                    else None
                ),
            }

    def reset(self) -> None:
        with self._lock:
            self._record_success()


# Process-wide registry, one breaker per delivery target
_registry: Dict[str, CircuitBreaker] = {}
_registry_lock = threading.Lock()


def get_circuit_breaker(name: str, **kwargs) -> CircuitBreaker:
    """Return the breaker registered under ``name``, creating it on first use."""
    with _registry_lock:
        breaker = _registry.get(name)
        if breaker is None:
            breaker = CircuitBreaker(name, **kwargs)
            _registry[name] = breaker
        return breaker


def get_all_circuit_breaker_stats() -> dict:
    return {name: cb.get_stats() for name, cb in _registry.items()}


def reset_circuit_breakers() -> None:
    """Drop every registered breaker."""
    with _registry_lock:
        _registry.clear()
