"""Resilience patterns for outbound calls."""

from infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
    get_all_circuit_breaker_stats,
    get_circuit_breaker,
    reset_circuit_breakers,
)

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "get_circuit_breaker",
    "get_all_circuit_breaker_stats",
    "reset_circuit_breakers",
]
