"""Exceptions raised by the estimator.

Fetch failures are never raised: they are recorded as outcome kinds. Only
misconfiguration and phase misuse surface as exceptions.
"""

from __future__ import annotations


class DerefError(Exception):
    """Base exception for ldderef."""


class ConfigurationError(DerefError, ValueError):
    """Estimator configuration is invalid (validated eagerly)."""

    def __init__(self, option: str, value: object, reason: str):
        self.option = option
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid configuration {option}={value!r}: {reason}")


class SamplingClosedError(DerefError, RuntimeError):
    """A triple was observed after the resolution phase had started."""

    def __init__(self) -> None:
        super().__init__(
            "Sampling phase is closed: estimate() has already resolved the sample"
        )
