"""Estimator configuration.

All options are validated when the configuration is built, so a bad
capacity or budget fails before any triple is read.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from .errors import ConfigurationError


DEFAULT_MAX_DOMAINS = 500
DEFAULT_MAX_URIS_PER_DOMAIN = 100000

# camelCase option names accepted by from_mapping()
_ALIASES = {
    "maxDomains": "max_domains",
    "maxUrisPerDomain": "max_uris_per_domain",
    "fetchConcurrency": "fetch_concurrency",
    "fetchTimeoutBudget": "fetch_timeout_budget",
    "problemReportingEnabled": "problem_reporting_enabled",
    "requestTimeout": "request_timeout",
    "maxRedirects": "max_redirects",
    "retryAttempts": "retry_attempts",
    "maxContentBytes": "max_content_bytes",
    "userAgent": "user_agent",
}


@dataclass(frozen=True)
class EstimatorConfig:
    """Options for sampling and resolution.

    ``max_domains`` bounds the pay-level domains kept ("plds-k");
    ``max_uris_per_domain`` bounds the URIs kept per domain ("k");
    ``fetch_timeout_budget`` (seconds) bounds the whole resolution phase.
    """
    max_domains: int = DEFAULT_MAX_DOMAINS
    max_uris_per_domain: int = DEFAULT_MAX_URIS_PER_DOMAIN
    fetch_concurrency: int = 8
    fetch_timeout_budget: float = 300.0
    problem_reporting_enabled: bool = False
    request_timeout: float = 10.0
    max_redirects: int = 5
    retry_attempts: int = 2
    max_content_bytes: int = 2 * 1024 * 1024
    user_agent: str = "ldderef/0.1 (+linked-data dereferenceability estimator)"
    seed: int | None = None

    def __post_init__(self) -> None:
        for name in ("max_domains", "max_uris_per_domain", "fetch_concurrency",
                     "retry_attempts", "max_content_bytes"):
            _require_positive_int(name, getattr(self, name))
        _require_int("max_redirects", self.max_redirects)
        if self.max_redirects < 0:
            raise ConfigurationError("max_redirects", self.max_redirects, "must be >= 0")
        for name in ("fetch_timeout_budget", "request_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigurationError(name, value, "must be a positive number of seconds")
        if not isinstance(self.problem_reporting_enabled, bool):
            raise ConfigurationError(
                "problem_reporting_enabled", self.problem_reporting_enabled, "must be a bool"
            )
        if self.seed is not None:
            _require_int("seed", self.seed)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> EstimatorConfig:
        """Build a config from snake_case or camelCase option names."""
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(key, value, "unknown option")
            kwargs[name] = value
        return cls(**kwargs)

    def estimation_parameters(self) -> dict[str, int]:
        return {"k": self.max_uris_per_domain, "plds-k": self.max_domains}


def _require_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(name, value, "must be an integer")


def _require_positive_int(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(name, value, "must be a positive integer")
