"""Estimated dereferenceability of a triple stream, sampled by pay-level domain.

Two phases, never interleaved:

  SAMPLING (observe):
    Single pass over the stream. Every subject and object that looks like
    an HTTP URI is bucketed by pay-level domain. The outer reservoir keeps
    at most ``max_domains`` Domains; each Domain keeps a reservoir of at
    most ``max_uris_per_domain`` URIs. A domain already held is looked up
    and reused, so one domain never splits across two entries. Memory is
    bounded by max_domains * max_uris_per_domain whatever the stream size.
    rdf:type statements are skipped.

  RESOLUTION (estimate):
    Runs once, on the first call. The sampled URIs are flattened into one
    set, handed to the Fetcher's worker pool, and drained by blocking on
    the cache for each URI in turn until its outcome arrives or the global
    timeout budget runs out. Outcomes are classified and tallied; the
    result is memoized.

The estimate is the share of sampled URIs with a valid dereference. An
empty sample gives ratio 0.0 with ``no_data`` set.
"""

from __future__ import annotations

import logging
import random
import time
from collections import Counter
from typing import Any, Iterable

import httpx
from rdflib import BNode, Literal

from .cache import DereferenceCache
from .classifier import classify, has_valid_dereferenceability
from .config import EstimatorConfig
from .domains import Domain, extract_pay_level_domain, is_possible_url
from .errors import SamplingClosedError
from .fetcher import Fetcher
from .problems import ProblemCollection, ProblemReporter, is_problem
from .reservoir import ReservoirSampler
from .types import RDF_TYPE, DereferenceabilityEstimate, FetchOutcome, Triple

logger = logging.getLogger(__name__)


class DereferenceabilityEstimator:
    """Reservoir-sampled estimate of how many URIs in a dataset dereference.

    ``cache`` may be shared between estimators so that a URI is fetched at
    most once across all of them. ``fetcher`` may be supplied to control
    the HTTP client; otherwise one is built from ``config`` (over
    ``transport``, if given) for the resolution phase and shut down
    afterwards.
    """

    is_estimate = True

    def __init__(
        self,
        config: EstimatorConfig | None = None,
        cache: DereferenceCache | None = None,
        fetcher: Fetcher | None = None,
        problems: ProblemReporter | None = None,
        rng: random.Random | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.config = config if config is not None else EstimatorConfig()
        self._rng = rng if rng is not None else random.Random(self.config.seed)

        if cache is None:
            cache = fetcher.cache if fetcher is not None else DereferenceCache()
        self.cache = cache
        self._fetcher = fetcher
        self._transport = transport

        if problems is None and self.config.problem_reporting_enabled:
            problems = ProblemCollection()
        self.problems = problems

        self._domains: ReservoirSampler[Domain] = ReservoirSampler(
            self.config.max_domains, key=lambda d: d.name, rng=self._rng
        )
        self.total_triples = 0
        self.total_resources = 0
        self._estimate: DereferenceabilityEstimate | None = None

    # -----------------------------------------------------------------------
    # Sampling phase
    # -----------------------------------------------------------------------

    def observe(self, triple: Triple | tuple[Any, Any, Any]) -> None:
        """Feed one (subject, predicate, object) statement into the sample."""
        if self._estimate is not None:
            raise SamplingClosedError()

        subject, predicate, obj = triple
        if str(predicate) == RDF_TYPE:
            return

        self.total_triples += 1
        for term in (subject, obj):
            uri = _candidate_uri(term)
            if uri is not None and self._add_uri(uri):
                self.total_resources += 1

    def observe_all(self, triples: Iterable[Triple | tuple[Any, Any, Any]]) -> None:
        for triple in triples:
            self.observe(triple)

    def _add_uri(self, uri: str) -> bool:
        name = extract_pay_level_domain(uri)
        if not name:
            return False

        domain = self._domains.find(name)
        if domain is None:
            logger.debug("New pay-level domain", extra={"domain": name})
            domain = Domain(name, self.config.max_uris_per_domain, rng=self._rng)
            self._domains.observe(domain)
        domain.add_uri(uri)
        return True

    def find_domain(self, name: str) -> Domain | None:
        return self._domains.find(name)

    def domains(self) -> list[Domain]:
        return self._domains.items()

    def sampled_uris(self) -> list[str]:
        """Distinct URIs across all sampled domains, in sample order."""
        uris: dict[str, None] = {}
        for domain in self._domains.items():
            for uri in domain.sampled_uris():
                uris.setdefault(uri, None)
        return list(uris)

    # -----------------------------------------------------------------------
    # Resolution phase
    # -----------------------------------------------------------------------

    def estimate(self) -> DereferenceabilityEstimate:
        """Resolve the sample (first call only) and return the estimate."""
        if self._estimate is not None:
            return self._estimate

        uris = self.sampled_uris()
        logger.info(
            "Sampling finished",
            extra={
                "triples": self.total_triples,
                "resources": self.total_resources,
                "domains": len(self._domains),
                "sampled_uris": len(uris),
            },
        )

        if not uris:
            self._estimate = self._result(0, Counter(), no_data=True)
            return self._estimate

        fetcher = self._fetcher
        owns_fetcher = fetcher is None
        if fetcher is None:
            fetcher = Fetcher.from_config(self.config, self.cache, transport=self._transport)

        try:
            fetcher.resolve(uris)
            resolved, tally = self._drain(uris)
        finally:
            if owns_fetcher:
                fetcher.close(wait=False)

        self._estimate = self._result(resolved, tally, no_data=False, total=len(uris))
        logger.info(
            "Resolution finished",
            extra={
                "sampled_uris": len(uris),
                "dereferenceable": resolved,
                "ratio": self._estimate.ratio,
            },
        )
        return self._estimate

    def _drain(self, uris: list[str]) -> tuple[int, Counter]:
        deadline = time.monotonic() + self.config.fetch_timeout_budget
        report = self.config.problem_reporting_enabled and self.problems is not None
        tally: Counter = Counter()
        resolved = 0
        expired = 0

        for uri in uris:
            outcome = self.cache.wait_for(uri, timeout=max(0.0, deadline - time.monotonic()))
            if outcome is None:
                outcome = FetchOutcome.timeout(uri, "resolution budget exhausted")
                expired += 1

            kind = classify(outcome)
            tally[kind] += 1
            if has_valid_dereferenceability(outcome):
                resolved += 1
            if report and is_problem(kind):
                self.problems.report(uri, kind)
            logger.debug(
                "Classified outcome",
                extra={"uri": uri, "statuses": outcome.statuses, "kind": kind.value},
            )

        if expired:
            logger.warning(
                "Resolution budget exhausted; unresolved URIs counted as timeouts",
                extra={"expired": expired, "budget": self.config.fetch_timeout_budget},
            )
        return resolved, tally

    def _result(
        self,
        resolved: int,
        tally: Counter,
        no_data: bool,
        total: int = 0,
    ) -> DereferenceabilityEstimate:
        return DereferenceabilityEstimate(
            ratio=resolved / total if total else 0.0,
            total_sampled=total,
            total_resolved=resolved,
            outcome_breakdown={kind: count for kind, count in tally.items() if count},
            no_data=no_data,
            total_triples=self.total_triples,
            total_resources=self.total_resources,
            domains_sampled=len(self._domains),
        )

    def metric_value(self) -> float:
        return self.estimate().ratio

    def estimation_parameters(self) -> dict[str, int]:
        return self.config.estimation_parameters()

    def __repr__(self) -> str:
        state = "resolved" if self._estimate is not None else "sampling"
        return (
            f"DereferenceabilityEstimator({state}, "
            f"{len(self._domains)} domains, {self.total_resources} URIs seen)"
        )


def _candidate_uri(term: Any) -> str | None:
    """String form of a term that may be dereferenced, else None."""
    if isinstance(term, (Literal, BNode)):
        return None
    text = str(term)
    return text if is_possible_url(text) else None
