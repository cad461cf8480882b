"""Estimated dereferenceability of Linked Data, by reservoir sampling.

Given a stream of triples too large to hold in memory, estimate what share
of the HTTP URIs in it actually dereference, following Linked Data
conventions (redirect chains, content negotiation, 303 See Other, hash
URIs). The package is organised leaves first:

- domains:    pay-level domain extraction and the cheap URI candidate test
- reservoir:  bounded uniform sampler with keyed lookup
- cache:      thread-safe URI -> FetchOutcome store
- fetcher:    bounded worker pool resolving URIs over HTTP (httpx)
- classifier: FetchOutcome -> OutcomeKind, and the validity predicate
- estimator:  two-level sampling followed by one memoized resolution pass

Parsability of negotiated documents and problem reports use rdflib.
"""

from .cache import DereferenceCache
from .classifier import classify, has_valid_dereferenceability
from .config import EstimatorConfig
from .domains import Domain, extract_pay_level_domain, is_possible_url
from .errors import ConfigurationError, DerefError, SamplingClosedError
from .estimator import DereferenceabilityEstimator
from .fetcher import Fetcher, fetch_outcome
from .problems import ProblemCollection, ProblemReporter
from .reservoir import ReservoirSampler
from .stream import observe_graph, observe_ntriples
from .types import (
    DereferenceabilityEstimate,
    FetchOutcome,
    Hop,
    OutcomeKind,
    Triple,
)

__all__ = [
    "ConfigurationError",
    "DerefError",
    "DereferenceCache",
    "DereferenceabilityEstimate",
    "DereferenceabilityEstimator",
    "Domain",
    "EstimatorConfig",
    "FetchOutcome",
    "Fetcher",
    "Hop",
    "OutcomeKind",
    "ProblemCollection",
    "ProblemReporter",
    "ReservoirSampler",
    "SamplingClosedError",
    "Triple",
    "classify",
    "extract_pay_level_domain",
    "fetch_outcome",
    "has_valid_dereferenceability",
    "is_possible_url",
    "observe_graph",
    "observe_ntriples",
]
