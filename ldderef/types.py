"""Core types shared by the sampling and resolution phases.

A triple is three opaque terms. A fetch produces an immutable FetchOutcome
recording every hop of the redirect chain; the classifier maps an outcome
to one OutcomeKind; the estimator folds the kinds into a
DereferenceabilityEstimate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple


RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


# ---------------------------------------------------------------------------
# Triple: one statement from the stream
# ---------------------------------------------------------------------------

class Triple(NamedTuple):
    """A (subject, predicate, object) statement.

    Terms may be plain strings or rdflib terms; only their string form and,
    for rdflib terms, their node kind are inspected.
    """
    subject: Any
    predicate: Any
    object: Any


# ---------------------------------------------------------------------------
# Hop: one response in a redirect chain
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Hop:
    """A single HTTP response: status code and Location header, if any."""
    status: int
    location: str | None = None

    @property
    def is_redirect(self) -> bool:
        return self.status in REDIRECT_STATUSES

    def __repr__(self) -> str:
        target = f" -> {self.location}" if self.location else ""
        return f"Hop({self.status}{target})"


# ---------------------------------------------------------------------------
# FetchOutcome: immutable result of resolving one URI
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FetchOutcome:
    """What happened when a URI was dereferenced.

    ``final_status`` is None when no response was received at all (timeout or
    unreachable host). ``fragment`` is set for hash URIs, which are resolved
    against their fragment-stripped document.
    """
    uri: str
    status_sequence: tuple[Hop, ...] = ()
    final_status: int | None = None
    content_parsable: bool = False
    timed_out: bool = False
    fragment: str | None = None
    redirect_limit_exceeded: bool = False
    content_type: str | None = None
    error: str = ""

    @property
    def statuses(self) -> tuple[int, ...]:
        return tuple(hop.status for hop in self.status_sequence)

    @staticmethod
    def timeout(uri: str, error: str = "timed out") -> FetchOutcome:
        return FetchOutcome(uri=uri, timed_out=True, error=error)

    @staticmethod
    def unreachable(uri: str, error: str) -> FetchOutcome:
        return FetchOutcome(uri=uri, error=error)

    def __repr__(self) -> str:
        chain = " -> ".join(str(s) for s in self.statuses) or "no response"
        return f"FetchOutcome({self.uri}: {chain})"


# ---------------------------------------------------------------------------
# OutcomeKind: closed set of classification results
# ---------------------------------------------------------------------------

class OutcomeKind(Enum):
    """Classification of a fetch outcome.

    Only OK200, redirect chains ending in 200, and a 303 to parsable RDF
    count as valid dereferences.
    """
    OK_200 = "OK200"
    MOVED_PERMANENTLY_301 = "MovedPermanently301"
    FOUND_302 = "Found302"
    TEMPORARY_REDIRECT_307 = "TemporaryRedirect307"
    OTHER_REDIRECT_3XX = "OtherRedirect3xx"
    CLIENT_ERROR_4XX = "ClientError4xx"
    SERVER_ERROR_5XX = "ServerError5xx"
    SEE_OTHER_303_PARSABLE = "SeeOther303WithParsableContent"
    SEE_OTHER_303_UNPARSABLE = "SeeOther303WithoutParsableContent"
    TIMEOUT = "Timeout"
    UNREACHABLE = "Unreachable"
    OTHER = "Other"

    def __repr__(self) -> str:
        return self.value


# ---------------------------------------------------------------------------
# DereferenceabilityEstimate: the final, memoized result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DereferenceabilityEstimate:
    """Ratio of dereferenceable URIs in the sample, plus the outcome tally.

    ``no_data`` is set when nothing was sampled; the ratio is then 0.0.
    """
    ratio: float
    total_sampled: int
    total_resolved: int
    outcome_breakdown: Mapping[OutcomeKind, int] = field(default_factory=dict)
    no_data: bool = False
    total_triples: int = 0
    total_resources: int = 0
    domains_sampled: int = 0

    def __post_init__(self) -> None:
        # The estimate is memoized and shared between callers: read-only view
        object.__setattr__(
            self, "outcome_breakdown", MappingProxyType(dict(self.outcome_breakdown))
        )

    def summary(self) -> str:
        lines = []
        if self.no_data:
            lines.append("Estimated dereferenceability: no data (empty sample)")
        else:
            lines.append(f"Estimated dereferenceability: {self.ratio:.4f}")
        lines.append("-" * 50)
        lines.append(f"  Triples assessed:        {self.total_triples}")
        lines.append(f"  URI positions seen:      {self.total_resources}")
        lines.append(f"  Pay-level domains kept:  {self.domains_sampled}")
        lines.append(f"  URIs sampled:            {self.total_sampled}")
        lines.append(f"  Valid dereferences:      {self.total_resolved}")
        if self.outcome_breakdown:
            lines.append("  Outcomes:")
            for kind, count in sorted(
                self.outcome_breakdown.items(), key=lambda kv: (-kv[1], kv[0].value)
            ):
                lines.append(f"    - {kind.value}: {count}")
        return "\n".join(lines)
