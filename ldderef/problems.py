"""Problem reporting: records URIs that do not follow Linked Data dereferencing.

Only a 303 See Other to parsable RDF is the convention for a resource URI.
Every other outcome is reported, including a plain 200 and redirect chains
that end in 200, even though those still count towards the estimate. The
estimator calls ``report(uri, kind)`` only when problem reporting is
enabled. Any object with that method will do; ProblemCollection keeps the
reports as an RDF graph in the Luzzu quality-problem vocabulary:

    <uri> qpro:exceptionDescription dqmprob:SC4XXClientError .
"""

from __future__ import annotations

import threading
from typing import Protocol

from rdflib import Graph, Namespace, URIRef

from .types import OutcomeKind


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

QPRO = Namespace("http://purl.org/eis/vocab/qpro#")
DQMPROB = Namespace("http://purl.org/eis/vocab/dqm/problems#")

_PROBLEM_TERMS: dict[OutcomeKind, URIRef] = {
    OutcomeKind.OK_200: DQMPROB.SC200OK,
    OutcomeKind.MOVED_PERMANENTLY_301: DQMPROB.SC301MovedPermanently,
    OutcomeKind.FOUND_302: DQMPROB.SC302Found,
    OutcomeKind.TEMPORARY_REDIRECT_307: DQMPROB.SC307TemporaryRedirectory,
    OutcomeKind.OTHER_REDIRECT_3XX: DQMPROB.SC3XXRedirection,
    OutcomeKind.CLIENT_ERROR_4XX: DQMPROB.SC4XXClientError,
    OutcomeKind.SERVER_ERROR_5XX: DQMPROB.SC5XXServerError,
    OutcomeKind.SEE_OTHER_303_UNPARSABLE: DQMPROB.SC303WithoutParsableContent,
    OutcomeKind.TIMEOUT: DQMPROB.TimeoutDereferencing,
    OutcomeKind.UNREACHABLE: DQMPROB.UnreachableResource,
    OutcomeKind.OTHER: DQMPROB.UnclassifiedStatus,
}


def is_problem(kind: OutcomeKind) -> bool:
    """True for every outcome except a 303 to parsable RDF."""
    return kind in _PROBLEM_TERMS


def problem_term(kind: OutcomeKind) -> URIRef:
    return _PROBLEM_TERMS[kind]


# ---------------------------------------------------------------------------
# Sink interface
# ---------------------------------------------------------------------------

class ProblemReporter(Protocol):
    def report(self, uri: str, kind: OutcomeKind) -> None: ...


class ProblemCollection:
    """Problem reports held as an rdflib Graph."""

    def __init__(self) -> None:
        self.graph = Graph()
        self.graph.bind("qpro", QPRO)
        self.graph.bind("dqmprob", DQMPROB)
        self._lock = threading.Lock()

    def report(self, uri: str, kind: OutcomeKind) -> None:
        with self._lock:
            self.graph.add((URIRef(uri), QPRO.exceptionDescription, problem_term(kind)))

    def problems_for(self, uri: str) -> list[URIRef]:
        return sorted(self.graph.objects(URIRef(uri), QPRO.exceptionDescription))

    def as_turtle(self) -> str:
        """Serialize the collected problems as Turtle."""
        return self.graph.serialize(format="turtle")

    def __len__(self) -> int:
        return len(self.graph)

    def __repr__(self) -> str:
        return f"ProblemCollection({len(self)} problems)"
