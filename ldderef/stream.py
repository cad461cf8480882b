"""Triple stream adapters.

``observe_ntriples`` pushes an N-Triples document through rdflib's
line-based parser straight into an estimator, so a dump of any size is
read in one forward pass without building a Graph. ``observe_graph`` feeds
a Graph that is already in memory.
"""

from __future__ import annotations

from typing import IO, Union

from rdflib import Graph
from rdflib.plugins.parsers.ntriples import W3CNTriplesParser

from .estimator import DereferenceabilityEstimator
from .types import Triple


class _EstimatorSink:
    """rdflib N-Triples sink forwarding each statement to an estimator."""

    def __init__(self, estimator: DereferenceabilityEstimator):
        self.estimator = estimator
        self.length = 0

    def triple(self, s, p, o) -> None:
        self.length += 1
        self.estimator.observe(Triple(s, p, o))


def observe_ntriples(
    estimator: DereferenceabilityEstimator,
    source: Union[str, bytes, IO],
) -> int:
    """Stream N-Triples from a string or file object; returns statements read."""
    sink = _EstimatorSink(estimator)
    parser = W3CNTriplesParser(sink=sink)
    if isinstance(source, (str, bytes)):
        parser.parsestring(source)
    else:
        parser.parse(source)
    return sink.length


def observe_graph(estimator: DereferenceabilityEstimator, graph: Graph) -> int:
    """Feed every triple of an rdflib Graph; returns statements read."""
    count = 0
    for s, p, o in graph:
        estimator.observe(Triple(s, p, o))
        count += 1
    return count
