"""A small simulated Linked Data cloud.

Ten resource URIs spread over seven pay-level domains, answering with the
usual range of behaviours: plain 200s, hash URIs, 301/307 chains, a 303 to
Turtle (valid), a 303 to an HTML page (invalid), a 404, a 500 and a host
that cannot be reached. Six of the ten dereference, so an estimator that
keeps every URI should report 0.6.
"""

from __future__ import annotations

import httpx


TURTLE = {"Content-Type": "text/turtle; charset=utf-8"}
HTML = {"Content-Type": "text/html"}

# url -> (status, headers, body)
RESPONSES: dict[str, tuple[int, dict[str, str], bytes]] = {
    "http://dbpedia.example.org/resource/Malta": (
        303, {"Location": "/data/Malta.ttl"}, b""),
    "http://dbpedia.example.org/data/Malta.ttl": (
        200, TURTLE,
        b'<http://dbpedia.example.org/resource/Malta> '
        b'<http://www.w3.org/2000/01/rdf-schema#label> "Malta"@en .\n'),
    "http://dbpedia.example.org/resource/Valletta": (
        303, {"Location": "http://dbpedia.example.org/page/Valletta"}, b""),
    "http://dbpedia.example.org/page/Valletta": (
        200, HTML, b"<html><body>Valletta</body></html>"),
    "http://vocab.example.net/ns": (
        200, TURTLE,
        b'<http://vocab.example.net/ns#Place> '
        b'<http://www.w3.org/2000/01/rdf-schema#label> "Place" .\n'),
    "http://people.example.com/alice": (200, TURTLE, b""),
    "http://people.example.com/bob": (
        301, {"Location": "https://people.example.com/bob"}, b""),
    "https://people.example.com/bob": (200, TURTLE, b""),
    "http://gone.example.edu/item/1": (404, HTML, b"not found"),
    "http://broken.example.io/x": (500, HTML, b"internal error"),
    "http://mirror.example.info/z": (
        307, {"Location": "http://mirror.example.info/z2"}, b""),
    "http://mirror.example.info/z2": (200, TURTLE, b""),
}

UNREACHABLE_HOSTS = frozenset({"offline.example.xyz"})

RDF_TYPE = "<http://www.w3.org/1999/02/22-rdf-syntax-ns#type>"
LABEL = "<http://www.w3.org/2000/01/rdf-schema#label>"
SEE_ALSO = "<http://www.w3.org/2000/01/rdf-schema#seeAlso>"

DATASET = f"""\
<http://dbpedia.example.org/resource/Malta> {RDF_TYPE} <http://vocab.example.net/ns#Place> .
<http://dbpedia.example.org/resource/Malta> <http://vocab.example.net/ns#capital> <http://dbpedia.example.org/resource/Valletta> .
<http://dbpedia.example.org/resource/Malta> {LABEL} "Malta"@en .
<http://dbpedia.example.org/resource/Valletta> {SEE_ALSO} <http://mirror.example.info/z> .
<http://people.example.com/alice> <http://xmlns.com/foaf/0.1/knows> <http://people.example.com/bob> .
<http://people.example.com/alice> {SEE_ALSO} <http://gone.example.edu/item/1> .
<http://people.example.com/bob> {SEE_ALSO} <http://broken.example.io/x> .
<http://people.example.com/bob> {SEE_ALSO} <http://offline.example.xyz/y> .
<http://vocab.example.net/ns#Place> {LABEL} "Place" .
<http://vocab.example.net/ns#capital> {SEE_ALSO} <http://vocab.example.net/ns#Place> .
_:note {LABEL} "http://not.a.candidate.example.org/literal" .
"""

EXPECTED_RATIO = 0.6


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.host in UNREACHABLE_HOSTS:
        raise httpx.ConnectError("name or service not known", request=request)
    status, headers, body = RESPONSES.get(str(request.url), (404, HTML, b""))
    return httpx.Response(status, headers=headers, content=body)


def build_client() -> httpx.Client:
    """An httpx client whose only network is the simulated cloud."""
    return httpx.Client(transport=httpx.MockTransport(handler))
