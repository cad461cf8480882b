"""Pay-level domains and URI candidacy.

URIs are bucketed by their registrable (pay-level) domain so that the
sample is spread across administrative authorities rather than hosts:
``http://a.b.example.com/x`` and ``https://example.com/y`` both land in
``example.com``. The public suffix list bundled with tldextract is used;
no suffix list is downloaded at runtime.
"""

from __future__ import annotations

import random
from urllib.parse import urlsplit

import tldextract

from .reservoir import ReservoirSampler

# Bundled snapshot only: no network, no disk cache
_EXTRACT = tldextract.TLDExtract(cache_dir=None, suffix_list_urls=())

NO_DOMAIN = ""

_URL_SCHEMES = ("http://", "https://")
_ILLEGAL_CHARS = frozenset(" \t\r\n<>\"{}|\\^`")


# ---------------------------------------------------------------------------
# Candidate test
# ---------------------------------------------------------------------------

def is_possible_url(term: str) -> bool:
    """Cheap syntactic test: could this term be a dereferenceable HTTP URI?

    Accepts absolute ``http``/``https`` URIs (scheme case-insensitive) with a
    non-empty authority and no whitespace or characters that are illegal
    in IRIs. Scheme-relative (``//host/x``), relative, ``urn:``, ``mailto:``
    and other non-HTTP schemes are rejected. No full URI grammar validation.
    """
    if not isinstance(term, str) or len(term) < 8:
        return False
    head = term[:8].lower()
    for scheme in _URL_SCHEMES:
        if head.startswith(scheme):
            rest = term[len(scheme):]
            break
    else:
        return False
    if not rest or rest[0] in "/?#":
        return False
    return not any(ch in _ILLEGAL_CHARS for ch in term)


# ---------------------------------------------------------------------------
# Domain extraction
# ---------------------------------------------------------------------------

def extract_host(uri: str) -> str:
    """Lower-cased host of the URI's authority, or "" if there is none."""
    try:
        return (urlsplit(uri).hostname or "").lower()
    except ValueError:
        return NO_DOMAIN


def extract_pay_level_domain(uri: str) -> str:
    """Registrable domain of a URI, e.g. ``example.co.uk``.

    Hosts with no public suffix (``localhost``, IP addresses, intranet
    names) are their own domain. Returns NO_DOMAIN when the URI has no
    parseable authority.
    """
    host = extract_host(uri)
    if not host:
        return NO_DOMAIN
    result = _EXTRACT(host)
    return result.top_domain_under_public_suffix or host


# ---------------------------------------------------------------------------
# Domain: one pay-level domain and its URI sample
# ---------------------------------------------------------------------------

class Domain:
    """A pay-level domain together with a bounded sample of its URIs."""

    def __init__(self, name: str, max_uris: int, rng: random.Random | None = None):
        self.name = name
        self.uris: ReservoirSampler[str] = ReservoirSampler(max_uris, rng=rng)

    def add_uri(self, uri: str) -> bool:
        return self.uris.observe(uri)

    def sampled_uris(self) -> list[str]:
        return self.uris.items()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Domain):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"Domain({self.name}, {len(self.uris)} URIs)"
