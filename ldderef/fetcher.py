"""Concurrent dereferencing of sampled URIs.

Each URI is requested with an RDF-preferring Accept header and redirects
are followed by hand, one hop at a time, so that every status in the chain
is recorded. HTTPX auto-redirect stays off for that reason. When the chain
passes through a 303 See Other, the document it ends at is parsed with
rdflib to decide whether the redirect was a valid dereference.

Hash URIs are resolved against their fragment-stripped document, so
``http://example.org/doc#a`` and ``http://example.org/doc#b`` cost a single
request; the outcome is stored under each original URI with its fragment.

Nothing in here raises on a failed fetch. Timeouts, unreachable hosts and
malformed responses become FetchOutcomes like any other answer.

Example:
    >>> cache = DereferenceCache()
    >>> with Fetcher(cache, concurrency=4) as fetcher:
    ...     fetcher.resolve(["http://dbpedia.org/resource/Malta"])
    ...     outcome = cache.wait_for("http://dbpedia.org/resource/Malta", timeout=30)
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Iterable
from urllib.parse import urldefrag

import httpx
from rdflib import Graph
from rdflib.util import guess_format
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_random_exponential,
)

from .cache import DereferenceCache
from .config import EstimatorConfig
from .types import FetchOutcome, Hop

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Content negotiation
# ---------------------------------------------------------------------------

RDF_MEDIA_TYPES: dict[str, str] = {
    "text/turtle": "turtle",
    "application/x-turtle": "turtle",
    "application/rdf+xml": "xml",
    "application/n-triples": "nt",
    "application/ld+json": "json-ld",
    "text/n3": "n3",
    "application/trig": "trig",
    "application/n-quads": "nquads",
}

ACCEPT_HEADER = (
    "text/turtle, application/rdf+xml;q=0.9, application/n-triples;q=0.9, "
    "application/ld+json;q=0.8, text/n3;q=0.7, application/trig;q=0.6, "
    "application/n-quads;q=0.6, */*;q=0.1"
)

# Transient answers worth another attempt
RETRYABLE_STATUSES = frozenset({429, 502, 503, 504})

# Final status recorded for a response that could not be read as HTTP
MALFORMED_RESPONSE_STATUS = 500


def split_fragment(uri: str) -> tuple[str, str | None]:
    """Split ``uri`` into its document URI and fragment (None if no ``#``)."""
    if "#" not in uri:
        return uri, None
    base, fragment = urldefrag(uri)
    return base, fragment


def rdf_format_for(content_type: str | None, url: str = "") -> str | None:
    """rdflib parser name for a Content-Type, falling back to the URL suffix."""
    if content_type:
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type in RDF_MEDIA_TYPES:
            return RDF_MEDIA_TYPES[media_type]
    if url:
        return guess_format(httpx.URL(url).path)
    return None


def is_parsable_rdf(body: bytes, content_type: str | None, url: str) -> bool:
    """True if ``body`` parses as RDF and yields at least one triple."""
    fmt = rdf_format_for(content_type, url)
    if fmt is None:
        return False
    graph = Graph()
    try:
        graph.parse(data=body, format=fmt, publicID=url)
    except Exception as exc:
        logger.debug(
            "Negotiated document is not parsable RDF",
            extra={"url": url, "format": fmt, "error": str(exc)},
        )
        return False
    return len(graph) > 0


# ---------------------------------------------------------------------------
# Single hop
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _HopResponse:
    status: int
    location: str | None
    content_type: str | None
    body: bytes | None


def _read_capped(response: httpx.Response, max_bytes: int) -> bytes | None:
    chunks: list[bytes] = []
    size = 0
    for chunk in response.iter_bytes():
        size += len(chunk)
        if size > max_bytes:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def _get_hop(
    client: httpx.Client,
    url: str,
    read_body: bool,
    max_bytes: int,
) -> _HopResponse:
    with client.stream("GET", url, headers={"Accept": ACCEPT_HEADER}) as response:
        location = response.headers.get("location")
        target = str(response.url.join(location)) if location else None
        body = None
        if read_body and response.status_code == 200:
            body = _read_capped(response, max_bytes)
        return _HopResponse(
            status=response.status_code,
            location=target,
            content_type=response.headers.get("content-type"),
            body=body,
        )


def _retrying(attempts: int) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_random_exponential(multiplier=0.5, max=8),
        retry=(
            retry_if_exception_type(
                (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout)
            )
            | retry_if_result(lambda hop: hop.status in RETRYABLE_STATUSES)
        ),
        # Out of attempts: hand back the last answer, or re-raise the last error
        retry_error_callback=lambda state: state.outcome.result(),
        before_sleep=before_sleep_log(logger, logging.DEBUG),
    )


# ---------------------------------------------------------------------------
# One URI, all hops
# ---------------------------------------------------------------------------

def fetch_outcome(
    client: httpx.Client,
    url: str,
    max_redirects: int = 5,
    retry_attempts: int = 2,
    max_content_bytes: int = 2 * 1024 * 1024,
) -> FetchOutcome:
    """Dereference ``url``, following up to ``max_redirects`` redirects.

    Never raises for network or protocol failures; they are folded into
    the returned outcome.
    """
    hops: list[Hop] = []
    current = url
    seen_303 = False

    try:
        for _ in range(max_redirects + 1):
            answer = _retrying(retry_attempts)(
                _get_hop, client, current, seen_303, max_content_bytes
            )
            hop = Hop(answer.status, answer.location)
            hops.append(hop)
            logger.debug(
                "Dereference hop",
                extra={"url": current, "status": answer.status, "hop": len(hops)},
            )

            if not hop.is_redirect or not hop.location:
                parsable = (
                    seen_303
                    and answer.status == 200
                    and answer.body is not None
                    and is_parsable_rdf(answer.body, answer.content_type, current)
                )
                return FetchOutcome(
                    uri=url,
                    status_sequence=tuple(hops),
                    final_status=answer.status,
                    content_parsable=parsable,
                    content_type=answer.content_type,
                )

            seen_303 = seen_303 or answer.status == 303
            current = answer.location

    except httpx.TimeoutException as exc:
        return replace(FetchOutcome.timeout(url, str(exc) or "timed out"),
                       status_sequence=tuple(hops))
    except (httpx.RemoteProtocolError, httpx.DecodingError) as exc:
        return FetchOutcome(
            uri=url,
            status_sequence=tuple(hops),
            final_status=MALFORMED_RESPONSE_STATUS,
            error=f"malformed response: {exc}",
        )
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        return replace(FetchOutcome.unreachable(url, str(exc) or type(exc).__name__),
                       status_sequence=tuple(hops))

    logger.debug("Redirect budget exhausted", extra={"url": url, "hops": len(hops)})
    return FetchOutcome(
        uri=url,
        status_sequence=tuple(hops),
        final_status=hops[-1].status,
        redirect_limit_exceeded=True,
    )


# ---------------------------------------------------------------------------
# Worker pool
# ---------------------------------------------------------------------------

class Fetcher:
    """Bounded worker pool writing FetchOutcomes into a DereferenceCache.

    ``resolve()`` returns as soon as work is submitted. Pass ``client`` to
    supply a preconfigured ``httpx.Client``; it must not follow redirects
    itself and stays open when the pool closes. Otherwise the pool builds
    and owns its client, optionally over ``transport`` (for example an
    ``httpx.MockTransport``), and closes it once no document is in flight.
    """

    def __init__(
        self,
        cache: DereferenceCache,
        client: httpx.Client | None = None,
        concurrency: int = 8,
        max_redirects: int = 5,
        request_timeout: float = 10.0,
        retry_attempts: int = 2,
        max_content_bytes: int = 2 * 1024 * 1024,
        user_agent: str = "ldderef",
        transport: httpx.BaseTransport | None = None,
    ):
        self.cache = cache
        self.max_redirects = max_redirects
        self.retry_attempts = retry_attempts
        self.max_content_bytes = max_content_bytes
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(
            follow_redirects=False,
            timeout=httpx.Timeout(request_timeout),
            headers={"User-Agent": user_agent},
            transport=transport,
        )
        self._executor = ThreadPoolExecutor(
            max_workers=concurrency, thread_name_prefix="ldderef-fetch"
        )
        self._pending: dict[Future, list[str]] = {}
        self._lock = threading.Lock()
        self._closing = False
        self._client_closed = False

    @classmethod
    def from_config(
        cls,
        config: EstimatorConfig,
        cache: DereferenceCache,
        client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> Fetcher:
        return cls(
            cache,
            client=client,
            concurrency=config.fetch_concurrency,
            max_redirects=config.max_redirects,
            request_timeout=config.request_timeout,
            retry_attempts=config.retry_attempts,
            max_content_bytes=config.max_content_bytes,
            user_agent=config.user_agent,
            transport=transport,
        )

    def resolve(self, uris: Iterable[str]) -> list[Future]:
        """Submit URIs for dereferencing; one task per distinct document.

        URIs already cached, or already being fetched through this cache,
        are skipped.
        """
        documents: dict[str, list[str]] = {}
        for uri in uris:
            if not self.cache.reserve(uri):
                continue
            base, _ = split_fragment(uri)
            documents.setdefault(base, []).append(uri)

        futures = []
        for base, members in documents.items():
            future = self._executor.submit(self._resolve_document, base, members)
            with self._lock:
                self._pending[future] = members
            future.add_done_callback(self._forget)
            futures.append(future)

        logger.info(
            "Submitted URIs for dereferencing",
            extra={"uris": sum(len(m) for m in documents.values()),
                   "documents": len(documents)},
        )
        return futures

    def _resolve_document(self, base: str, members: list[str]) -> None:
        try:
            outcome = fetch_outcome(
                self._client,
                base,
                max_redirects=self.max_redirects,
                retry_attempts=self.retry_attempts,
                max_content_bytes=self.max_content_bytes,
            )
        except Exception as exc:
            # Every reserved URI must end with an outcome
            logger.exception("Unexpected failure dereferencing %s", base)
            outcome = FetchOutcome.unreachable(base, f"{type(exc).__name__}: {exc}")

        for uri in members:
            _, fragment = split_fragment(uri)
            self.cache.put(replace(outcome, uri=uri, fragment=fragment))

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.pop(future, None)
            drained = self._closing and not self._pending
        if drained:
            self._close_client()

    def _close_client(self) -> None:
        with self._lock:
            if not self._owns_client or self._client_closed:
                return
            self._client_closed = True
        self._client.close()
        logger.debug("Closed owned HTTP client")

    def close(self, wait: bool = True) -> None:
        """Stop the pool. Queued documents are cancelled and their URIs released.

        With ``wait=False`` documents already being fetched run to completion
        in the background; an owned client is closed after the last of them.
        """
        with self._lock:
            self._closing = True
            queued = list(self._pending.items())
        for future, members in queued:
            if future.cancel():
                for uri in members:
                    self.cache.release(uri)
        self._executor.shutdown(wait=wait)
        with self._lock:
            drained = not self._pending
        if wait or drained:
            self._close_client()

    def __enter__(self) -> Fetcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Fetcher({len(self._pending)} documents pending)"
