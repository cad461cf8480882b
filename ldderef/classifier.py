"""Outcome classification following Linked Data dereferencing conventions.

A URI is a valid dereference when it answers 200 directly, when a redirect
chain ends in 200, or when it answers 303 See Other and the document it
points to parses as RDF. A 303 to something that is not RDF is the typical
failure for non-information resources and is reported separately.
"""

from __future__ import annotations

from .types import FetchOutcome, OutcomeKind


_REDIRECT_KINDS: dict[int, OutcomeKind] = {
    301: OutcomeKind.MOVED_PERMANENTLY_301,
    302: OutcomeKind.FOUND_302,
    307: OutcomeKind.TEMPORARY_REDIRECT_307,
}

VALID_KINDS = frozenset({
    OutcomeKind.OK_200,
    OutcomeKind.SEE_OTHER_303_PARSABLE,
})


def classify(outcome: FetchOutcome) -> OutcomeKind:
    """Map a fetch outcome to its OutcomeKind.

    Precedence: timeout, unreachable, any 303 in the chain, a final client
    or server error, the first redirect in the chain, a final 200.
    """
    if outcome.timed_out:
        return OutcomeKind.TIMEOUT

    final = outcome.final_status
    if final is None:
        return OutcomeKind.UNREACHABLE

    statuses = outcome.statuses
    if 303 in statuses:
        if outcome.content_parsable and not outcome.redirect_limit_exceeded:
            return OutcomeKind.SEE_OTHER_303_PARSABLE
        return OutcomeKind.SEE_OTHER_303_UNPARSABLE

    if 400 <= final < 500:
        return OutcomeKind.CLIENT_ERROR_4XX
    if final >= 500:
        return OutcomeKind.SERVER_ERROR_5XX

    redirects = [s for s in statuses if 300 <= s < 400]
    if redirects:
        return _REDIRECT_KINDS.get(redirects[0], OutcomeKind.OTHER_REDIRECT_3XX)
    if 300 <= final < 400:
        return _REDIRECT_KINDS.get(final, OutcomeKind.OTHER_REDIRECT_3XX)

    if final == 200:
        return OutcomeKind.OK_200
    return OutcomeKind.OTHER


def has_valid_dereferenceability(outcome: FetchOutcome) -> bool:
    """True for 200, a redirect chain ending in 200, or 303 to parsable RDF."""
    kind = classify(outcome)
    if kind in VALID_KINDS:
        return True
    if kind in _REDIRECT_KINDS.values() or kind is OutcomeKind.OTHER_REDIRECT_3XX:
        return outcome.final_status == 200 and not outcome.redirect_limit_exceeded
    return False
