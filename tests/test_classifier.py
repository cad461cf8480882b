"""Tests for outcome classification and the validity predicate.

The 303 cases are the heart of it: a 303 See Other is a valid dereference
only when the document it points to is parsable RDF.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from ldderef.classifier import classify, has_valid_dereferenceability
from ldderef.types import FetchOutcome, Hop, OutcomeKind


def _outcome(*statuses: int, parsable: bool = False, **kwargs) -> FetchOutcome:
    hops = tuple(
        Hop(s, "http://example.org/next" if 300 <= s < 400 else None) for s in statuses
    )
    return FetchOutcome(
        uri="http://example.org/resource",
        status_sequence=hops,
        final_status=statuses[-1] if statuses else None,
        content_parsable=parsable,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# 303 See Other
# ---------------------------------------------------------------------------

class TestSeeOther:
    def test_303_to_parsable_rdf_is_dereferenceable(self):
        outcome = _outcome(303, 200, parsable=True)
        assert classify(outcome) == OutcomeKind.SEE_OTHER_303_PARSABLE
        assert has_valid_dereferenceability(outcome)

    def test_303_to_unparsable_content_is_not(self):
        outcome = _outcome(303, 200, parsable=False)
        assert classify(outcome) == OutcomeKind.SEE_OTHER_303_UNPARSABLE
        assert not has_valid_dereferenceability(outcome)

    def test_303_to_missing_document_is_not(self):
        outcome = _outcome(303, 404)
        assert classify(outcome) == OutcomeKind.SEE_OTHER_303_UNPARSABLE
        assert not has_valid_dereferenceability(outcome)

    def test_303_after_another_redirect_still_counts(self):
        outcome = _outcome(301, 303, 200, parsable=True)
        assert classify(outcome) == OutcomeKind.SEE_OTHER_303_PARSABLE
        assert has_valid_dereferenceability(outcome)


# ---------------------------------------------------------------------------
# Plain answers and redirect chains
# ---------------------------------------------------------------------------

class TestStatusCodes:
    def test_200(self):
        outcome = _outcome(200)
        assert classify(outcome) == OutcomeKind.OK_200
        assert has_valid_dereferenceability(outcome)

    @pytest.mark.parametrize("first, kind", [
        (301, OutcomeKind.MOVED_PERMANENTLY_301),
        (302, OutcomeKind.FOUND_302),
        (307, OutcomeKind.TEMPORARY_REDIRECT_307),
        (308, OutcomeKind.OTHER_REDIRECT_3XX),
    ])
    def test_redirect_chain_ending_in_200(self, first, kind):
        outcome = _outcome(first, 200)
        assert classify(outcome) == kind
        assert has_valid_dereferenceability(outcome)

    def test_chain_kind_is_the_first_redirect(self):
        assert classify(_outcome(302, 301, 200)) == OutcomeKind.FOUND_302

    def test_redirect_chain_ending_in_client_error(self):
        outcome = _outcome(302, 404)
        assert classify(outcome) == OutcomeKind.CLIENT_ERROR_4XX
        assert not has_valid_dereferenceability(outcome)

    def test_exhausted_redirect_budget_is_not_dereferenceable(self):
        outcome = _outcome(301, 301, 301, redirect_limit_exceeded=True)
        assert classify(outcome) == OutcomeKind.MOVED_PERMANENTLY_301
        assert not has_valid_dereferenceability(outcome)

    def test_redirect_without_location_is_not_dereferenceable(self):
        outcome = FetchOutcome(
            uri="http://example.org/r",
            status_sequence=(Hop(302),),
            final_status=302,
        )
        assert classify(outcome) == OutcomeKind.FOUND_302
        assert not has_valid_dereferenceability(outcome)

    @pytest.mark.parametrize("status, kind", [
        (400, OutcomeKind.CLIENT_ERROR_4XX),
        (404, OutcomeKind.CLIENT_ERROR_4XX),
        (410, OutcomeKind.CLIENT_ERROR_4XX),
        (500, OutcomeKind.SERVER_ERROR_5XX),
        (503, OutcomeKind.SERVER_ERROR_5XX),
        (204, OutcomeKind.OTHER),
    ])
    def test_non_dereferenceable_statuses(self, status, kind):
        outcome = _outcome(status)
        assert classify(outcome) == kind
        assert not has_valid_dereferenceability(outcome)


# ---------------------------------------------------------------------------
# No response
# ---------------------------------------------------------------------------

class TestNoResponse:
    def test_timeout(self):
        outcome = FetchOutcome.timeout("http://example.org/slow")
        assert classify(outcome) == OutcomeKind.TIMEOUT
        assert not has_valid_dereferenceability(outcome)

    def test_timeout_wins_over_partial_chain(self):
        outcome = FetchOutcome(
            uri="http://example.org/slow",
            status_sequence=(Hop(301, "http://example.org/next"),),
            timed_out=True,
        )
        assert classify(outcome) == OutcomeKind.TIMEOUT

    def test_unreachable(self):
        outcome = FetchOutcome.unreachable("http://nowhere.invalid/", "name resolution failed")
        assert classify(outcome) == OutcomeKind.UNREACHABLE
        assert not has_valid_dereferenceability(outcome)
