"""Tests for pay-level domain extraction and the URI candidate test."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from ldderef.domains import (
    NO_DOMAIN,
    Domain,
    extract_host,
    extract_pay_level_domain,
    is_possible_url,
)


# ---------------------------------------------------------------------------
# Candidate test
# ---------------------------------------------------------------------------

class TestIsPossibleUrl:
    @pytest.mark.parametrize("term", [
        "http://example.org/resource/x",
        "https://example.org",
        "HTTP://Example.ORG/Upper",
        "http://example.org/doc#fragment",
        "http://localhost:8080/sparql?query=x",
    ])
    def test_accepts_absolute_http_uris(self, term):
        assert is_possible_url(term)

    @pytest.mark.parametrize("term", [
        "//example.org/scheme-relative",
        "/relative/path",
        "example.org/no-scheme",
        "ftp://example.org/file",
        "urn:isbn:0451450523",
        "mailto:someone@example.org",
        "http://",
        "http:///no-authority",
        "http://exa mple.org/space",
        "http://example.org/<bad>",
        '"http://example.org/quoted"',
        "_:b0",
        "",
    ])
    def test_rejects_everything_else(self, term):
        assert not is_possible_url(term)

    def test_rejects_non_strings(self):
        assert not is_possible_url(None)
        assert not is_possible_url(42)


# ---------------------------------------------------------------------------
# Domain extraction
# ---------------------------------------------------------------------------

class TestExtractPayLevelDomain:
    def test_subdomains_collapse_to_registrable_domain(self):
        assert extract_pay_level_domain("http://a.b.example.com/x") == "example.com"
        assert extract_pay_level_domain("https://example.com/y") == "example.com"

    def test_multi_label_public_suffix(self):
        assert extract_pay_level_domain("http://www.bbc.co.uk/news") == "bbc.co.uk"

    def test_case_and_port_are_ignored(self):
        assert extract_pay_level_domain("http://Data.Example.ORG:8890/r") == "example.org"

    def test_hosts_without_public_suffix_are_their_own_domain(self):
        assert extract_pay_level_domain("http://localhost:8080/x") == "localhost"
        assert extract_pay_level_domain("http://127.0.0.1/x") == "127.0.0.1"

    @pytest.mark.parametrize("uri", ["urn:isbn:123", "http:///path", "not a uri"])
    def test_no_authority_gives_sentinel(self, uri):
        assert extract_pay_level_domain(uri) == NO_DOMAIN

    def test_extract_host(self):
        assert extract_host("https://Sub.Example.org:443/p") == "sub.example.org"
        assert extract_host("urn:x") == ""


# ---------------------------------------------------------------------------
# Domain entity
# ---------------------------------------------------------------------------

class TestDomain:
    def test_uri_sample_is_bounded(self):
        domain = Domain("example.org", max_uris=3)
        for i in range(50):
            domain.add_uri(f"http://example.org/{i}")
        assert len(domain.sampled_uris()) == 3
        assert domain.uris.observed == 50

    def test_equality_by_name(self):
        assert Domain("example.org", 1) == Domain("example.org", 5)
        assert hash(Domain("example.org", 1)) == hash(Domain("example.org", 5))
        assert Domain("example.org", 1) != Domain("example.com", 1)
