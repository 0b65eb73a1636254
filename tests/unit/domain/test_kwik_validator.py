"""Tests for Kwik URL validation."""

from __future__ import annotations

import pytest

from kwikresolver.domain.kwik.validator import KWIK_DOMAINS, is_valid_target_url


class TestIsValidTargetUrl:
    @pytest.mark.parametrize("domain", sorted(KWIK_DOMAINS))
    def test_known_domains(self, domain: str) -> None:
        assert is_valid_target_url(f"https://{domain}/f/abc123") is True

    def test_kwik_si(self) -> None:
        assert is_valid_target_url("https://kwik.si/f/abc123") is True

    def test_http_scheme(self) -> None:
        assert is_valid_target_url("http://kwik.cx/e/abc") is True

    def test_subdomain(self) -> None:
        assert is_valid_target_url("https://www.kwik.si/f/abc") is True

    def test_uppercase_host(self) -> None:
        assert is_valid_target_url("https://KWIK.SI/f/abc") is True

    def test_surrounding_whitespace(self) -> None:
        assert is_valid_target_url("  https://kwik.si/f/abc  ") is True

    def test_other_host(self) -> None:
        assert is_valid_target_url("https://example.com/f/abc123") is False

    def test_lookalike_host(self) -> None:
        assert is_valid_target_url("https://kwik.si.evil.com/f/abc") is False
        assert is_valid_target_url("https://notkwik.si/f/abc") is False

    def test_not_a_url(self) -> None:
        assert is_valid_target_url("not a url") is False

    def test_other_scheme(self) -> None:
        assert is_valid_target_url("ftp://kwik.si/f/abc") is False

    def test_relative(self) -> None:
        assert is_valid_target_url("/f/abc") is False

    def test_empty(self) -> None:
        assert is_valid_target_url("") is False

    @pytest.mark.parametrize("value", [None, 42, b"https://kwik.si/f/abc"])
    def test_non_strings(self, value: object) -> None:
        assert is_valid_target_url(value) is False

    def test_malformed_ipv6_does_not_raise(self) -> None:
        assert is_valid_target_url("https://[kwik.si/f/abc") is False
