"""Property-based tests for relay URL handling."""

import inspect
import logging

import pytest
from hypothesis import given
from hypothesis import strategies as st
from stubs import StubRelayClient

from nostr_shell.errors import InvalidRelayURLError
from nostr_shell.nak import NakRelayClient
from nostr_shell.relay import RelayClient, is_localhost_relay, normalize_relays, validate_relay_url, warn_insecure_relays
from nostr_shell.utils import deduplicate_preserving_order, single_line

# Strategy for valid WebSocket URLs (both wss:// and ws://)
valid_ws_url = st.one_of(st.just("wss://"), st.just("ws://")).flatmap(
    lambda prefix: st.builds(
        lambda host, port: f"{prefix}{host}:{port}",
        host=st.text(
            alphabet=st.characters(blacklist_categories=("Cc", "Cs"), blacklist_characters=" \n\r\t"), min_size=1
        ),
        port=st.integers(min_value=1, max_value=65535),
    )
)


class TestValidateRelayUrl:
    @given(valid_ws_url)
    def test_valid_ws_urls_accepted(self, url):
        assert validate_relay_url(url) is True

    @pytest.mark.parametrize(
        "url", ["http://relay.example.com", "https://relay.example.com", "relay.example.com", "", "WSS://relay"]
    )
    def test_non_ws_urls_rejected(self, url):
        assert validate_relay_url(url) is False


class TestNormalizeRelays:
    def test_dedup_preserves_order(self):
        relays = ["wss://a", "wss://b", "wss://a", "ws://localhost:5001", "wss://b"]
        assert normalize_relays(relays) == ["wss://a", "wss://b", "ws://localhost:5001"]

    def test_invalid_url_raises(self):
        with pytest.raises(InvalidRelayURLError, match="https://relay.example.com"):
            normalize_relays(["wss://a", "https://relay.example.com"])

    @given(st.lists(valid_ws_url))
    def test_idempotent(self, relays):
        once = normalize_relays(relays)
        assert normalize_relays(once) == once


class TestDeduplicate:
    @given(st.lists(st.text()))
    def test_no_duplicates_and_subset(self, items):
        result = deduplicate_preserving_order(items)
        assert len(result) == len(set(result))
        assert set(result) == set(items)

    def test_first_occurrence_order(self):
        assert deduplicate_preserving_order(["c", "a", "c", "b", "a"]) == ["c", "a", "b"]


class TestSingleLine:
    def test_joins_lines(self):
        assert single_line("first\n  second  \n\nthird") == "first; second; third"

    @given(st.text())
    def test_never_contains_newline(self, text):
        assert "\n" not in single_line(text)


class TestIsLocalhostRelay:
    @pytest.mark.parametrize(
        "url", ["ws://localhost:5001", "wss://localhost", "ws://127.0.0.1:8080", "ws://[::1]:8080", "ws://LocalHost:1"]
    )
    def test_localhost(self, url):
        assert is_localhost_relay(url) is True

    @pytest.mark.parametrize("url", ["ws://relay.example.com:8080", "wss://10.0.0.1", "not-a-url", ""])
    def test_not_localhost(self, url):
        assert is_localhost_relay(url) is False


class TestWarnInsecureRelays:
    def test_no_warning_for_wss_or_localhost(self, caplog):
        with caplog.at_level(logging.WARNING, logger="nostr_shell.relay"):
            warn_insecure_relays(["wss://relay.example.com", "ws://localhost:5001"])
        assert caplog.records == []

    def test_warning_for_ws_non_localhost(self, caplog):
        with caplog.at_level(logging.WARNING, logger="nostr_shell.relay"):
            warn_insecure_relays(["wss://secure.example.com", "ws://insecure.example.com", "ws://localhost:8080"])
        assert len(caplog.records) == 1
        message = caplog.records[0].getMessage()
        assert "ws://insecure.example.com" in message
        assert "wss://" in message
        assert "localhost" not in message
        assert "wss://secure.example.com" not in message


class TestRelayClientConformance:
    @pytest.mark.parametrize("implementation", [NakRelayClient, StubRelayClient])
    @pytest.mark.parametrize("method", ["connect", "fetch", "submit", "delete"])
    def test_parameters_match_protocol(self, implementation, method):
        expected = list(inspect.signature(getattr(RelayClient, method)).parameters)
        assert list(inspect.signature(getattr(implementation, method)).parameters) == expected
