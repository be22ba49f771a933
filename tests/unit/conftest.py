"""Shared fixtures for unit tests."""

import pytest
from stubs import TEST_PUBKEY, TEST_SECRET, StubRelayClient

from nostr_shell.commands import Session
from nostr_shell.errors import RelayTimeoutError
from nostr_shell.identity import Identity


@pytest.fixture
def identity():
    return Identity(public_key=TEST_PUBKEY, npub="npub1test", secret_key=TEST_SECRET)


@pytest.fixture
def client():
    return StubRelayClient()


@pytest.fixture
def session(identity, client):
    return Session(identity=identity, client=client)


@pytest.fixture
def timeout_client():
    return StubRelayClient(error=RelayTimeoutError("Relay request timed out after 5 seconds"))
