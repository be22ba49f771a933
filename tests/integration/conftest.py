"""Shared fixtures for integration tests.

Runs the shell against a real relay through nak.

Port Configuration
------------------
The relay port is read from NOSTR_SHELL_RELAY_PORT (default: 8080), loaded
from a .env file if present via python-dotenv. Tests are skipped when nak is
not installed or the relay does not answer.

CAVEAT: tests publish real events. Point the port at a disposable relay.
"""

import os
import shutil

import pytest
from dotenv import load_dotenv

from nostr_shell.commands import Session
from nostr_shell.errors import TransportError
from nostr_shell.identity import load_identity
from nostr_shell.nak import NakRelayClient

# Load .env file if present (enables running pytest directly without make)
load_dotenv()

RELAY_PORT = os.environ.get("NOSTR_SHELL_RELAY_PORT", "8080")
RELAY_URL = f"ws://localhost:{RELAY_PORT}"
TEST_TIMEOUT = 15


@pytest.fixture(scope="session")
def relay_client():
    """Connected NakRelayClient, or skip when no relay is available."""
    if not shutil.which("nak"):
        pytest.skip("nak not available")

    client = NakRelayClient()
    try:
        client.connect([RELAY_URL], timeout=TEST_TIMEOUT)
    except TransportError as e:
        pytest.skip(f"relay at {RELAY_URL} not reachable: {e}")
    return client


@pytest.fixture
def live_session(relay_client):
    """Session with a fresh ephemeral identity, so each test sees only its own events."""
    identity, _ = load_identity({})
    return Session(identity=identity, client=relay_client, fetch_timeout=TEST_TIMEOUT, publish_timeout=TEST_TIMEOUT)
