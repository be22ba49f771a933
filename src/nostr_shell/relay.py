"""Relay client contract and relay URL handling."""

import logging
from typing import Protocol
from urllib.parse import urlparse

from .errors import InvalidRelayURLError
from .identity import Identity
from .models import EventDraft, QueryFilter, RelayEvent
from .utils import deduplicate_preserving_order

DEFAULT_RELAYS = ["ws://localhost:5001"]
LOCALHOST_NAMES = {"localhost", "127.0.0.1", "::1"}

logger = logging.getLogger(__name__)


class RelayClient(Protocol):
    """Capabilities the command processor needs from a relay transport.

    Every method raises a TransportError subclass on failure.
    """

    def connect(self, relays: list[str], timeout: float) -> list[str]: ...

    def fetch(self, query: QueryFilter, timeout: float) -> list[RelayEvent]: ...

    def submit(self, draft: EventDraft, identity: Identity, timeout: float) -> str: ...

    def delete(self, event_id: str, reason: str, identity: Identity, timeout: float) -> str: ...


def validate_relay_url(url: str) -> bool:
    """True for ws:// and wss:// URLs (scheme is case-sensitive)."""
    return url.startswith("wss://") or url.startswith("ws://")


def normalize_relays(relays: list[str]) -> list[str]:
    """Validate relay URLs and drop duplicates, preserving order.

    Raises:
        - InvalidRelayURLError: any URL is not ws:// or wss://
    """
    for url in relays:
        if not validate_relay_url(url):
            raise InvalidRelayURLError(f"Invalid relay URL (must be ws:// or wss://): {url}")
    return deduplicate_preserving_order(relays)


def is_localhost_relay(url: str) -> bool:
    """True when the relay host is a loopback name or address."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return False
    return host is not None and host.lower() in LOCALHOST_NAMES


def warn_insecure_relays(relays: list[str]) -> None:
    """Log a warning for unencrypted ws:// relays that are not on localhost."""
    insecure = [url for url in relays if url.startswith("ws://") and not is_localhost_relay(url)]
    if insecure:
        logger.warning("Insecure ws:// relay(s) in use, consider wss://: %s", ", ".join(insecure))
