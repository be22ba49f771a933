"""nostr-shell: interactive command shell for publishing and querying Nostr events."""

__version__ = "0.1.0"
