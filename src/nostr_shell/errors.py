"""Exception hierarchy for nostr-shell.

Every error a single command can raise derives from NostrShellError so the
dispatcher can render it as one line and keep the shell running.
"""


class NostrShellError(Exception):
    """Base class for all nostr-shell errors."""


# Parsing


class ParseError(NostrShellError):
    """Input line could not be turned into a command."""


class QuotingError(ParseError):
    """Unbalanced quotes in the input line."""


class UnknownCommandError(ParseError):
    """First token is not in the command vocabulary."""


class EmptyCommandError(ParseError):
    """Input line contains no tokens."""


class BadArgumentError(ParseError):
    """Argument present but not convertible to its declared type."""

    def __init__(self, field: str, value: str, reason: str | None = None):
        self.field = field
        self.value = value
        message = f"Invalid value for {field}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


# Validation (before any network call)


class ValidationError(NostrShellError):
    """User-supplied value rejected before contacting relays."""


class InvalidTimestampError(ValidationError):
    """publish_date is not an RFC 3339 date-time."""


class InvalidUrlError(ValidationError):
    """image_url is not an absolute URL."""


class InvalidIdError(ValidationError):
    """Event id does not decode from note/nevent/hex form."""


class UnsupportedKindError(ValidationError):
    """Event kind outside the supported set."""

    def __init__(self, kind: int):
        self.kind = kind
        super().__init__(f"Event kind not supported: {kind}")


# File input


class EventFileError(NostrShellError):
    """Message file for cp could not be read."""


class EventFileNotFoundError(EventFileError):
    """Message file does not exist."""


class FileUnreadableError(EventFileError):
    """Message file exists but could not be read or decoded."""


# Transport


class TransportError(NostrShellError):
    """Relay interaction failed."""


class RelayTimeoutError(TransportError):
    """Relay operation did not finish within the timeout."""


class RelayRejectedError(TransportError):
    """Every relay refused the event."""


class RelayConnectionError(TransportError):
    """No relay could be reached."""


class NakInvocationError(TransportError):
    """nak subprocess could not be run or produced unusable output."""


# Startup


class InvalidRelayURLError(NostrShellError):
    """Relay URL is not ws:// or wss://."""


class StartupError(NostrShellError):
    """Identity or relay setup failed; the shell cannot start."""
