"""Relay query filter construction and event id encoding."""

import re

from nostr_sdk import EventId, Nip19Event, NostrSdkError

from .errors import BadArgumentError, InvalidIdError
from .models import DEFAULT_LIST_LIMIT, QueryFilter

HEX_ID_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def build_fetch_by_id(id_text: str) -> QueryFilter:
    """Filter matching exactly one event id.

    Raises:
        - InvalidIdError: id_text does not decode
    """
    return QueryFilter(ids=(decode_event_id(id_text),))


def build_recent(limit: int | None, author: str, since: int | None = None) -> QueryFilter:
    """Filter for the author's most recent events.

    CONTRACT:
      Inputs:
        - limit: maximum events to return, None for the default of 10
        - author: hex public key, normally the session identity
        - since: optional unix seconds lower bound

      Outputs:
        - filter: QueryFilter scoped to author

      Invariants:
        - Always scoped to a single author
        - limit 0 is allowed and matches nothing

      Raises:
        - BadArgumentError: limit is negative
    """
    if limit is None:
        limit = DEFAULT_LIST_LIMIT
    if limit < 0:
        raise BadArgumentError("limit", str(limit), "must not be negative")

    return QueryFilter(authors=(author,), limit=limit, since=since)


def decode_event_id(text: str) -> str:
    """Decode note1/nevent1 bech32 or 64-char hex into a lowercase hex id."""
    candidate = text.strip()
    if candidate.startswith("nostr:"):
        candidate = candidate[len("nostr:") :]

    if HEX_ID_RE.match(candidate):
        return candidate.lower()

    try:
        if candidate.startswith("nevent1"):
            return Nip19Event.from_bech32(candidate).event_id().to_hex()
        if candidate.startswith("note1"):
            return EventId.parse(candidate).to_hex()
    except NostrSdkError:
        raise InvalidIdError(f"Invalid Id: {text}") from None

    raise InvalidIdError(f"Invalid Id: {text}")


def encode_event_id(hex_id: str) -> str:
    """Encode a hex event id as note1 bech32; returns hex unchanged if it does not parse."""
    try:
        return EventId.parse(hex_id).to_bech32()
    except NostrSdkError:
        return hex_id
