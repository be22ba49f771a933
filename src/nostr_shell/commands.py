"""Command dispatch.

Executes parsed commands against the session's relay client and renders
the result. Every per-command failure becomes a one-line error outcome.
"""

import logging
from dataclasses import dataclass

from .errors import NostrShellError
from .event import build_from_file, build_publish, parse_publish_date
from .filters import build_fetch_by_id, build_recent, decode_event_id, encode_event_id
from .identity import Identity
from .models import Command, Delete, Exit, FetchById, ListRecent, Outcome, Publish, PublishFromFile
from .output import format_error, format_event_list, format_event_summary, summarize_event
from .parser import parse_command
from .relay import RelayClient

DEFAULT_FETCH_TIMEOUT = 5
DEFAULT_PUBLISH_TIMEOUT = 30
DELETE_REASON = "Deleted by author"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Shared, read-only context for every command of a shell session."""

    identity: Identity
    client: RelayClient
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    publish_timeout: float = DEFAULT_PUBLISH_TIMEOUT


def process_line(line: str, session: Session) -> Outcome:
    """Parse and execute one input line.

    CONTRACT:
      Inputs:
        - line: raw input text
        - session: identity, relay client and timeouts

      Outputs:
        - outcome: rendered text, exit flag, failure flag

      Invariants:
        - Never raises for per-command failures
        - Error output is a single line "ERROR: {error_type}: {message}"
        - Parse and validation errors happen before any relay call

      Error Handling:
        - NostrShellError: rendered, failed=True
        - Any other Exception: logged with traceback, rendered, failed=True
    """
    try:
        command = parse_command(line)
        return execute(command, session)
    except NostrShellError as e:
        return Outcome(output=format_error(e), failed=True)
    except Exception as e:
        logger.exception("Unexpected error handling %r", line)
        return Outcome(output=format_error(e), failed=True)


def execute(command: Command, session: Session) -> Outcome:
    """Run one command. Raises NostrShellError subclasses on failure."""
    if isinstance(command, FetchById):
        return fetch_by_id(command, session)
    if isinstance(command, ListRecent):
        return list_recent(command, session)
    if isinstance(command, Publish):
        return publish(command, session)
    if isinstance(command, PublishFromFile):
        return publish_from_file(command, session)
    if isinstance(command, Delete):
        return delete(command, session)
    if isinstance(command, Exit):
        return Outcome(output="Exiting ...", exit=True)
    raise TypeError(f"Unhandled command: {command!r}")


def fetch_by_id(command: FetchById, session: Session) -> Outcome:
    query = build_fetch_by_id(command.id)
    events = session.client.fetch(query, session.fetch_timeout)
    if not events:
        return Outcome(output="Event not found")
    # ids are unique, extra matches are duplicates from other relays
    return Outcome(output=format_event_summary(summarize_event(events[0])))


def list_recent(command: ListRecent, session: Session) -> Outcome:
    since = parse_publish_date(command.since) if command.since is not None else None
    query = build_recent(command.limit, session.identity.public_key, since)
    events = session.client.fetch(query, session.fetch_timeout)
    return Outcome(output=format_event_list(query.limit, events))


def publish(command: Publish, session: Session) -> Outcome:
    draft = build_publish(command.message, command.kind, command.title, command.publish_date, command.image_url)
    event_id = session.client.submit(draft, session.identity, session.publish_timeout)
    return Outcome(output=f"Just sent event ID {encode_event_id(event_id)}")


def publish_from_file(command: PublishFromFile, session: Session) -> Outcome:
    draft = build_from_file(command.path, command.kind, command.title, command.publish_date, command.image_url)
    event_id = session.client.submit(draft, session.identity, session.publish_timeout)
    return Outcome(output=f"Just sent event ID {encode_event_id(event_id)}")


def delete(command: Delete, session: Session) -> Outcome:
    event_id = decode_event_id(command.id)
    session.client.delete(event_id, DELETE_REASON, session.identity, session.publish_timeout)
    return Outcome(output=f"Deleted event {command.id}")
