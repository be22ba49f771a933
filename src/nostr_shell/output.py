"""Text rendering for command results and errors."""

from .filters import encode_event_id
from .models import PREVIEW_LENGTH, EventSummary, RelayEvent
from .utils import single_line


def summarize_event(event: RelayEvent) -> EventSummary:
    """Project a relay event onto its display fields."""
    return EventSummary(
        event_id=encode_event_id(event.id),
        created_at=event.created_at,
        preview=event.content[:PREVIEW_LENGTH],
    )


def format_event_summary(summary: EventSummary) -> str:
    """Format an event summary as a three-line block.

    Example:
        Event ID: note1...
        Created: 1681442580
        Message: hello world
    """
    return f"Event ID: {summary.event_id}\nCreated: {summary.created_at}\nMessage: {summary.preview}"


def format_event_list(limit: int, events: list[RelayEvent]) -> str:
    """Format the ls result: header, count, then each event in relay order."""
    lines = [f"Getting the last {limit} messages", f"Found {len(events)} events"]
    blocks = [format_event_summary(summarize_event(event)) for event in events]
    if blocks:
        lines.append("\n\n".join(blocks))
    return "\n".join(lines)


def format_error(error: Exception) -> str:
    """Format an exception as a single line: "ERROR: {error_type}: {message}"."""
    message = single_line(str(error))
    if not message:
        return f"ERROR: {type(error).__name__}"
    return f"ERROR: {type(error).__name__}: {message}"
