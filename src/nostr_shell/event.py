"""Event draft construction.

Deterministic unsigned event generation from publish command fields.
"""

import re
from datetime import datetime
from pathlib import Path
from urllib.parse import urlparse

from .errors import (
    EventFileNotFoundError,
    FileUnreadableError,
    InvalidTimestampError,
    InvalidUrlError,
    UnsupportedKindError,
)
from .models import EventDraft, EventKind, ImageTag, PublishedAtTag, Tag, TitleTag

RFC3339_RE = re.compile(r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})", re.ASCII)


def build_publish(
    message: str,
    kind: int = EventKind.NOTE,
    title: str | None = None,
    publish_date: str | None = None,
    image_url: str | None = None,
) -> EventDraft:
    """Construct an unsigned event draft from puts arguments.

    CONTRACT:
      Inputs:
        - message: event content, used verbatim
        - kind: integer kind selector (1 or 30023)
        - title: optional title text
        - publish_date: optional RFC 3339 date-time with UTC offset
          Example: "2023-04-13T20:23:00-07:00"
        - image_url: optional absolute URL

      Outputs:
        - draft: EventDraft with resolved kind and ordered tags

      Invariants:
        - content equals message exactly
        - At most one tag of each type, ordered title, published_at, image
        - published_at tag present only if publish_date parsed

      Properties:
        - Side-effect-free
        - Fail-fast: kind checked first, then timestamp, then URL

      Raises:
        - UnsupportedKindError: kind is not 1 or 30023
        - InvalidTimestampError: publish_date not parseable
        - InvalidUrlError: image_url not an absolute URL
    """
    event_kind = resolve_kind(kind)
    published_at = parse_publish_date(publish_date) if publish_date is not None else None
    if image_url is not None:
        image_url = validate_image_url(image_url)

    return EventDraft(kind=event_kind, content=message, tags=build_tags(title, published_at, image_url))


def build_from_file(
    path: str | Path,
    kind: int = EventKind.NOTE,
    title: str | None = None,
    publish_date: str | None = None,
    image_url: str | None = None,
) -> EventDraft:
    """Construct an event draft whose content is read from a file.

    The file is read before anything else, so a read failure never leaves a
    partially built draft behind.

    Raises:
        - EventFileNotFoundError: path does not exist
        - FileUnreadableError: path exists but cannot be read as UTF-8 text
        - Any error raised by build_publish
    """
    message = read_message_file(Path(path))
    return build_publish(message, kind, title, publish_date, image_url)


def read_message_file(file_path: Path) -> str:
    """Read file content as UTF-8."""
    try:
        return file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise EventFileNotFoundError(f"File not found: {file_path}") from None
    except UnicodeDecodeError as e:
        raise FileUnreadableError(f"Cannot decode {file_path} as UTF-8: {e.reason}") from None
    except OSError as e:
        raise FileUnreadableError(f"Cannot read {file_path}: {e.strerror or e}") from None


def resolve_kind(value: int) -> EventKind:
    """Map a kind number onto a supported EventKind.

    Unknown kinds are rejected rather than defaulting to a note.
    """
    try:
        return EventKind(value)
    except ValueError:
        raise UnsupportedKindError(value) from None


def parse_publish_date(text: str) -> int:
    """Parse an RFC 3339 date-time into unix seconds.

    CONTRACT:
      Inputs:
        - text: date-time string, e.g. "2022-06-30T19:32:00-08:00" or "2022-06-30T19:32:00Z"

      Outputs:
        - timestamp: integer unix seconds

      Invariants:
        - Date and time are both required
        - An explicit UTC offset is required (naive times are ambiguous)
        - Only the RFC 3339 profile of ISO 8601 is accepted (no basic or week forms, seconds required)

      Raises:
        - InvalidTimestampError: text does not satisfy the above
    """
    candidate = text.strip()
    if RFC3339_RE.fullmatch(candidate) is None:
        raise InvalidTimestampError(f"Invalid publish date {text!r}: expected RFC 3339 date-time, e.g. 2023-04-13T20:23:00-07:00")

    if candidate[-1:] in ("Z", "z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        raise InvalidTimestampError(f"Invalid publish date {text!r}: not an RFC 3339 date-time") from None

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise InvalidTimestampError(f"Invalid publish date {text!r}: missing UTC offset")

    return int(parsed.timestamp())


def validate_image_url(text: str) -> str:
    """Check that text is an absolute URL with scheme and host."""
    if not text or any(c.isspace() for c in text):
        raise InvalidUrlError(f"Invalid image URL {text!r}")

    try:
        parsed = urlparse(text)
    except ValueError:
        raise InvalidUrlError(f"Invalid image URL {text!r}") from None

    if not parsed.scheme or not parsed.netloc:
        raise InvalidUrlError(f"Invalid image URL {text!r}: must be absolute, e.g. https://example.com/image.jpg")

    return text


def build_tags(title: str | None = None, published_at: int | None = None, image_url: str | None = None) -> tuple[Tag, ...]:
    """Build ordered tag tuple.

    Ordering is title, published_at, image. Each tag appears at most once
    because each has exactly one source argument.
    """
    tags: list[Tag] = []

    if title is not None:
        tags.append(TitleTag(title))

    if published_at is not None:
        tags.append(PublishedAtTag(published_at))

    if image_url is not None:
        tags.append(ImageTag(image_url))

    return tuple(tags)
