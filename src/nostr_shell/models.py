"""Data models for nostr-shell.

Commands, event drafts, tags, query filters, and relay results.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union

DEFAULT_LIST_LIMIT = 10
PREVIEW_LENGTH = 100


class EventKind(IntEnum):
    """Event kinds the shell can publish."""

    NOTE = 1
    LONG_FORM_ARTICLE = 30023


# Commands


@dataclass(frozen=True)
class FetchById:
    """gets <id>"""

    id: str


@dataclass(frozen=True)
class ListRecent:
    """ls [limit] [--since DATETIME]"""

    limit: int = DEFAULT_LIST_LIMIT
    since: str | None = None


@dataclass(frozen=True)
class Publish:
    """puts <message> [kind] [title] [publish_date] [image_url]"""

    message: str
    kind: int = EventKind.NOTE
    title: str | None = None
    publish_date: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class PublishFromFile:
    """cp <path> [kind] [title] [publish_date] [image_url]"""

    path: str
    kind: int = EventKind.NOTE
    title: str | None = None
    publish_date: str | None = None
    image_url: str | None = None


@dataclass(frozen=True)
class Delete:
    """rm <id>"""

    id: str


@dataclass(frozen=True)
class Exit:
    """exit"""


Command = Union[FetchById, ListRecent, Publish, PublishFromFile, Delete, Exit]


# Tags


@dataclass(frozen=True)
class TitleTag:
    text: str

    def to_list(self) -> list[str]:
        return ["title", self.text]


@dataclass(frozen=True)
class PublishedAtTag:
    timestamp: int

    def to_list(self) -> list[str]:
        return ["published_at", str(self.timestamp)]


@dataclass(frozen=True)
class ImageTag:
    url: str

    def to_list(self) -> list[str]:
        return ["image", self.url]


Tag = Union[TitleTag, PublishedAtTag, ImageTag]


@dataclass(frozen=True)
class EventDraft:
    """Unsigned event ready for signing via nak.

    Fields id, sig, pubkey, created_at are omitted (signer provides).
    """

    kind: EventKind
    content: str
    tags: tuple[Tag, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {"kind": int(self.kind), "content": self.content, "tags": [tag.to_list() for tag in self.tags]}


@dataclass(frozen=True)
class QueryFilter:
    """Relay query predicate. Unset fields impose no constraint."""

    ids: tuple[str, ...] = ()
    authors: tuple[str, ...] = ()
    limit: int | None = None
    since: int | None = None

    def is_empty(self) -> bool:
        return not self.ids and not self.authors and self.limit is None and self.since is None


@dataclass
class RelayEvent:
    """Signed event as returned by a relay."""

    id: str
    pubkey: str
    created_at: int
    kind: int
    content: str
    tags: list[list[str]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RelayEvent":
        return cls(
            id=data["id"],
            pubkey=data["pubkey"],
            created_at=int(data["created_at"]),
            kind=int(data["kind"]),
            content=data.get("content", ""),
            tags=data.get("tags") or [],
        )


@dataclass
class PublishResult:
    """Result of a successful nak publish."""

    event_id: str
    pubkey: str


@dataclass(frozen=True)
class EventSummary:
    """Display projection of a fetched event."""

    event_id: str
    created_at: int
    preview: str


@dataclass(frozen=True)
class Outcome:
    """Rendered result of one input line."""

    output: str
    exit: bool = False
    failed: bool = False
