# =============================================================================
# core/models.py  —  Data Models (the "nouns" of the Loom API)
# =============================================================================
#
# These dataclasses mirror the resources the Loom Public API returns.  None of
# them are owned or mutated locally: the client builds them from a response
# and hands them straight to the tools layer, which serializes them.
#
# NAMING:
#   Attributes are snake_case like the rest of the code base.  The camelCase
#   names the agent sees (thumbnailUrl, nextCursor, ...) are produced at the
#   edge by core/serialization.py, not stored here.
#
# OPEN ENUMERATIONS:
#   Video status and privacy have a known set of values, listed below, but the
#   fields also accept any other string.  If Loom ships a new status tomorrow it
#   flows through untouched instead of breaking every listing call.
# =============================================================================

from dataclasses import dataclass, field
from typing import Generic, Literal, Optional, TypeVar, Union

T = TypeVar("T")

VideoStatus = Literal["pending", "processing", "ready", "failed"]
VideoPrivacy = Literal["public", "private", "company", "password"]


# -----------------------------------------------------------------------------
# TenantCredentials — who is calling, resolved once per tool invocation
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TenantCredentials:
    """Per-call Loom credentials taken from the inbound request."""

    access_token: Optional[str] = None    # X-Loom-Access-Token
    base_url: Optional[str] = None        # X-Loom-Base-URL (override)


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class User:
    """The authenticated Loom user."""

    id: str
    email: str
    name: str
    avatar_url: Optional[str] = None


# -----------------------------------------------------------------------------
# Videos
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class VideoOwner:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class WorkspaceRef:
    id: str
    name: str


@dataclass(frozen=True)
class Video:
    """A single Loom video.

    status and privacy are usually a VideoStatus / VideoPrivacy value, but
    any other string from the API is kept as-is.
    """

    id: str
    title: str
    status: Union[VideoStatus, str]        # unknown values pass through
    created_at: str
    description: Optional[str] = None
    duration: Optional[float] = None       # seconds
    thumbnail_url: Optional[str] = None
    embed_url: Optional[str] = None
    share_url: Optional[str] = None
    download_url: Optional[str] = None
    view_count: Optional[int] = None
    privacy: Optional[Union[VideoPrivacy, str]] = None
    updated_at: Optional[str] = None
    owner: Optional[VideoOwner] = None
    workspace: Optional[WorkspaceRef] = None
    folder_id: Optional[str] = None


# -----------------------------------------------------------------------------
# Transcripts
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class TranscriptSegment:
    start_time: float
    end_time: float
    text: str


@dataclass(frozen=True)
class Transcript:
    """Ordered segments plus the text of all segments joined by spaces."""

    transcript: list[TranscriptSegment] = field(default_factory=list)
    full_text: str = ""


# -----------------------------------------------------------------------------
# Library organisation: folders, workspaces, spaces
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Folder:
    id: str
    name: str
    created_at: str
    video_count: Optional[int] = None
    updated_at: Optional[str] = None
    parent_id: Optional[str] = None        # nesting; no cycle checks client-side


@dataclass(frozen=True)
class Workspace:
    id: str
    name: str
    member_count: Optional[int] = None
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Space:
    """A shared library space."""

    id: str
    name: str
    description: Optional[str] = None
    member_count: Optional[int] = None
    video_count: Optional[int] = None
    created_at: Optional[str] = None


# -----------------------------------------------------------------------------
# Engagement: analytics and comments
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Analytics:
    """Point-in-time view statistics for one video (no history)."""

    total_views: int = 0
    unique_viewers: int = 0
    average_percent_watched: float = 0
    total_watch_time: float = 0


@dataclass(frozen=True)
class CommentAuthor:
    id: str
    name: str


@dataclass(frozen=True)
class Comment:
    id: str
    text: str
    author: CommentAuthor
    created_at: str
    timestamp: Optional[float] = None      # seconds into the video


# -----------------------------------------------------------------------------
# Embedding and recording
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class OEmbed:
    version: str
    type: str
    html: str
    width: int
    height: int
    title: str
    provider_name: str
    provider_url: str
    thumbnail_url: Optional[str] = None
    thumbnail_width: Optional[int] = None
    thumbnail_height: Optional[int] = None
    duration: Optional[float] = None


@dataclass(frozen=True)
class EmbedCode:
    html: str


@dataclass(frozen=True)
class RecordLink:
    """A link that starts a new recording session when visited."""

    id: str
    url: str
    title: Optional[str] = None
    expires_at: Optional[str] = None


@dataclass(frozen=True)
class ConnectionStatus:
    connected: bool
    message: str


# -----------------------------------------------------------------------------
# PaginatedResult — one page of a cursor-paginated listing
# -----------------------------------------------------------------------------
# has_more is NOT stored.  It is derived from next_cursor so the two can never
# disagree, whatever the number of items on the page.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    items: list[T] = field(default_factory=list)
    next_cursor: Optional[str] = None

    @property
    def has_more(self) -> bool:
        return bool(self.next_cursor)
