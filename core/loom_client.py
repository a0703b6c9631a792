# =============================================================================
# core/loom_client.py  —  Loom Public API client
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Performs exactly one HTTP call per operation against the Loom Public API
#   (https://dev.loom.com/docs/api-reference) and turns the snake_case JSON
#   it gets back into the dataclasses in core/models.py.
#
# MULTI-TENANT:
#   A LoomClient is bound to one TenantCredentials value at construction and
#   lives for one tool call.  There is no module-level client and no shared
#   session, so two tenants calling at the same time never see each other's
#   token.
#
# RESPONSE CLASSIFICATION (same for every operation):
#   429          -> RateLimitError (Retry-After header, else 60s)
#   401 / 403    -> AuthenticationError
#   404          -> NotFoundError (code NOT_FOUND, body ignored)
#   other !2xx   -> LoomApiError (body "message"/"error" if it parses)
#   204          -> None
#   2xx          -> parsed JSON
#
# The Authorization header is built before anything is sent, so a missing
# token fails without touching the network.
# =============================================================================

import logging
from typing import Any, Callable, Optional

import httpx

from core.credentials import validate_credentials
from core.errors import AuthenticationError, LoomApiError, NotFoundError, RateLimitError
from core.models import (
    Analytics,
    Comment,
    CommentAuthor,
    ConnectionStatus,
    EmbedCode,
    Folder,
    OEmbed,
    PaginatedResult,
    RecordLink,
    Space,
    TenantCredentials,
    Transcript,
    TranscriptSegment,
    User,
    Video,
    VideoOwner,
    Workspace,
    WorkspaceRef,
)

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.loom.com/v1"
EMBED_BASE_URL = "https://www.loom.com/embed"
DEFAULT_RETRY_AFTER = 60
DEFAULT_EMBED_WIDTH = 640
DEFAULT_EMBED_HEIGHT = 360


# =============================================================================
# Wire → record mapping
# =============================================================================
# Every optional field goes through .get() so a field Loom stops sending
# becomes None instead of a KeyError halfway through a listing.

def _parse_user(data: dict) -> User:
    return User(
        id=data.get("id", ""),
        email=data.get("email", ""),
        name=data.get("name", ""),
        avatar_url=data.get("avatar_url"),
    )


def _parse_video(data: dict) -> Video:
    owner = data.get("owner")
    workspace = data.get("workspace")
    return Video(
        id=data.get("id", ""),
        title=data.get("title", ""),
        status=data.get("status", ""),
        created_at=data.get("created_at", ""),
        description=data.get("description"),
        duration=data.get("duration"),
        thumbnail_url=data.get("thumbnail_url"),
        embed_url=data.get("embed_url"),
        share_url=data.get("share_url"),
        download_url=data.get("download_url"),
        view_count=data.get("view_count"),
        privacy=data.get("privacy"),
        updated_at=data.get("updated_at"),
        owner=VideoOwner(
            id=owner.get("id", ""),
            name=owner.get("name", ""),
            email=owner.get("email", ""),
        ) if owner else None,
        workspace=WorkspaceRef(
            id=workspace.get("id", ""),
            name=workspace.get("name", ""),
        ) if workspace else None,
        folder_id=data.get("folder_id"),
    )


def _parse_folder(data: dict) -> Folder:
    return Folder(
        id=data.get("id", ""),
        name=data.get("name", ""),
        created_at=data.get("created_at", ""),
        video_count=data.get("video_count"),
        updated_at=data.get("updated_at"),
        parent_id=data.get("parent_id"),
    )


def _parse_workspace(data: dict) -> Workspace:
    return Workspace(
        id=data.get("id", ""),
        name=data.get("name", ""),
        member_count=data.get("member_count"),
        created_at=data.get("created_at"),
    )


def _parse_space(data: dict) -> Space:
    return Space(
        id=data.get("id", ""),
        name=data.get("name", ""),
        description=data.get("description"),
        member_count=data.get("member_count"),
        video_count=data.get("video_count"),
        created_at=data.get("created_at"),
    )


def _parse_comment(data: dict) -> Comment:
    author = data.get("author") or {}
    return Comment(
        id=data.get("id", ""),
        text=data.get("text", ""),
        author=CommentAuthor(id=author.get("id", ""), name=author.get("name", "")),
        created_at=data.get("created_at", ""),
        timestamp=data.get("timestamp"),
    )


def _parse_analytics(data: dict) -> Analytics:
    return Analytics(
        total_views=data.get("total_views", 0),
        unique_viewers=data.get("unique_viewers", 0),
        average_percent_watched=data.get("average_percent_watched", 0),
        total_watch_time=data.get("total_watch_time", 0),
    )


def _parse_transcript(data: dict) -> Transcript:
    segments = [
        TranscriptSegment(
            start_time=segment.get("start_time", 0),
            end_time=segment.get("end_time", 0),
            text=segment.get("text", ""),
        )
        for segment in data.get("transcript") or []
    ]
    # Always computed here, never taken from a server-side field.
    return Transcript(
        transcript=segments,
        full_text=" ".join(segment.text for segment in segments),
    )


def _parse_oembed(data: dict) -> OEmbed:
    return OEmbed(
        version=data.get("version", ""),
        type=data.get("type", ""),
        html=data.get("html", ""),
        width=data.get("width", 0),
        height=data.get("height", 0),
        title=data.get("title", ""),
        provider_name=data.get("provider_name", ""),
        provider_url=data.get("provider_url", ""),
        thumbnail_url=data.get("thumbnail_url"),
        thumbnail_width=data.get("thumbnail_width"),
        thumbnail_height=data.get("thumbnail_height"),
        duration=data.get("duration"),
    )


def _parse_record_link(data: dict) -> RecordLink:
    return RecordLink(
        id=data.get("id", ""),
        url=data.get("url", ""),
        title=data.get("title"),
        expires_at=data.get("expires_at"),
    )


def _maybe(parser: Callable[[dict], Any], data: Optional[dict]) -> Any:
    """Apply parser unless the API answered 204 (data is None)."""
    return parser(data) if data is not None else None


def _paginate(data: Optional[dict], key: str, parser: Callable[[dict], Any]) -> PaginatedResult:
    data = data or {}
    return PaginatedResult(
        items=[parser(item) for item in data.get(key) or []],
        next_cursor=data.get("next_cursor") or None,
    )


def _page_params(per_page: Optional[int], next_cursor: Optional[str]) -> dict:
    params: dict[str, Any] = {}
    if per_page:
        params["per_page"] = per_page
    if next_cursor:
        params["next_cursor"] = next_cursor
    return params


def _parse_retry_after(value: Optional[str]) -> int:
    if not value:
        return DEFAULT_RETRY_AFTER
    # "30.5" -> 30; HTTP-date values are not parsed
    try:
        return int(float(value.strip()))
    except (ValueError, OverflowError):
        return DEFAULT_RETRY_AFTER


def _error_message(response: httpx.Response) -> str:
    message = f"API error: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or message
    return message


# =============================================================================
# The client
# =============================================================================
class LoomClient:
    """Loom API client bound to one tenant's credentials.

    Args:
        credentials: The tenant's access token and optional base URL override.
        transport: Optional httpx transport.  Tests pass an httpx.MockTransport;
            production code leaves it as None.
    """

    def __init__(
        self,
        credentials: TenantCredentials,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.credentials = credentials
        self.base_url = (credentials.base_url or API_BASE_URL).rstrip("/")
        self._transport = transport

    # -------------------------------------------------------------------------
    # HTTP plumbing
    # -------------------------------------------------------------------------
    def _auth_headers(self) -> dict[str, str]:
        validate_credentials(self.credentials)
        return {
            "Authorization": f"Bearer {self.credentials.access_token}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        path: str,
        method: str = "GET",
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        headers = self._auth_headers()
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)

        async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
            response = await client.request(
                method, url, headers=headers, params=params, json=json
            )

        status = response.status_code
        if status == 429:
            raise RateLimitError(
                "Rate limit exceeded",
                _parse_retry_after(response.headers.get("Retry-After")),
            )
        if status in (401, 403):
            raise AuthenticationError("Authentication failed. Check your Loom access token.")
        if status == 404:
            raise NotFoundError()
        if not response.is_success:
            raise LoomApiError(_error_message(response), status)
        if status == 204 or not response.content:
            return None
        return response.json()

    # -------------------------------------------------------------------------
    # Connection & user
    # -------------------------------------------------------------------------
    async def test_connection(self) -> ConnectionStatus:
        """Check the token by fetching the current user.  Never raises."""
        try:
            user = await self.get_current_user()
            if user is None:
                return ConnectionStatus(connected=False, message="Connection failed: empty /me response")
            return ConnectionStatus(connected=True, message=f"Connected as {user.name}")
        except Exception as e:
            return ConnectionStatus(connected=False, message=str(e) or "Connection failed")

    async def get_current_user(self) -> Optional[User]:
        return _maybe(_parse_user, await self._request("/me"))

    # -------------------------------------------------------------------------
    # Videos
    # -------------------------------------------------------------------------
    async def list_videos(
        self, per_page: Optional[int] = None, next_cursor: Optional[str] = None
    ) -> PaginatedResult[Video]:
        data = await self._request("/videos", params=_page_params(per_page, next_cursor))
        return _paginate(data, "videos", _parse_video)

    async def get_video(self, video_id: str) -> Video:
        return _maybe(_parse_video, await self._request(f"/videos/{video_id}"))

    async def update_video(
        self,
        video_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        privacy: Optional[str] = None,
    ) -> Optional[str]:
        """PATCH the given fields; returns the video id echoed by the API."""
        body = {
            key: value
            for key, value in (("title", title), ("description", description), ("privacy", privacy))
            if value is not None
        }
        data = await self._request(f"/videos/{video_id}", method="PATCH", json=body)
        return data.get("id") if data else None

    async def delete_video(self, video_id: str) -> None:
        await self._request(f"/videos/{video_id}", method="DELETE")

    async def search_videos(
        self,
        query: str,
        per_page: Optional[int] = None,
        next_cursor: Optional[str] = None,
    ) -> PaginatedResult[Video]:
        params = {"q": query, **_page_params(per_page, next_cursor)}
        data = await self._request("/videos/search", params=params)
        return _paginate(data, "videos", _parse_video)

    async def move_video_to_folder(self, video_id: str, folder_id: str) -> None:
        await self._request(f"/videos/{video_id}", method="PATCH", json={"folder_id": folder_id})

    async def duplicate_video(self, video_id: str) -> Optional[Video]:
        data = await self._request(f"/videos/{video_id}/duplicate", method="POST")
        return _maybe(_parse_video, data)

    # -------------------------------------------------------------------------
    # Transcripts, analytics, comments
    # -------------------------------------------------------------------------
    async def get_transcript(self, video_id: str) -> Transcript:
        data = await self._request(f"/videos/{video_id}/transcript")
        return _parse_transcript(data or {})

    async def get_video_analytics(self, video_id: str) -> Analytics:
        data = await self._request(f"/videos/{video_id}/analytics")
        return _parse_analytics(data or {})

    async def list_comments(self, video_id: str) -> list[Comment]:
        data = await self._request(f"/videos/{video_id}/comments") or {}
        return [_parse_comment(item) for item in data.get("comments") or []]

    async def create_comment(
        self, video_id: str, text: str, timestamp: Optional[float] = None
    ) -> Optional[Comment]:
        body: dict[str, Any] = {"text": text}
        if timestamp is not None:
            body["timestamp"] = timestamp
        data = await self._request(f"/videos/{video_id}/comments", method="POST", json=body)
        return _maybe(_parse_comment, data)

    # -------------------------------------------------------------------------
    # Folders
    # -------------------------------------------------------------------------
    async def list_folders(
        self, per_page: Optional[int] = None, next_cursor: Optional[str] = None
    ) -> PaginatedResult[Folder]:
        data = await self._request("/folders", params=_page_params(per_page, next_cursor))
        return _paginate(data, "folders", _parse_folder)

    async def create_folder(self, name: str, parent_id: Optional[str] = None) -> Optional[Folder]:
        body = {"name": name}
        if parent_id:
            body["parent_id"] = parent_id
        data = await self._request("/folders", method="POST", json=body)
        return _maybe(_parse_folder, data)

    async def get_folder(self, folder_id: str) -> Folder:
        return _maybe(_parse_folder, await self._request(f"/folders/{folder_id}"))

    async def update_folder(self, folder_id: str, name: Optional[str] = None) -> Optional[Folder]:
        body = {"name": name} if name is not None else {}
        data = await self._request(f"/folders/{folder_id}", method="PATCH", json=body)
        return _maybe(_parse_folder, data)

    async def delete_folder(self, folder_id: str) -> None:
        await self._request(f"/folders/{folder_id}", method="DELETE")

    # -------------------------------------------------------------------------
    # Workspaces
    # -------------------------------------------------------------------------
    async def list_workspaces(self) -> list[Workspace]:
        data = await self._request("/workspaces") or {}
        return [_parse_workspace(item) for item in data.get("workspaces") or []]

    async def get_workspace(self, workspace_id: str) -> Workspace:
        return _maybe(_parse_workspace, await self._request(f"/workspaces/{workspace_id}"))

    # -------------------------------------------------------------------------
    # Spaces (shared libraries)
    # -------------------------------------------------------------------------
    async def list_spaces(
        self, per_page: Optional[int] = None, next_cursor: Optional[str] = None
    ) -> PaginatedResult[Space]:
        data = await self._request("/spaces", params=_page_params(per_page, next_cursor))
        return _paginate(data, "spaces", _parse_space)

    async def get_space(self, space_id: str) -> Space:
        return _maybe(_parse_space, await self._request(f"/spaces/{space_id}"))

    async def list_space_videos(
        self,
        space_id: str,
        per_page: Optional[int] = None,
        next_cursor: Optional[str] = None,
    ) -> PaginatedResult[Video]:
        data = await self._request(
            f"/spaces/{space_id}/videos", params=_page_params(per_page, next_cursor)
        )
        return _paginate(data, "videos", _parse_video)

    async def add_video_to_space(self, space_id: str, video_id: str) -> None:
        await self._request(f"/spaces/{space_id}/videos", method="POST", json={"video_id": video_id})

    async def remove_video_from_space(self, space_id: str, video_id: str) -> None:
        await self._request(f"/spaces/{space_id}/videos/{video_id}", method="DELETE")

    # -------------------------------------------------------------------------
    # oEmbed, record links, embed HTML
    # -------------------------------------------------------------------------
    async def get_oembed(
        self,
        url: str,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
    ) -> OEmbed:
        params: dict[str, Any] = {"url": url}
        if max_width:
            params["maxwidth"] = max_width
        if max_height:
            params["maxheight"] = max_height
        return _maybe(_parse_oembed, await self._request("/oembed", params=params))

    async def create_record_link(
        self,
        title: Optional[str] = None,
        folder_id: Optional[str] = None,
        expires_in_minutes: Optional[int] = None,
    ) -> Optional[RecordLink]:
        body: dict[str, Any] = {}
        if title:
            body["title"] = title
        if folder_id:
            body["folder_id"] = folder_id
        if expires_in_minutes:
            body["expires_in_minutes"] = expires_in_minutes
        data = await self._request("/record-links", method="POST", json=body)
        return _maybe(_parse_record_link, data)

    async def get_embed_html(
        self,
        video_id: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        autoplay: Optional[bool] = None,
    ) -> EmbedCode:
        """Build an <iframe> for a video.

        The only network call is get_video().  The embed URL and id come from
        the Loom API and are interpolated as-is, without HTML escaping.
        """
        video = await self.get_video(video_id)
        width = width or DEFAULT_EMBED_WIDTH
        height = height or DEFAULT_EMBED_HEIGHT
        suffix = "?autoplay=1" if autoplay else ""
        embed_url = (video.embed_url if video else None) or f"{EMBED_BASE_URL}/{video_id}"

        return EmbedCode(
            html=(
                f'<iframe src="{embed_url}{suffix}" width="{width}" height="{height}" '
                f'frameborder="0" webkitallowfullscreen mozallowfullscreen allowfullscreen>'
                f"</iframe>"
            )
        )
