# =============================================================================
# tools/handlers.py  —  One handler per Loom tool
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Each method here is the body of one MCP tool.  It:
#     1. Builds a LoomClient bound to the caller's credentials
#     2. Calls exactly ONE client operation
#     3. Wraps the result in a ToolResponse envelope
#
# THE ENVELOPE:
#   Success  -> pretty-printed camelCase JSON.  Mutations are wrapped as
#               {"success": true, "message": "...", <payload>}; the payload
#               key is left out when Loom answered 204 No Content.
#   Failure  -> "Error: <message>" with is_error=True.
#
#   Handlers NEVER raise.  Whatever the client throws is turned into the
#   failure envelope here, so the MCP framework only ever sees a result.
#
# WHAT HANDLERS DO NOT DO:
#   - No retries (a rate-limit error just reports its retry-after)
#   - No chaining of several API calls
#   - No reading of headers or environment (credentials are passed in)
# =============================================================================

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from core.config import ServerConfig
from core.errors import format_error
from core.loom_client import LoomClient
from core.models import TenantCredentials
from core.serialization import to_wire_dict

ClientFactory = Callable[[TenantCredentials], LoomClient]


@dataclass(frozen=True)
class ToolResponse:
    text: str
    is_error: bool = False


def _mutation(message: str, **payload: Any) -> dict:
    """{"success": true, "message": ..., **payload} without empty payload keys."""
    result: dict[str, Any] = {"success": True, "message": message}
    result.update({key: value for key, value in payload.items() if value is not None})
    return result


class LoomToolHandlers:
    """The tool bodies, parameterised by server config and client factory.

    Args:
        config: Limits for response size and page sizes.
        client_factory: Builds a client from credentials.  Defaults to
            LoomClient; tests inject one backed by a mock transport.
    """

    def __init__(self, config: ServerConfig, client_factory: ClientFactory = LoomClient):
        self.config = config
        self._client_factory = client_factory

    # -------------------------------------------------------------------------
    # Envelope helpers
    # -------------------------------------------------------------------------
    def _format(self, payload: Any) -> str:
        text = json.dumps(to_wire_dict(payload), indent=2, ensure_ascii=False)
        limit = self.config.character_limit
        if len(text) > limit:
            text = (
                text[:limit]
                + f"\n\n[Response truncated at {limit} characters. "
                "Request a smaller perPage or follow nextCursor.]"
            )
        return text

    async def _call(
        self,
        credentials: TenantCredentials,
        operation: Callable[[LoomClient], Awaitable[Any]],
        build: Optional[Callable[[Any], Any]] = None,
    ) -> ToolResponse:
        client = self._client_factory(credentials)
        try:
            result = await operation(client)
        except Exception as e:
            return ToolResponse(f"Error: {format_error(e)}", is_error=True)
        return ToolResponse(self._format(build(result) if build else result))

    def _page_size(self, per_page: Optional[int]) -> int:
        if not per_page:
            return self.config.default_page_size
        return max(1, min(per_page, self.config.max_page_size))

    # -------------------------------------------------------------------------
    # Connection & user
    # -------------------------------------------------------------------------
    async def test_connection(self, credentials: TenantCredentials) -> ToolResponse:
        return await self._call(credentials, lambda c: c.test_connection())

    async def get_current_user(self, credentials: TenantCredentials) -> ToolResponse:
        return await self._call(credentials, lambda c: c.get_current_user())

    # -------------------------------------------------------------------------
    # Videos
    # -------------------------------------------------------------------------
    async def list_videos(
        self,
        credentials: TenantCredentials,
        per_page: Optional[int] = None,
        next_cursor: Optional[str] = None,
    ) -> ToolResponse:
        size = self._page_size(per_page)
        return await self._call(credentials, lambda c: c.list_videos(size, next_cursor))

    async def get_video(self, credentials: TenantCredentials, video_id: str) -> ToolResponse:
        return await self._call(credentials, lambda c: c.get_video(video_id))

    async def update_video(
        self,
        credentials: TenantCredentials,
        video_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        privacy: Optional[str] = None,
    ) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.update_video(video_id, title=title, description=description, privacy=privacy),
            lambda updated_id: _mutation("Video updated", id=updated_id),
        )

    async def delete_video(self, credentials: TenantCredentials, video_id: str) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.delete_video(video_id),
            lambda _: _mutation(f"Video {video_id} deleted"),
        )

    async def search_videos(
        self,
        credentials: TenantCredentials,
        query: str,
        per_page: Optional[int] = None,
        next_cursor: Optional[str] = None,
    ) -> ToolResponse:
        size = self._page_size(per_page)
        return await self._call(credentials, lambda c: c.search_videos(query, size, next_cursor))

    async def move_video_to_folder(
        self, credentials: TenantCredentials, video_id: str, folder_id: str
    ) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.move_video_to_folder(video_id, folder_id),
            lambda _: _mutation(f"Video moved to folder {folder_id}"),
        )

    async def duplicate_video(self, credentials: TenantCredentials, video_id: str) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.duplicate_video(video_id),
            lambda video: _mutation("Video duplicated", video=video),
        )

    # -------------------------------------------------------------------------
    # Transcripts, analytics, comments
    # -------------------------------------------------------------------------
    async def get_transcript(self, credentials: TenantCredentials, video_id: str) -> ToolResponse:
        return await self._call(credentials, lambda c: c.get_transcript(video_id))

    async def get_video_analytics(
        self, credentials: TenantCredentials, video_id: str
    ) -> ToolResponse:
        return await self._call(credentials, lambda c: c.get_video_analytics(video_id))

    async def list_comments(self, credentials: TenantCredentials, video_id: str) -> ToolResponse:
        return await self._call(credentials, lambda c: c.list_comments(video_id))

    async def create_comment(
        self,
        credentials: TenantCredentials,
        video_id: str,
        text: str,
        timestamp: Optional[float] = None,
    ) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.create_comment(video_id, text, timestamp),
            lambda comment: _mutation("Comment created", comment=comment),
        )

    # -------------------------------------------------------------------------
    # Folders
    # -------------------------------------------------------------------------
    async def list_folders(
        self,
        credentials: TenantCredentials,
        per_page: Optional[int] = None,
        next_cursor: Optional[str] = None,
    ) -> ToolResponse:
        size = self._page_size(per_page)
        return await self._call(credentials, lambda c: c.list_folders(size, next_cursor))

    async def create_folder(
        self, credentials: TenantCredentials, name: str, parent_id: Optional[str] = None
    ) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.create_folder(name, parent_id),
            lambda folder: _mutation("Folder created", folder=folder),
        )

    async def get_folder(self, credentials: TenantCredentials, folder_id: str) -> ToolResponse:
        return await self._call(credentials, lambda c: c.get_folder(folder_id))

    async def update_folder(
        self, credentials: TenantCredentials, folder_id: str, name: str
    ) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.update_folder(folder_id, name),
            lambda folder: _mutation("Folder updated", folder=folder),
        )

    async def delete_folder(self, credentials: TenantCredentials, folder_id: str) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.delete_folder(folder_id),
            lambda _: _mutation(f"Folder {folder_id} deleted"),
        )

    # -------------------------------------------------------------------------
    # Workspaces
    # -------------------------------------------------------------------------
    async def list_workspaces(self, credentials: TenantCredentials) -> ToolResponse:
        return await self._call(credentials, lambda c: c.list_workspaces())

    async def get_workspace(
        self, credentials: TenantCredentials, workspace_id: str
    ) -> ToolResponse:
        return await self._call(credentials, lambda c: c.get_workspace(workspace_id))

    # -------------------------------------------------------------------------
    # Spaces
    # -------------------------------------------------------------------------
    async def list_spaces(
        self,
        credentials: TenantCredentials,
        per_page: Optional[int] = None,
        next_cursor: Optional[str] = None,
    ) -> ToolResponse:
        size = self._page_size(per_page)
        return await self._call(credentials, lambda c: c.list_spaces(size, next_cursor))

    async def get_space(self, credentials: TenantCredentials, space_id: str) -> ToolResponse:
        return await self._call(credentials, lambda c: c.get_space(space_id))

    async def list_space_videos(
        self,
        credentials: TenantCredentials,
        space_id: str,
        per_page: Optional[int] = None,
        next_cursor: Optional[str] = None,
    ) -> ToolResponse:
        size = self._page_size(per_page)
        return await self._call(
            credentials, lambda c: c.list_space_videos(space_id, size, next_cursor)
        )

    async def add_video_to_space(
        self, credentials: TenantCredentials, space_id: str, video_id: str
    ) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.add_video_to_space(space_id, video_id),
            lambda _: _mutation(f"Video {video_id} added to space {space_id}"),
        )

    async def remove_video_from_space(
        self, credentials: TenantCredentials, space_id: str, video_id: str
    ) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.remove_video_from_space(space_id, video_id),
            lambda _: _mutation(f"Video {video_id} removed from space {space_id}"),
        )

    # -------------------------------------------------------------------------
    # oEmbed, embed HTML, record links
    # -------------------------------------------------------------------------
    async def get_oembed(
        self,
        credentials: TenantCredentials,
        url: str,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
    ) -> ToolResponse:
        return await self._call(credentials, lambda c: c.get_oembed(url, max_width, max_height))

    async def get_embed_html(
        self,
        credentials: TenantCredentials,
        video_id: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        autoplay: Optional[bool] = None,
    ) -> ToolResponse:
        return await self._call(
            credentials, lambda c: c.get_embed_html(video_id, width, height, autoplay)
        )

    async def create_record_link(
        self,
        credentials: TenantCredentials,
        title: Optional[str] = None,
        folder_id: Optional[str] = None,
        expires_in_minutes: Optional[int] = None,
    ) -> ToolResponse:
        return await self._call(
            credentials,
            lambda c: c.create_record_link(title, folder_id, expires_in_minutes),
            lambda link: _mutation("Record link created", link=link),
        )
