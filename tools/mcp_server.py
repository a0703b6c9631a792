# =============================================================================
# tools/mcp_server.py  —  FastMCP Tool Server (ALL Loom tools in one place)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Registers every Loom tool on a FastMCP server.  Each tool is a thin
#   wrapper: it resolves the caller's credentials, hands them to the matching
#   method in tools/handlers.py, and returns the handler's envelope.
#
# HOW IT WORKS (the flow):
#   1. An agent calls a tool by name via MCP (e.g., "loom_get_video")
#   2. FastMCP validates the arguments against the function signature
#   3. resolve_credentials() reads X-Loom-Access-Token / X-Loom-Base-URL
#      from the HTTP request (or the environment on stdio)
#   4. The handler performs ONE Loom API call and builds the envelope
#   5. Errors come back as MCP error results carrying "Error: <message>"
#
# TOOL NAMING CONVENTIONS:
#   Every tool is prefixed "loom_".
#   - loom_get_* / loom_list_* / loom_search_*  → read-only
#   - loom_create_* / loom_update_* / loom_delete_* / loom_add_* /
#     loom_remove_* / loom_move_* / loom_duplicate_*  → mutations, which
#     answer {"success": true, "message": ...}
#
# RUNNING THIS SERVER:
#   a) stdio (single local tenant, token from LOOM_ACCESS_TOKEN):
#        python -m tools.mcp_server
#   b) streamable HTTP (multi-tenant, token per request header):
#        LOOM_MCP_TRANSPORT=http LOOM_MCP_PORT=8000 python -m tools.mcp_server
# =============================================================================

import logging
import os
import sys
from typing import Annotated, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.server.dependencies import get_http_request
from pydantic import Field

from core.config import ServerConfig, load_config
from core.credentials import credentials_from_env, parse_tenant_credentials
from core.models import TenantCredentials, VideoPrivacy
from tools.handlers import LoomToolHandlers, ToolResponse

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: on the stdio transport STDOUT carries the MCP JSON
# stream, and a stray log line there would corrupt it.
#
# Colours:  CYAN = incoming tool call,  GREEN = response,  YELLOW = status.
# Access tokens are never logged; only tool names and arguments are.
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)

load_dotenv()


def _log_request(tool_name: str, **params) -> None:
    """Log an incoming tool call with its parameters in CYAN."""
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items() if v is not None)
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    """Log an intermediate status message in YELLOW."""
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _respond(tool_name: str, response: ToolResponse) -> str:
    """Log the envelope, then hand it to FastMCP.

    Error envelopes become ToolError, which FastMCP reports to the client as
    an error result with the same "Error: ..." text.
    """
    if response.is_error:
        _log_status(f"{tool_name} failed: {response.text}")
        raise ToolError(response.text)
    logging.info(f"{_GREEN}  ← {tool_name} response: {len(response.text)} chars{_RESET}")
    return response.text


# =============================================================================
# Credential resolution
# =============================================================================
# get_http_request() raises RuntimeError when the call did not arrive over
# HTTP.  That only happens on stdio, where the environment is the tenant.
# =============================================================================
def resolve_credentials() -> TenantCredentials:
    try:
        request = get_http_request()
    except RuntimeError:
        return credentials_from_env()
    return parse_tenant_credentials(request.headers)


SERVER_INSTRUCTIONS = """Tools for the Loom video platform: browse and search videos, read
transcripts, analytics and comments, organise folders and shared spaces, and
produce embed codes or recording links. List tools are cursor-paginated:
pass the returned nextCursor back to fetch the next page; hasMore is false on
the last page."""


# =============================================================================
# Server factory
# =============================================================================
def create_server(
    config: Optional[ServerConfig] = None,
    handlers: Optional[LoomToolHandlers] = None,
) -> FastMCP:
    """Build a FastMCP server with every Loom tool registered.

    Args:
        config: Response-size and page-size limits.  Loaded from the
            environment when omitted.
        handlers: Tool bodies.  Defaults to LoomToolHandlers(config); tests
            pass handlers wired to a fake Loom API.
    """
    config = config or load_config()
    handlers = handlers or LoomToolHandlers(config)
    mcp = FastMCP("loom-video", instructions=SERVER_INSTRUCTIONS)

    PageSize = Annotated[int, Field(ge=1, le=config.max_page_size)]

    # =========================================================================
    # Connection & user
    # =========================================================================
    @mcp.tool()
    async def loom_test_connection() -> str:
        """Check whether the supplied Loom access token works.

        Returns:
            {"connected": true, "message": "Connected as <name>"} or
            {"connected": false, "message": <reason>}.  Never an error result.
        """
        _log_request("loom_test_connection")
        return _respond("loom_test_connection",
                        await handlers.test_connection(resolve_credentials()))

    @mcp.tool()
    async def loom_get_current_user() -> str:
        """Get the current authenticated user's information.

        Returns:
            User object with id, email, name, and avatarUrl.
        """
        _log_request("loom_get_current_user")
        return _respond("loom_get_current_user",
                        await handlers.get_current_user(resolve_credentials()))

    # =========================================================================
    # Videos
    # =========================================================================
    @mcp.tool()
    async def loom_list_videos(
        per_page: Optional[PageSize] = None,
        next_cursor: Optional[str] = None,
    ) -> str:
        """List videos from the user's Loom account with pagination.

        Args:
            per_page: Number of videos per page (default: 20).
            next_cursor: Pagination cursor from a previous response.

        Returns:
            {"items": [...videos], "nextCursor": ..., "hasMore": bool}.
            Each video has id, title, status, duration, URLs and metadata.
        """
        _log_request("loom_list_videos", per_page=per_page, next_cursor=next_cursor)
        return _respond("loom_list_videos",
                        await handlers.list_videos(resolve_credentials(), per_page, next_cursor))

    @mcp.tool()
    async def loom_get_video(video_id: str) -> str:
        """Get detailed information about a specific video.

        Args:
            video_id: The Loom video ID.

        Returns:
            Complete video object including embedUrl, shareUrl and owner info.
        """
        _log_request("loom_get_video", video_id=video_id)
        return _respond("loom_get_video",
                        await handlers.get_video(resolve_credentials(), video_id))

    @mcp.tool()
    async def loom_update_video(
        video_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        privacy: Optional[VideoPrivacy] = None,
    ) -> str:
        """Update a video's title, description, or privacy setting.

        Only the fields you pass are changed.

        Args:
            video_id: The Loom video ID.
            title: New title.
            description: New description.
            privacy: One of public, private, company, password.

        Returns:
            {"success": true, "message": "Video updated", "id": ...}.
        """
        _log_request("loom_update_video", video_id=video_id, title=title,
                     description=description, privacy=privacy)
        return _respond("loom_update_video", await handlers.update_video(
            resolve_credentials(), video_id, title, description, privacy))

    @mcp.tool()
    async def loom_delete_video(video_id: str) -> str:
        """Delete a video from Loom.  This cannot be undone.

        Args:
            video_id: The Loom video ID to delete.
        """
        _log_request("loom_delete_video", video_id=video_id)
        return _respond("loom_delete_video",
                        await handlers.delete_video(resolve_credentials(), video_id))

    @mcp.tool()
    async def loom_search_videos(
        query: str,
        per_page: Optional[PageSize] = None,
        next_cursor: Optional[str] = None,
    ) -> str:
        """Search for videos by query string.

        Args:
            query: Search query.
            per_page: Results per page (default: 20).
            next_cursor: Pagination cursor.

        Returns:
            Paginated list of matching videos.
        """
        _log_request("loom_search_videos", query=query, per_page=per_page,
                     next_cursor=next_cursor)
        return _respond("loom_search_videos", await handlers.search_videos(
            resolve_credentials(), query, per_page, next_cursor))

    @mcp.tool()
    async def loom_move_video_to_folder(video_id: str, folder_id: str) -> str:
        """Move a video to a specific folder.

        Args:
            video_id: The video ID to move.
            folder_id: The target folder ID.
        """
        _log_request("loom_move_video_to_folder", video_id=video_id, folder_id=folder_id)
        return _respond("loom_move_video_to_folder", await handlers.move_video_to_folder(
            resolve_credentials(), video_id, folder_id))

    @mcp.tool()
    async def loom_duplicate_video(video_id: str) -> str:
        """Create a duplicate copy of a video.

        Args:
            video_id: The video ID to duplicate.

        Returns:
            {"success": true, "message": "Video duplicated", "video": {...}}.
        """
        _log_request("loom_duplicate_video", video_id=video_id)
        return _respond("loom_duplicate_video",
                        await handlers.duplicate_video(resolve_credentials(), video_id))

    # =========================================================================
    # Transcripts, analytics, comments
    # =========================================================================
    @mcp.tool()
    async def loom_get_transcript(video_id: str) -> str:
        """Get the transcript for a video with timestamps.

        WHEN TO CALL THIS: to answer questions about what is said in a video.
        fullText is the segments' text joined by spaces, in order.

        Args:
            video_id: The Loom video ID.

        Returns:
            {"transcript": [{startTime, endTime, text}, ...], "fullText": "..."}.
        """
        _log_request("loom_get_transcript", video_id=video_id)
        return _respond("loom_get_transcript",
                        await handlers.get_transcript(resolve_credentials(), video_id))

    @mcp.tool()
    async def loom_get_video_analytics(video_id: str) -> str:
        """Get analytics data for a video.

        Args:
            video_id: The Loom video ID.

        Returns:
            totalViews, uniqueViewers, averagePercentWatched, totalWatchTime.
        """
        _log_request("loom_get_video_analytics", video_id=video_id)
        return _respond("loom_get_video_analytics",
                        await handlers.get_video_analytics(resolve_credentials(), video_id))

    @mcp.tool()
    async def loom_list_comments(video_id: str) -> str:
        """List all comments on a video.

        Args:
            video_id: The Loom video ID.

        Returns:
            Array of comments with id, text, timestamp, author and createdAt.
        """
        _log_request("loom_list_comments", video_id=video_id)
        return _respond("loom_list_comments",
                        await handlers.list_comments(resolve_credentials(), video_id))

    @mcp.tool()
    async def loom_create_comment(
        video_id: str,
        text: str,
        timestamp: Optional[float] = None,
    ) -> str:
        """Add a comment to a video.

        Args:
            video_id: The Loom video ID.
            text: Comment text.
            timestamp: Optional position in seconds the comment refers to.
        """
        _log_request("loom_create_comment", video_id=video_id, text=text, timestamp=timestamp)
        return _respond("loom_create_comment", await handlers.create_comment(
            resolve_credentials(), video_id, text, timestamp))

    # =========================================================================
    # Folders
    # =========================================================================
    @mcp.tool()
    async def loom_list_folders(
        per_page: Optional[PageSize] = None,
        next_cursor: Optional[str] = None,
    ) -> str:
        """List folders from the user's Loom account.

        Args:
            per_page: Folders per page (default: 20).
            next_cursor: Pagination cursor.

        Returns:
            Paginated list of folders with id, name, videoCount, parentId.
        """
        _log_request("loom_list_folders", per_page=per_page, next_cursor=next_cursor)
        return _respond("loom_list_folders",
                        await handlers.list_folders(resolve_credentials(), per_page, next_cursor))

    @mcp.tool()
    async def loom_create_folder(name: str, parent_id: Optional[str] = None) -> str:
        """Create a new folder, optionally nested inside another one.

        Args:
            name: Folder name.
            parent_id: Optional parent folder ID.
        """
        _log_request("loom_create_folder", name=name, parent_id=parent_id)
        return _respond("loom_create_folder",
                        await handlers.create_folder(resolve_credentials(), name, parent_id))

    @mcp.tool()
    async def loom_get_folder(folder_id: str) -> str:
        """Get details about a specific folder.

        Args:
            folder_id: The folder ID.
        """
        _log_request("loom_get_folder", folder_id=folder_id)
        return _respond("loom_get_folder",
                        await handlers.get_folder(resolve_credentials(), folder_id))

    @mcp.tool()
    async def loom_update_folder(folder_id: str, name: str) -> str:
        """Rename a folder.

        Args:
            folder_id: The folder ID.
            name: New folder name.
        """
        _log_request("loom_update_folder", folder_id=folder_id, name=name)
        return _respond("loom_update_folder",
                        await handlers.update_folder(resolve_credentials(), folder_id, name))

    @mcp.tool()
    async def loom_delete_folder(folder_id: str) -> str:
        """Delete a folder.

        Args:
            folder_id: The folder ID to delete.
        """
        _log_request("loom_delete_folder", folder_id=folder_id)
        return _respond("loom_delete_folder",
                        await handlers.delete_folder(resolve_credentials(), folder_id))

    # =========================================================================
    # Workspaces
    # =========================================================================
    @mcp.tool()
    async def loom_list_workspaces() -> str:
        """List all workspaces the user has access to."""
        _log_request("loom_list_workspaces")
        return _respond("loom_list_workspaces",
                        await handlers.list_workspaces(resolve_credentials()))

    @mcp.tool()
    async def loom_get_workspace(workspace_id: str) -> str:
        """Get details about a specific workspace.

        Args:
            workspace_id: The workspace ID.
        """
        _log_request("loom_get_workspace", workspace_id=workspace_id)
        return _respond("loom_get_workspace",
                        await handlers.get_workspace(resolve_credentials(), workspace_id))

    # =========================================================================
    # Spaces (shared libraries)
    # =========================================================================
    @mcp.tool()
    async def loom_list_spaces(
        per_page: Optional[PageSize] = None,
        next_cursor: Optional[str] = None,
    ) -> str:
        """List shared library spaces.

        Args:
            per_page: Spaces per page (default: 20).
            next_cursor: Pagination cursor.
        """
        _log_request("loom_list_spaces", per_page=per_page, next_cursor=next_cursor)
        return _respond("loom_list_spaces",
                        await handlers.list_spaces(resolve_credentials(), per_page, next_cursor))

    @mcp.tool()
    async def loom_get_space(space_id: str) -> str:
        """Get details about a shared library space.

        Args:
            space_id: The space ID.

        Returns:
            Space object with id, name, description, memberCount, videoCount.
        """
        _log_request("loom_get_space", space_id=space_id)
        return _respond("loom_get_space",
                        await handlers.get_space(resolve_credentials(), space_id))

    @mcp.tool()
    async def loom_list_space_videos(
        space_id: str,
        per_page: Optional[PageSize] = None,
        next_cursor: Optional[str] = None,
    ) -> str:
        """List videos in a shared library space.

        Args:
            space_id: The space ID.
            per_page: Videos per page (default: 20).
            next_cursor: Pagination cursor.
        """
        _log_request("loom_list_space_videos", space_id=space_id, per_page=per_page,
                     next_cursor=next_cursor)
        return _respond("loom_list_space_videos", await handlers.list_space_videos(
            resolve_credentials(), space_id, per_page, next_cursor))

    @mcp.tool()
    async def loom_add_video_to_space(space_id: str, video_id: str) -> str:
        """Add a video to a shared library space.

        Args:
            space_id: The space ID.
            video_id: The video ID to add.
        """
        _log_request("loom_add_video_to_space", space_id=space_id, video_id=video_id)
        return _respond("loom_add_video_to_space", await handlers.add_video_to_space(
            resolve_credentials(), space_id, video_id))

    @mcp.tool()
    async def loom_remove_video_from_space(space_id: str, video_id: str) -> str:
        """Remove a video from a shared library space.

        Args:
            space_id: The space ID.
            video_id: The video ID to remove.
        """
        _log_request("loom_remove_video_from_space", space_id=space_id, video_id=video_id)
        return _respond("loom_remove_video_from_space", await handlers.remove_video_from_space(
            resolve_credentials(), space_id, video_id))

    # =========================================================================
    # oEmbed, embed HTML, record links
    # =========================================================================
    @mcp.tool()
    async def loom_get_oembed(
        url: str,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
    ) -> str:
        """Get oEmbed metadata for a Loom video share URL.

        Args:
            url: The Loom video share URL.
            max_width: Maximum embed width.
            max_height: Maximum embed height.

        Returns:
            oEmbed object with html embed code, dimensions, title, thumbnail.
        """
        _log_request("loom_get_oembed", url=url, max_width=max_width, max_height=max_height)
        return _respond("loom_get_oembed", await handlers.get_oembed(
            resolve_credentials(), url, max_width, max_height))

    @mcp.tool()
    async def loom_get_embed_html(
        video_id: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        autoplay: Optional[bool] = None,
    ) -> str:
        """Generate <iframe> embed HTML for a video.

        Args:
            video_id: The Loom video ID.
            width: Embed width in pixels (default: 640).
            height: Embed height in pixels (default: 360).
            autoplay: Start playing as soon as the embed loads.

        Returns:
            {"html": "<iframe ...></iframe>"}.
        """
        _log_request("loom_get_embed_html", video_id=video_id, width=width,
                     height=height, autoplay=autoplay)
        return _respond("loom_get_embed_html", await handlers.get_embed_html(
            resolve_credentials(), video_id, width, height, autoplay))

    @mcp.tool()
    async def loom_create_record_link(
        title: Optional[str] = None,
        folder_id: Optional[str] = None,
        expires_in_minutes: Optional[int] = None,
    ) -> str:
        """Create a shareable link that lets someone record a Loom video.

        Args:
            title: Title for the recorded video.
            folder_id: Folder the recording is saved to.
            expires_in_minutes: How long the link stays valid.

        Returns:
            {"success": true, "message": "Record link created", "link": {id, url, ...}}.
        """
        _log_request("loom_create_record_link", title=title, folder_id=folder_id,
                     expires_in_minutes=expires_in_minutes)
        return _respond("loom_create_record_link", await handlers.create_record_link(
            resolve_credentials(), title, folder_id, expires_in_minutes))

    return mcp


# =============================================================================
# Module-level server instance
# =============================================================================
# Lets `fastmcp run tools/mcp_server.py` and the ADK agent find a ready
# server without extra wiring.
mcp = create_server(load_config())


def run() -> None:
    """Start the server on the transport chosen by LOOM_MCP_TRANSPORT."""
    transport = os.environ.get("LOOM_MCP_TRANSPORT", "stdio").lower()
    if transport == "stdio":
        mcp.run()
        return

    host = os.environ.get("LOOM_MCP_HOST", "127.0.0.1")
    port = int(os.environ.get("LOOM_MCP_PORT", "8000"))
    _log_status(f"Serving {transport} on {host}:{port}")
    mcp.run(transport=transport, host=host, port=port)


if __name__ == "__main__":
    run()
