"""
Unit tests for LoomClient: request building, response classification and
wire-to-record mapping
"""
import pytest

from core.errors import AuthenticationError, LoomApiError, NotFoundError, RateLimitError
from core.loom_client import LoomClient
from core.models import TenantCredentials


class TestAuthentication:
    """Credentials are checked before anything touches the network"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_token_fails_without_network_call(self, fake_api, token):
        fake_api.add("GET", "/me", json_body={"id": "u_1", "email": "a@b.c", "name": "Ada"})
        client = LoomClient(TenantCredentials(access_token=token), transport=fake_api.transport)

        with pytest.raises(AuthenticationError):
            await client.get_current_user()
        with pytest.raises(AuthenticationError):
            await client.delete_video("vid_1")

        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_sends_bearer_and_json_headers(self, client, fake_api):
        fake_api.add("GET", "/me", json_body={"id": "u_1", "email": "a@b.c", "name": "Ada"})

        await client.get_current_user()

        request = fake_api.last_request
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Content-Type"] == "application/json"
        assert str(request.url) == "https://api.loom.com/v1/me"

    @pytest.mark.asyncio
    async def test_base_url_override(self, fake_api):
        fake_api.prefix = "/api"
        fake_api.add("GET", "/me", json_body={"id": "u_1", "email": "a@b.c", "name": "Ada"})
        creds = TenantCredentials(access_token="t", base_url="https://loom.internal.test/api/")
        client = LoomClient(creds, transport=fake_api.transport)

        await client.get_current_user()

        assert str(fake_api.last_request.url) == "https://loom.internal.test/api/me"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_401_and_403_are_authentication_errors(self, client, fake_api, status):
        fake_api.add("GET", "/me", status=status, json_body={"message": "nope"})

        with pytest.raises(AuthenticationError) as exc_info:
            await client.get_current_user()

        assert exc_info.value.message == "Authentication failed. Check your Loom access token."


class TestErrorClassification:
    @pytest.mark.asyncio
    async def test_429_uses_retry_after_header(self, client, fake_api):
        fake_api.add("GET", "/videos", status=429, json_body={}, headers={"Retry-After": "30"})

        with pytest.raises(RateLimitError) as exc_info:
            await client.list_videos()

        assert exc_info.value.retry_after == 30

    @pytest.mark.asyncio
    async def test_429_without_header_defaults_to_60(self, client, fake_api):
        fake_api.add("GET", "/videos", status=429, json_body={})

        with pytest.raises(RateLimitError) as exc_info:
            await client.list_videos()

        assert exc_info.value.retry_after == 60

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header, expected", [("30.5", 30), (" 7 ", 7), ("soon", 60)])
    async def test_retry_after_is_truncated_to_whole_seconds(self, client, fake_api, header, expected):
        fake_api.add("GET", "/videos", status=429, json_body={}, headers={"Retry-After": header})

        with pytest.raises(RateLimitError) as exc_info:
            await client.list_videos()

        assert exc_info.value.retry_after == expected

    @pytest.mark.asyncio
    async def test_redirects_are_followed(self, client, fake_api):
        fake_api.add("GET", "/me", status=307, headers={"Location": "https://api.loom.com/v1/users/me"})
        fake_api.add("GET", "/users/me", json_body={"id": "u_1", "email": "a@b.c", "name": "Ada"})

        user = await client.get_current_user()

        assert user.name == "Ada"
        assert [r.url.path for r in fake_api.requests] == ["/v1/me", "/v1/users/me"]
        assert fake_api.last_request.headers["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"message": "gone fishing"}, None])
    async def test_404_is_not_found_regardless_of_body(self, client, fake_api, body):
        fake_api.add("GET", "/videos/missing", status=404, json_body=body)

        with pytest.raises(NotFoundError) as exc_info:
            await client.get_video("missing")

        assert exc_info.value.code == "NOT_FOUND"
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Resource not found"

    @pytest.mark.asyncio
    async def test_other_error_uses_message_field(self, client, fake_api):
        fake_api.add("GET", "/videos/v", status=500, json_body={"message": "Upstream exploded"})

        with pytest.raises(LoomApiError) as exc_info:
            await client.get_video("v")

        assert exc_info.value.message == "Upstream exploded"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_other_error_falls_back_to_error_field(self, client, fake_api):
        fake_api.add("GET", "/videos/v", status=422, json_body={"error": "bad privacy"})

        with pytest.raises(LoomApiError) as exc_info:
            await client.get_video("v")

        assert exc_info.value.message == "bad privacy"

    @pytest.mark.asyncio
    async def test_unparseable_error_body_gets_generic_message(self, client, fake_api):
        fake_api.add("GET", "/videos/v", status=502, text="<html>Bad gateway</html>")

        with pytest.raises(LoomApiError) as exc_info:
            await client.get_video("v")

        assert exc_info.value.message == "API error: 502"

    @pytest.mark.asyncio
    async def test_204_returns_none(self, client, fake_api):
        fake_api.add("DELETE", "/videos/v", status=204)

        assert await client.delete_video("v") is None


class TestConnection:
    @pytest.mark.asyncio
    async def test_connected(self, client, fake_api):
        fake_api.add("GET", "/me", json_body={"id": "u_1", "email": "a@b.c", "name": "Ada"})

        status = await client.test_connection()

        assert status.connected is True
        assert status.message == "Connected as Ada"

    @pytest.mark.asyncio
    async def test_failure_is_reported_not_raised(self, client, fake_api):
        fake_api.add("GET", "/me", status=401, json_body={})

        status = await client.test_connection()

        assert status.connected is False
        assert status.message == "Authentication failed. Check your Loom access token."

    @pytest.mark.asyncio
    async def test_empty_me_response_is_a_failed_connection(self, client, fake_api):
        fake_api.add("GET", "/me", status=204)

        status = await client.test_connection()

        assert status.connected is False
        assert status.message == "Connection failed: empty /me response"


class TestVideos:
    @pytest.mark.asyncio
    async def test_get_video_maps_every_field(self, client, fake_api, wire_video):
        fake_api.add("GET", "/videos/vid_1", json_body=wire_video)

        video = await client.get_video("vid_1")

        assert video.id == "vid_1"
        assert video.thumbnail_url == "https://cdn.loom.com/thumb.jpg"
        assert video.embed_url == "https://www.loom.com/embed/vid_1"
        assert video.share_url == "https://www.loom.com/share/vid_1"
        assert video.download_url == "https://cdn.loom.com/vid_1.mp4"
        assert video.view_count == 42
        assert video.created_at == "2024-05-01T10:00:00Z"
        assert video.updated_at == "2024-05-02T10:00:00Z"
        assert video.owner.email == "ada@example.com"
        assert video.workspace.name == "Engineering"
        assert video.folder_id == "fld_1"

    @pytest.mark.asyncio
    async def test_unknown_status_and_privacy_pass_through(self, client, fake_api):
        fake_api.add("GET", "/videos/v", json_body={
            "id": "v", "title": "t", "status": "archived", "privacy": "team-only",
            "created_at": "2024-01-01",
        })

        video = await client.get_video("v")

        assert video.status == "archived"
        assert video.privacy == "team-only"
        assert video.owner is None
        assert video.description is None

    @pytest.mark.asyncio
    async def test_list_videos_without_params_sends_no_query(self, client, fake_api, wire_video):
        fake_api.add("GET", "/videos", json_body={"videos": [wire_video]})

        page = await client.list_videos()

        assert fake_api.last_request.url.query == b""
        assert len(page.items) == 1
        assert page.next_cursor is None
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_list_videos_serializes_pagination(self, client, fake_api, wire_video):
        fake_api.add("GET", "/videos", json_body={"videos": [wire_video], "next_cursor": "c2"})

        page = await client.list_videos(per_page=5, next_cursor="c1")

        params = fake_api.last_request.url.params
        assert params["per_page"] == "5"
        assert params["next_cursor"] == "c1"
        assert page.next_cursor == "c2"
        assert page.has_more is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("wire_cursor,expected", [
        ("abc", True),
        ("", False),
        (None, False),
    ])
    async def test_has_more_follows_cursor_presence(self, client, fake_api, wire_cursor, expected):
        body = {"folders": []}
        if wire_cursor is not None:
            body["next_cursor"] = wire_cursor
        fake_api.add("GET", "/folders", json_body=body)

        page = await client.list_folders()

        assert page.items == []
        assert page.has_more is expected

    @pytest.mark.asyncio
    async def test_search_uses_query_parameters(self, client, fake_api):
        fake_api.add("GET", "/videos/search", json_body={"videos": []})

        await client.search_videos("onboarding", per_page=10)

        params = fake_api.last_request.url.params
        assert params["q"] == "onboarding"
        assert params["per_page"] == "10"
        assert "next_cursor" not in params

    @pytest.mark.asyncio
    async def test_update_video_sends_only_given_fields(self, client, fake_api):
        fake_api.add("PATCH", "/videos/v", json_body={"id": "v"})

        result = await client.update_video("v", title="New title")

        assert fake_api.last_json() == {"title": "New title"}
        assert result == "v"

    @pytest.mark.asyncio
    async def test_move_video_sends_only_folder_id(self, client, fake_api):
        fake_api.add("PATCH", "/videos/v", status=204)

        await client.move_video_to_folder("v", "fld_9")

        assert fake_api.last_request.method == "PATCH"
        assert fake_api.last_json() == {"folder_id": "fld_9"}

    @pytest.mark.asyncio
    async def test_duplicate_video(self, client, fake_api):
        fake_api.add("POST", "/videos/v/duplicate", json_body={
            "id": "v2", "title": "Copy", "status": "processing", "created_at": "2024-06-01",
        })

        video = await client.duplicate_video("v")

        assert video.id == "v2"
        assert video.status == "processing"


class TestTranscriptsAnalyticsComments:
    @pytest.mark.asyncio
    async def test_full_text_is_joined_locally(self, client, fake_api):
        fake_api.add("GET", "/videos/v/transcript", json_body={
            "transcript": [
                {"start_time": 0, "end_time": 2, "text": "Hello"},
                {"start_time": 2, "end_time": 5, "text": "world"},
            ],
            "full_text": "server supplied text is ignored",
        })

        transcript = await client.get_transcript("v")

        assert transcript.full_text == "Hello world"
        assert transcript.transcript[1].start_time == 2
        assert transcript.transcript[1].end_time == 5

    @pytest.mark.asyncio
    async def test_analytics_mapping(self, client, fake_api):
        fake_api.add("GET", "/videos/v/analytics", json_body={
            "total_views": 10, "unique_viewers": 7,
            "average_percent_watched": 63.5, "total_watch_time": 900,
        })

        analytics = await client.get_video_analytics("v")

        assert analytics.total_views == 10
        assert analytics.unique_viewers == 7
        assert analytics.average_percent_watched == 63.5
        assert analytics.total_watch_time == 900

    @pytest.mark.asyncio
    async def test_comments(self, client, fake_api):
        wire_comment = {
            "id": "c1", "text": "Nice", "timestamp": 12.5,
            "author": {"id": "u_2", "name": "Grace"}, "created_at": "2024-05-03",
        }
        fake_api.add("GET", "/videos/v/comments", json_body={"comments": [wire_comment]})
        fake_api.add("POST", "/videos/v/comments", json_body=wire_comment)

        comments = await client.list_comments("v")
        created = await client.create_comment("v", "Nice", timestamp=12.5)

        assert comments[0].author.name == "Grace"
        assert comments[0].created_at == "2024-05-03"
        assert created.timestamp == 12.5
        assert fake_api.last_json() == {"text": "Nice", "timestamp": 12.5}


class TestFoldersWorkspacesSpaces:
    @pytest.mark.asyncio
    async def test_create_folder_omits_missing_parent(self, client, fake_api):
        fake_api.add("POST", "/folders", json_body={"id": "f", "name": "Docs", "created_at": "x"})

        await client.create_folder("Docs")

        assert fake_api.last_json() == {"name": "Docs"}

    @pytest.mark.asyncio
    async def test_create_folder_with_parent(self, client, fake_api):
        fake_api.add("POST", "/folders", json_body={
            "id": "f", "name": "Docs", "created_at": "x", "parent_id": "root", "video_count": 0,
        })

        folder = await client.create_folder("Docs", parent_id="root")

        assert fake_api.last_json() == {"name": "Docs", "parent_id": "root"}
        assert folder.parent_id == "root"
        assert folder.video_count == 0

    @pytest.mark.asyncio
    async def test_workspaces(self, client, fake_api):
        fake_api.add("GET", "/workspaces", json_body={
            "workspaces": [{"id": "ws", "name": "Eng", "member_count": 12, "created_at": "y"}],
        })

        workspaces = await client.list_workspaces()

        assert workspaces[0].member_count == 12
        assert workspaces[0].created_at == "y"

    @pytest.mark.asyncio
    async def test_space_video_membership(self, client, fake_api):
        fake_api.add("POST", "/spaces/s/videos", status=204)
        fake_api.add("DELETE", "/spaces/s/videos/v", status=204)

        await client.add_video_to_space("s", "v")
        assert fake_api.last_json() == {"video_id": "v"}

        await client.remove_video_from_space("s", "v")
        assert fake_api.last_request.method == "DELETE"
        assert fake_api.last_request.url.path == "/v1/spaces/s/videos/v"

    @pytest.mark.asyncio
    async def test_get_space(self, client, fake_api):
        fake_api.add("GET", "/spaces/s", json_body={
            "id": "s", "name": "Sales", "description": "Demos",
            "member_count": 4, "video_count": 30,
        })

        space = await client.get_space("s")

        assert space.video_count == 30
        assert space.member_count == 4
        assert space.created_at is None


class TestEmbedding:
    @pytest.mark.asyncio
    async def test_embed_html_fallback_url(self, client, fake_api):
        fake_api.add("GET", "/videos/abc123", json_body={
            "id": "abc123", "title": "t", "status": "ready", "created_at": "z",
        })

        embed = await client.get_embed_html("abc123", width=800, height=450, autoplay=True)

        assert 'src="https://www.loom.com/embed/abc123?autoplay=1" width="800" height="450"' in embed.html
        assert "allowfullscreen" in embed.html
        assert len(fake_api.requests) == 1

    @pytest.mark.asyncio
    async def test_embed_html_defaults(self, client, fake_api, wire_video):
        fake_api.add("GET", "/videos/vid_1", json_body=wire_video)

        embed = await client.get_embed_html("vid_1")

        assert embed.html == (
            '<iframe src="https://www.loom.com/embed/vid_1" width="640" height="360" '
            'frameborder="0" webkitallowfullscreen mozallowfullscreen allowfullscreen></iframe>'
        )

    @pytest.mark.asyncio
    async def test_oembed(self, client, fake_api):
        fake_api.add("GET", "/oembed", json_body={
            "version": "1.0", "type": "video", "html": "<iframe/>", "width": 480,
            "height": 270, "title": "Demo", "thumbnail_url": "https://t",
            "thumbnail_width": 100, "thumbnail_height": 50,
            "provider_name": "Loom", "provider_url": "https://www.loom.com", "duration": 12,
        })

        oembed = await client.get_oembed("https://www.loom.com/share/v", max_width=480)

        params = fake_api.last_request.url.params
        assert params["url"] == "https://www.loom.com/share/v"
        assert params["maxwidth"] == "480"
        assert "maxheight" not in params
        assert oembed.provider_name == "Loom"
        assert oembed.thumbnail_height == 50

    @pytest.mark.asyncio
    async def test_record_link_omits_absent_fields(self, client, fake_api):
        fake_api.add("POST", "/record-links", json_body={"id": "rl", "url": "https://loom.com/r/rl"})

        link = await client.create_record_link(title="Bug report")

        assert fake_api.last_json() == {"title": "Bug report"}
        assert link.url == "https://loom.com/r/rl"
        assert link.expires_at is None

    @pytest.mark.asyncio
    async def test_record_link_all_fields(self, client, fake_api):
        fake_api.add("POST", "/record-links", json_body={
            "id": "rl", "url": "u", "title": "T", "expires_at": "2024-07-01T00:00:00Z",
        })

        link = await client.create_record_link(title="T", folder_id="f", expires_in_minutes=30)

        assert fake_api.last_json() == {"title": "T", "folder_id": "f", "expires_in_minutes": 30}
        assert link.expires_at == "2024-07-01T00:00:00Z"
