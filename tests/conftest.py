"""
Pytest configuration and shared fixtures for the Loom tool server tests
"""
import json

import httpx
import pytest

from core.config import ServerConfig
from core.loom_client import LoomClient
from core.models import TenantCredentials
from tools.handlers import LoomToolHandlers


class FakeLoomApi:
    """Route table behind an httpx.MockTransport that records every request."""

    def __init__(self, prefix: str = "/v1"):
        self.prefix = prefix
        self.routes = {}
        self.requests = []

    def add(self, method, path, status=200, json_body=None, headers=None, text=None):
        self.routes[(method, path)] = (status, json_body, headers or {}, text)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith(self.prefix):
            path = path[len(self.prefix):]
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(500, json={"message": f"no route for {request.method} {path}"})
        status, json_body, headers, text = route
        if text is not None:
            return httpx.Response(status, text=text, headers=headers)
        if json_body is None:
            return httpx.Response(status, headers=headers)
        return httpx.Response(status, json=json_body, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last_request.content)


@pytest.fixture
def fake_api():
    return FakeLoomApi()


@pytest.fixture
def credentials():
    return TenantCredentials(access_token="test-token")


@pytest.fixture
def client(fake_api, credentials):
    return LoomClient(credentials, transport=fake_api.transport)


@pytest.fixture
def server_config():
    return ServerConfig()


@pytest.fixture
def handlers(fake_api, server_config):
    return LoomToolHandlers(
        server_config,
        client_factory=lambda creds: LoomClient(creds, transport=fake_api.transport),
    )


@pytest.fixture
def wire_video():
    """A fully populated video as the Loom API sends it"""
    return {
        "id": "vid_1",
        "title": "Sprint demo",
        "description": "Walkthrough of the new editor",
        "status": "ready",
        "duration": 312.5,
        "thumbnail_url": "https://cdn.loom.com/thumb.jpg",
        "embed_url": "https://www.loom.com/embed/vid_1",
        "share_url": "https://www.loom.com/share/vid_1",
        "download_url": "https://cdn.loom.com/vid_1.mp4",
        "view_count": 42,
        "privacy": "company",
        "created_at": "2024-05-01T10:00:00Z",
        "updated_at": "2024-05-02T10:00:00Z",
        "owner": {"id": "u_1", "name": "Ada Lovelace", "email": "ada@example.com"},
        "workspace": {"id": "ws_1", "name": "Engineering"},
        "folder_id": "fld_1",
    }
