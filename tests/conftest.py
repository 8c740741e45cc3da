import ipaddress
import json
import socket
from typing import Callable, List

import httpx
import pytest

from ttresolve.infra.http import get_http_client
from ttresolve.main import app

API_HOST = "api16-normal-c-useast1a.tiktokv.com"
PAGE_HOST = "www.tiktok.com"

Handler = Callable[[httpx.Request], httpx.Response]


def mock_client(handler: Handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


PUBLIC_IP = "93.184.216.34"


def fake_dns(default_ip: str = PUBLIC_IP):
    """getaddrinfo stand-in: IP literals map to themselves, names to default_ip"""

    def getaddrinfo(host, port):
        try:
            ip = str(ipaddress.ip_address(host))
        except ValueError:
            ip = default_ip
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (ip, 0))]

    return getaddrinfo


def island_html(script_id: str, payload) -> str:
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return (
        "<html><head></head><body>"
        f'<script id="{script_id}" type="application/json">{body}</script>'
        "</body></html>"
    )


class Recorder:
    """Wraps a handler and keeps every request it saw"""

    def __init__(self, handler: Handler):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def for_host(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def anyio_backend():
    return 'asyncio'


@pytest.fixture
def upstream():
    """Route the app's outbound traffic to a stub handler"""

    def install(handler: Handler) -> Recorder:
        recorder = Recorder(handler)

        async def _client():
            async with mock_client(recorder) as client:
                yield client

        app.dependency_overrides[get_http_client] = _client
        return recorder

    yield install
    app.dependency_overrides.clear()


@pytest.fixture
def api_client():
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
