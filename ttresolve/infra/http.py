from typing import AsyncIterator

import httpx

from ttresolve.config.settings import config


def build_http_client(**kwargs) -> httpx.AsyncClient:
    """
    Outbound client for one inbound request. Nothing (cookies, identity,
    connections) is shared between requests.
    """
    kwargs.setdefault("timeout", config.upstream.timeout_seconds)
    kwargs.setdefault("max_redirects", config.proxy.max_redirects)
    return httpx.AsyncClient(**kwargs)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """FastAPI dependency; the client is closed when the request ends"""
    async with build_http_client() as client:
        yield client
