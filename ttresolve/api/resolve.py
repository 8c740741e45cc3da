import functools
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response

from ttresolve.core.errors import ResolverError
from ttresolve.core.logging import log_error, log_info
from ttresolve.i18n import i18n
from ttresolve.infra.http import get_http_client
from ttresolve.models.request import ResolveRequest
from ttresolve.models.response import ErrorResponse, MessageResponse, VideoResult
from ttresolve.services.proxy import DownloadProxy, attachment_headers
from ttresolve.services.resolver import VideoResolver
from ttresolve.utils.locale import get_locale, safe_url_for_log

router = APIRouter()


def get_resolver(client: httpx.AsyncClient = Depends(get_http_client)) -> VideoResolver:
    return VideoResolver.from_client(client)


def get_download_proxy(client: httpx.AsyncClient = Depends(get_http_client)) -> DownloadProxy:
    return DownloadProxy(client)


@router.post(
    "/resolve",
    response_model=VideoResult,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def resolve_video(
    request: Request,
    video_request: Optional[ResolveRequest] = None,
    resolver: VideoResolver = Depends(get_resolver),
):
    """Resolve a share URL into downloadable formats and metadata"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    if video_request is None or not video_request.url:
        return JSONResponse(status_code=400, content={"error": _("error.url_required")})

    url = video_request.url
    log_info(request, f"Resolving {safe_url_for_log(url)}")

    try:
        result = await resolver.resolve(url)
    except ResolverError:
        raise
    except Exception as e:
        log_error(request, f"Resolve error: {e!r}")
        return JSONResponse(status_code=500, content={"error": _("error.internal")})

    log_info(request, f"Resolved video {result.metadata.id} with {len(result.formats)} formats")
    return result


@router.get(
    "/resolve",
    response_model=None,
    responses={
        200: {"content": {"video/mp4": {}}, "model": MessageResponse},
        500: {"model": ErrorResponse},
    },
)
async def proxy_download(
    request: Request,
    url: Optional[str] = Query(None, description="Media URL taken from a resolved format"),
    filename: Optional[str] = Query(None, description="Name for the saved file"),
    mode: Optional[str] = Query("proxy", description="Only 'proxy' is supported"),
    proxy: DownloadProxy = Depends(get_download_proxy),
):
    """Download a media URL server-side and return it as an attachment"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    if not url:
        return JSONResponse(status_code=200, content={"message": _("response.proxy_usage")})

    log_info(request, f"Proxying download for {safe_url_for_log(url)} (mode={mode})")

    # DownloadExhaustedError and BlockedUrlError are rendered by the app-level handler
    media = await proxy.fetch(url, filename)

    log_info(request, f"Proxied {media.size} bytes as {media.filename} after {media.attempts} attempt(s)")
    return Response(content=media.content, headers=attachment_headers(media))
