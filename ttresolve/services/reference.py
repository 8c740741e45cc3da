import re
from typing import Optional

from ttresolve.core.errors import InvalidReferenceError
from ttresolve.models.internal import VideoReference

PLATFORM_DOMAIN = "www.tiktok.com"
HANDLE_SENTINEL = "_"

# https://www.tiktok.com/@alice/video/123, https://www.tiktok.com/embed/v2/123
_REFERENCE_RE = re.compile(
    r"https?://(?:www\.|m\.)?tiktok\.com/"
    r"(?:embed(?:/v2)?|@(?P<handle>[\w.-]+)?/video)/(?P<id>\d+)",
    re.IGNORECASE,
)


def build_canonical_url(handle: Optional[str], video_id: str, domain: str = PLATFORM_DOMAIN) -> str:
    return f"https://{domain}/@{handle or HANDLE_SENTINEL}/video/{video_id}"


def parse_reference(raw: Optional[str], domain: str = PLATFORM_DOMAIN) -> VideoReference:
    """
    Extract the (handle, numeric id) pair from a share URL.
    Raises InvalidReferenceError when no id can be captured.
    """
    if not raw or not raw.strip():
        raise InvalidReferenceError("URL is empty")

    match = _REFERENCE_RE.search(raw.strip())
    if not match or not match.group("id"):
        raise InvalidReferenceError(f"Not a recognizable TikTok video URL: {raw[:200]}")

    video_id = match.group("id")
    handle = match.group("handle") or HANDLE_SENTINEL
    return VideoReference(
        video_id=video_id,
        author_handle=handle,
        canonical_url=build_canonical_url(handle, video_id, domain),
    )
