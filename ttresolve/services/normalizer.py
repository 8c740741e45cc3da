"""
Mapping of upstream detail objects into VideoResult.

Two structured mappers exist, one per schema: the internal API returns
snake_case records (play_addr.url_list, statistics, ...) and the page data
islands carry camelCase records (playAddr, stats, ...). Defaults for
metadata are applied by the response models themselves, so the mappers
only collect what is present and never fail on partial input.
"""
from typing import Any, Iterable, List, Optional
from urllib.parse import urlparse

from ttresolve.models.internal import DetailObject, NativeDetail, ScrapedDetail
from ttresolve.models.response import MediaFormat, VideoMetadata, VideoResult

CDN_MARKERS = ("tiktokcdn", "bytedance", "byteoversea", "ibyteimg")
PLATFORM_MARKER = "tiktok"
VIDEO_EXTENSIONS = (".mp4", ".mov", ".webm", ".m4v", ".m3u8")
SCAN_MAX_DEPTH = 3


def dig(obj: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing"""
    for key in keys:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def as_url_list(value: Any) -> List[str]:
    """Accept a single URL or a sequence of them; drop blanks and repeats"""
    if isinstance(value, str):
        candidates: Iterable[Any] = [value]
    elif isinstance(value, (list, tuple)):
        candidates = value
    else:
        return []

    urls: List[str] = []
    for url in candidates:
        if isinstance(url, str) and url.strip() and url not in urls:
            urls.append(url)
    return urls


def _host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_cdn_url(url: str) -> bool:
    host = _host(url)
    return any(marker in host for marker in CDN_MARKERS) or PLATFORM_MARKER not in host


def prefer_cdn_urls(urls: List[str]) -> List[str]:
    """
    Keep CDN-looking URLs over platform-domain ones. This is a preference,
    not a guarantee: when nothing qualifies the original list is returned.
    """
    preferred = [url for url in urls if is_cdn_url(url)]
    return preferred or list(urls)


def build_format(
    kind: str,
    urls: List[str],
    quality: str,
    watermarked: bool = False,
    container: str = "mp4",
    bitrate: Optional[int] = None,
) -> Optional[MediaFormat]:
    if not urls:
        return None
    return MediaFormat(
        kind=kind,
        candidate_urls=urls,
        container_format=container,
        quality_label=quality,
        is_watermarked=watermarked,
        bitrate=bitrate if isinstance(bitrate, int) and not isinstance(bitrate, bool) else None,
    )


def looks_like_video_url(value: str) -> bool:
    if not value.startswith(("http://", "https://")):
        return False
    if "video" in value:
        return True
    try:
        path = urlparse(value).path.lower()
    except ValueError:
        return False
    return path.endswith(VIDEO_EXTENSIONS)


def scan_video_urls(obj: Any, max_depth: int = SCAN_MAX_DEPTH) -> List[str]:
    """
    Best-effort pass: depth-first walk collecting anything that looks like
    a video URL. Catches links moved by schema drift; precision is not
    guaranteed.
    """
    found: List[str] = []

    def walk(node: Any, depth: int) -> None:
        if depth > max_depth:
            return
        if isinstance(node, dict):
            children: Iterable[Any] = node.values()
        elif isinstance(node, list):
            children = node
        else:
            return
        for child in children:
            if isinstance(child, str):
                if looks_like_video_url(child) and child not in found:
                    found.append(child)
            elif isinstance(child, (dict, list)):
                walk(child, depth + 1)

    walk(obj, 0)
    return found


def _collect(*formats: Optional[MediaFormat]) -> List[MediaFormat]:
    return [f for f in formats if f is not None]


def map_native_detail(detail: NativeDetail, fallback_id: str = "") -> VideoResult:
    """Internal API record -> VideoResult"""
    data = detail.data
    video = data.get("video") if isinstance(data.get("video"), dict) else {}
    music = data.get("music") if isinstance(data.get("music"), dict) else {}

    formats = _collect(
        build_format("direct", prefer_cdn_urls(as_url_list(dig(video, "play_addr", "url_list"))), "high"),
        build_format(
            "download",
            as_url_list(dig(video, "download_addr", "url_list")),
            "medium",
            watermarked=bool(video.get("has_watermark")),
        ),
    )

    bit_rates = data.get("bit_rate")
    if not isinstance(bit_rates, list):
        bit_rates = video.get("bit_rate")
    for entry in bit_rates if isinstance(bit_rates, list) else []:
        if not isinstance(entry, dict):
            continue
        alternative = build_format(
            "alternative",
            as_url_list(dig(entry, "play_addr", "url_list")),
            str(entry.get("gear_name") or "").strip() or "alternative",
            bitrate=entry.get("bit_rate"),
        )
        if alternative:
            formats.append(alternative)

    audio = build_format("audio", as_url_list(dig(music, "play_url", "url_list")), "audio", container="mp3")
    if audio:
        formats.append(audio)

    statistics = data.get("statistics") or {}
    metadata = VideoMetadata(
        id=data.get("aweme_id") or fallback_id,
        title=data.get("desc"),
        author={
            "display_name": dig(data, "author", "nickname"),
            "handle": dig(data, "author", "unique_id"),
        },
        music={"title": music.get("title"), "artist": music.get("author")},
        stats={
            "views": dig(statistics, "play_count"),
            "likes": dig(statistics, "digg_count"),
            "comments": dig(statistics, "comment_count"),
            "shares": dig(statistics, "share_count"),
        },
        thumbnail_urls=as_url_list(dig(video, "cover", "url_list")),
        duration_ms=video.get("duration"),
    )
    return VideoResult(formats=formats, metadata=metadata)


def _scraped_author(data: dict) -> dict:
    author = data.get("author")
    if isinstance(author, str):
        # legacy persisted-state items carry the handle only
        return {"display_name": data.get("nickname") or author, "handle": author}
    return {"display_name": dig(author, "nickname"), "handle": dig(author, "uniqueId")}


def _scraped_stats(data: dict) -> dict:
    stats = data.get("stats") if isinstance(data.get("stats"), dict) else {}
    stats_v2 = data.get("statsV2") if isinstance(data.get("statsV2"), dict) else {}

    def pick(key: str) -> Any:
        value = stats.get(key)
        return value if value is not None else stats_v2.get(key)

    return {
        "views": pick("playCount"),
        "likes": pick("diggCount"),
        "comments": pick("commentCount"),
        "shares": pick("shareCount"),
    }


def map_scraped_detail(detail: ScrapedDetail, fallback_id: str = "") -> VideoResult:
    """Page data island record -> VideoResult"""
    data = detail.data
    video = data.get("video") if isinstance(data.get("video"), dict) else {}
    music = data.get("music") if isinstance(data.get("music"), dict) else {}

    formats = _collect(
        build_format("direct", as_url_list(video.get("playAddr")), "high"),
        # no watermark flag in this schema; assume the download link has one
        build_format("download", as_url_list(video.get("downloadAddr")), "medium", watermarked=True),
        build_format("alternative", scan_video_urls(data), "alternative"),
        build_format("audio", as_url_list(music.get("playUrl")), "audio", container="mp3"),
    )

    thumbnails = as_url_list([video.get("cover"), video.get("originCover")])
    duration = video.get("duration")
    metadata = VideoMetadata(
        id=data.get("id") or fallback_id,
        title=data.get("desc"),
        author=_scraped_author(data),
        music={"title": music.get("title"), "artist": music.get("authorName")},
        stats=_scraped_stats(data),
        thumbnail_urls=thumbnails,
        # seconds in this schema
        duration_ms=int(duration * 1000) if isinstance(duration, (int, float)) and not isinstance(duration, bool) else 0,
    )
    return VideoResult(formats=formats, metadata=metadata)


def map_detail(detail: DetailObject, fallback_id: str = "") -> VideoResult:
    if isinstance(detail, NativeDetail):
        return map_native_detail(detail, fallback_id)
    return map_scraped_detail(detail, fallback_id)
