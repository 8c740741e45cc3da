from .internal import ClientIdentity, NativeDetail, ProxiedMedia, ScrapedDetail, VideoReference
from .request import ResolveRequest
from .response import MediaFormat, VideoMetadata, VideoResult

__all__ = [
    "ClientIdentity",
    "MediaFormat",
    "NativeDetail",
    "ProxiedMedia",
    "ResolveRequest",
    "ScrapedDetail",
    "VideoMetadata",
    "VideoReference",
    "VideoResult",
]
