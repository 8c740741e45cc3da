from .errors import (
    BlockedUrlError,
    DownloadExhaustedError,
    InvalidMediaUrlError,
    InvalidReferenceError,
    ResolverError,
    ScrapeExtractionError,
    UpstreamApiError,
)

__all__ = [
    "BlockedUrlError",
    "DownloadExhaustedError",
    "InvalidMediaUrlError",
    "InvalidReferenceError",
    "ResolverError",
    "ScrapeExtractionError",
    "UpstreamApiError",
]
