"""Resolver exception classes."""

from typing import Optional


class ResolverError(Exception):
    """Base exception for resolution and download failures."""

    status_code = 500
    message_key = "error.internal"


class InvalidReferenceError(ResolverError):
    """Input URL does not carry a recognizable numeric video id."""

    status_code = 400
    message_key = "error.invalid_url"


class UpstreamApiError(ResolverError):
    """Internal API call failed; the page scraper takes over."""

    message_key = "error.resolve_failed"


class ScrapeExtractionError(ResolverError):
    """No usable data island could be extracted from the video page."""

    message_key = "error.resolve_failed"


class DownloadExhaustedError(ResolverError):
    """Every download attempt failed."""

    message_key = "error.download_failed"

    def __init__(self, last_error: Optional[BaseException], attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"All {attempts} download attempts failed: {last_error}")


class BlockedUrlError(ResolverError):
    """Media URL resolves to a loopback, private or link-local address."""

    status_code = 403
    message_key = "error.private_ip"


class InvalidMediaUrlError(ResolverError):
    """Media URL has no usable host."""

    status_code = 400
    message_key = "error.invalid_media_url"
