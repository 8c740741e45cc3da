import asyncio
import ipaddress
import logging
import socket
from enum import Enum, auto
from typing import Callable
from urllib.parse import urlparse

from ttresolve.config.settings import SecurityConfig, config
from ttresolve.core.errors import BlockedUrlError, InvalidMediaUrlError
from ttresolve.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)


class UrlValidationResult(Enum):
    """URL validation result without throwing exceptions"""
    OK = auto()
    BLOCKED = auto()
    INVALID = auto()


class SecurityValidator:
    """
    Validate proxied URLs against SSRF.
    Returns a result enum; `ensure_allowed` turns it into an exception.
    """

    def __init__(
        self,
        settings: SecurityConfig = config.security,
        getaddrinfo: Callable = socket.getaddrinfo,
    ):
        self.settings = settings
        self.getaddrinfo = getaddrinfo

    def _is_blocked(self, ip) -> bool:
        if not self.settings.allow_localhost and ip.is_loopback:
            return True
        if not self.settings.allow_private_ips and ip.is_private and not ip.is_loopback:
            return True
        return ip.is_link_local or ip.is_multicast or ip.is_unspecified

    async def validate_url(self, url: str) -> UrlValidationResult:
        if not self.settings.enable_ssrf_protection:
            return UrlValidationResult.OK

        try:
            parsed = urlparse(url)
        except ValueError:
            return UrlValidationResult.INVALID

        hostname = parsed.hostname
        if parsed.scheme not in ("http", "https") or not hostname:
            return UrlValidationResult.INVALID

        # Async DNS resolution
        try:
            addr_info = await asyncio.to_thread(self.getaddrinfo, hostname, None)
        except (socket.gaierror, UnicodeError):
            # DNS failed - the fetch itself will fail and be retried
            return UrlValidationResult.OK

        for info in addr_info:
            try:
                ip = ipaddress.ip_address(info[4][0])
            except ValueError:
                # scoped IPv6 literals like fe80::1%eth0
                return UrlValidationResult.BLOCKED
            if self._is_blocked(ip):
                return UrlValidationResult.BLOCKED

        return UrlValidationResult.OK

    async def ensure_allowed(self, url: str) -> None:
        result = await self.validate_url(url)
        if result == UrlValidationResult.BLOCKED:
            logger.warning(f"Blocked request to internal address: {safe_url_for_log(url)}")
            raise BlockedUrlError(f"URL resolves to a blocked address: {safe_url_for_log(url)}")
        if result == UrlValidationResult.INVALID:
            raise InvalidMediaUrlError(f"URL is not a valid http(s) URL: {safe_url_for_log(url)}")
