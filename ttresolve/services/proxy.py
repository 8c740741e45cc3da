import asyncio
import logging
import random
import string
from typing import Awaitable, Callable, Dict, Optional
from urllib.parse import quote

import httpx

from ttresolve.config.settings import ProxyConfig, UpstreamConfig, config
from ttresolve.core.errors import DownloadExhaustedError
from ttresolve.core.security import SecurityValidator
from ttresolve.models.internal import ProxiedMedia
from ttresolve.utils.filename import sanitize_filename
from ttresolve.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)

COOKIE_CHARS = string.ascii_lowercase + string.digits

Sleep = Callable[[float], Awaitable[None]]


class AttemptFailed(Exception):
    """One download attempt did not produce a usable payload"""


class DownloadProxy:
    """
    Fetch a media URL on behalf of a browser that cannot hotlink it.
    Each attempt sends a full browser fingerprint; later attempts add
    synthetic session cookies. Failed attempts back off exponentially.
    Every redirect hop is checked against internal addresses.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: ProxyConfig = config.proxy,
        upstream: UpstreamConfig = config.upstream,
        sleep: Sleep = asyncio.sleep,
        rng: Optional[random.Random] = None,
        validator: Optional[SecurityValidator] = None,
    ):
        self.client = client
        self.settings = settings
        self.upstream = upstream
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.validator = validator or SecurityValidator()

    def _random_token(self, length: int = 13) -> str:
        return "".join(self.rng.choices(COOKIE_CHARS, k=length))

    def headers_for_attempt(self, attempt: int) -> Dict[str, str]:
        """Header set for the given 1-based attempt number"""
        origin = self.upstream.platform_origin
        headers = {
            "User-Agent": self.upstream.browser_user_agent,
            "Referer": f"{origin}/",
            "Accept": "video/webm,video/mp4,video/*;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "Origin": origin,
            "sec-ch-ua": '"Not_A Brand";v="99", "Google Chrome";v="120", "Chromium";v="120"',
            "sec-ch-ua-mobile": "?0",
            "sec-ch-ua-platform": '"Windows"',
            "Sec-Fetch-Dest": "video",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "cross-site",
        }

        # Last resort: look like a browser that already holds a session
        if attempt >= self.settings.cookie_attempt:
            headers["Cookie"] = f"tt_csrf_token={self._random_token()}; ttwid={self._random_token()}"

        return headers

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt"""
        return self.settings.backoff_base_ms * (2 ** (attempt - 1)) / 1000

    async def _attempt(self, url: str, attempt: int) -> bytes:
        headers = self.headers_for_attempt(attempt)
        target = url

        # Redirects are walked here so every hop passes the address check
        for _hop in range(self.settings.max_redirects + 1):
            await self.validator.ensure_allowed(target)
            try:
                resp = await self.client.get(
                    target,
                    headers=headers,
                    timeout=self.settings.timeout_seconds,
                    follow_redirects=False,
                )
            except httpx.HTTPError as e:
                raise AttemptFailed(f"{type(e).__name__}: {e}") from e

            if not resp.has_redirect_location:
                break
            target = str(resp.url.join(resp.headers["Location"]))
        else:
            raise AttemptFailed(f"Exceeded {self.settings.max_redirects} redirects")

        if resp.status_code != 200:
            raise AttemptFailed(f"Upstream returned HTTP {resp.status_code}")
        if not resp.content:
            raise AttemptFailed("Upstream returned an empty body")
        return resp.content

    async def fetch(self, url: str, filename: Optional[str] = None) -> ProxiedMedia:
        safe_url = safe_url_for_log(url)
        last_error: Optional[BaseException] = None
        max_attempts = self.settings.max_attempts

        for attempt in range(1, max_attempts + 1):
            logger.info(f"Download attempt {attempt}/{max_attempts} for {safe_url}")
            try:
                content = await self._attempt(url, attempt)
            except AttemptFailed as e:
                logger.warning(f"Attempt {attempt} failed: {e}")
                last_error = e
                if attempt < max_attempts:
                    await self.sleep(self.backoff_delay(attempt))
                continue

            return ProxiedMedia(
                content=content,
                filename=sanitize_filename(filename, fallback=self.settings.default_filename),
                attempts=attempt,
            )

        raise DownloadExhaustedError(last_error, max_attempts)


def content_disposition(filename: str) -> str:
    try:
        filename.encode("latin-1")
    except UnicodeEncodeError:
        ascii_name = filename.encode("ascii", "ignore").decode() or "download.mp4"
        return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
    return f'attachment; filename="{filename}"'


def attachment_headers(media: ProxiedMedia) -> Dict[str, str]:
    """Headers that make the browser save the payload, from any origin"""
    return {
        "Content-Type": "video/mp4",
        "Content-Disposition": content_disposition(media.filename),
        "Content-Length": str(media.size),
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }
