import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import httpx

from ttresolve.config.settings import UpstreamConfig, config
from ttresolve.core.errors import ScrapeExtractionError
from ttresolve.models.internal import ScrapedDetail, VideoReference
from ttresolve.models.response import VideoResult
from ttresolve.services.normalizer import dig, map_detail
from ttresolve.utils.locale import safe_url_for_log

logger = logging.getLogger(__name__)


def _script_pattern(ids: str) -> "re.Pattern[str]":
    return re.compile(
        rf'<script[^>]+\bid="(?:{ids})"[^>]*>(.*?)</script>',
        re.DOTALL,
    )


@dataclass(frozen=True)
class DataIsland:
    """Embedded JSON script block and the key path to the item detail"""
    name: str
    pattern: "re.Pattern[str]"
    locate: Callable[[dict, str], object]


DATA_ISLANDS: Tuple[DataIsland, ...] = (
    DataIsland(
        name="universal_rehydration",
        pattern=_script_pattern("__UNIVERSAL_DATA_FOR_REHYDRATION__"),
        locate=lambda doc, _id: dig(doc, "__DEFAULT_SCOPE__", "webapp.video-detail", "itemInfo", "itemStruct"),
    ),
    DataIsland(
        name="sigi_state",
        pattern=_script_pattern("SIGI_STATE|sigi-persisted-data"),
        locate=lambda doc, video_id: dig(doc, "ItemModule", video_id),
    ),
    DataIsland(
        name="next_data",
        pattern=_script_pattern("__NEXT_DATA__"),
        locate=lambda doc, _id: dig(doc, "props", "pageProps", "itemInfo", "itemStruct"),
    ),
)


class PageScraper:
    """Fallback path: read the item detail out of the public video page."""

    def __init__(self, client: httpx.AsyncClient, settings: UpstreamConfig = config.upstream):
        self.client = client
        self.settings = settings

    def _headers(self) -> dict:
        return {
            "User-Agent": self.settings.browser_user_agent,
            "Accept": (
                "text/html,application/xhtml+xml,application/xml;q=0.9,"
                "image/avif,image/webp,image/apng,*/*;q=0.8"
            ),
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": f"{self.settings.platform_origin}/",
        }

    async def fetch_page(self, url: str) -> str:
        try:
            resp = await self.client.get(
                url,
                headers=self._headers(),
                timeout=self.settings.timeout_seconds,
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            raise ScrapeExtractionError(f"Page request failed: {e!r}") from e

        if not resp.is_success:
            raise ScrapeExtractionError(f"Page returned HTTP {resp.status_code}")
        return resp.text

    @staticmethod
    def _read_island(island: DataIsland, html: str, video_id: str) -> Optional[dict]:
        match = island.pattern.search(html)
        if not match:
            return None
        try:
            document = json.loads(match.group(1))
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse {island.name} data: {e}")
            return None

        detail = island.locate(document, video_id)
        return detail if isinstance(detail, dict) and detail else None

    def extract_detail(self, html: str, video_id: str) -> ScrapedDetail:
        """Try each data island in priority order; the first usable one wins."""
        for island in DATA_ISLANDS:
            detail = self._read_island(island, html, video_id)
            if detail is not None:
                logger.debug(f"Video {video_id} found in {island.name}")
                return ScrapedDetail(island=island.name, data=detail)
            logger.debug(f"No usable {island.name} data for {video_id}")

        raise ScrapeExtractionError("Could not extract video data from webpage")

    async def extract(self, reference: VideoReference) -> VideoResult:
        html = await self.fetch_page(reference.canonical_url)
        detail = self.extract_detail(html, reference.video_id)
        result = map_detail(detail, fallback_id=reference.video_id)
        logger.info(
            f"Page {safe_url_for_log(reference.canonical_url)} resolved via {detail.island} "
            f"({len(result.formats)} formats)"
        )
        return result
