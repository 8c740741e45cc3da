import logging

import httpx

from ttresolve.config.settings import UpstreamConfig, config
from ttresolve.core.errors import UpstreamApiError
from ttresolve.models.response import VideoResult
from ttresolve.services.api_client import AwemeApiClient
from ttresolve.services.reference import parse_reference
from ttresolve.services.scraper import PageScraper

logger = logging.getLogger(__name__)


class VideoResolver:
    """Share URL -> VideoResult: internal API first, page scrape on failure"""

    def __init__(self, api_client: AwemeApiClient, scraper: PageScraper, settings: UpstreamConfig = config.upstream):
        self.api_client = api_client
        self.scraper = scraper
        self.settings = settings

    @classmethod
    def from_client(cls, client: httpx.AsyncClient, settings: UpstreamConfig = config.upstream) -> "VideoResolver":
        return cls(
            api_client=AwemeApiClient(client, settings),
            scraper=PageScraper(client, settings),
            settings=settings,
        )

    async def resolve(self, raw_url: str) -> VideoResult:
        reference = parse_reference(raw_url, domain=self.settings.platform_domain)

        try:
            return await self.api_client.extract(reference)
        except UpstreamApiError as e:
            logger.warning(f"API extraction failed for {reference.video_id}, falling back to web scraping: {e}")

        return await self.scraper.extract(reference)
