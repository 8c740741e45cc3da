import json
import logging
from typing import Optional

import httpx

from ttresolve.config.settings import UpstreamConfig, config
from ttresolve.core.errors import UpstreamApiError
from ttresolve.models.internal import NativeDetail, VideoReference
from ttresolve.models.response import VideoResult
from ttresolve.services.identity import IdentityGenerator
from ttresolve.services.normalizer import map_detail

logger = logging.getLogger(__name__)

DETAIL_PATH = "/aweme/v1/multi/aweme/detail/"


class AwemeApiClient:
    """
    Primary extraction path: the mobile app's internal detail endpoint.
    Every failure surfaces as UpstreamApiError; retrying is left to the caller.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: UpstreamConfig = config.upstream,
        identity: Optional[IdentityGenerator] = None,
    ):
        self.client = client
        self.settings = settings
        self.identity = identity or IdentityGenerator()

    @property
    def endpoint(self) -> str:
        return f"https://{self.settings.api_host}{DETAIL_PATH}"

    def _headers(self) -> dict:
        return {
            "User-Agent": self.settings.api_user_agent,
            "Accept": "application/json",
            # signature slot the app fills in; left empty
            "X-Argus": "",
        }

    async def fetch_detail(self, reference: VideoReference) -> NativeDetail:
        identity = self.identity.generate()
        body = {"aweme_ids": f"[{reference.video_id}]", "request_source": "0"}

        try:
            resp = await self.client.post(
                self.endpoint,
                params=identity.query_parameters,
                json=body,
                headers=self._headers(),
                timeout=self.settings.timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise UpstreamApiError(f"API request failed: {e!r}") from e

        if not resp.is_success:
            raise UpstreamApiError(f"API returned HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise UpstreamApiError("API returned a non-JSON body") from e

        details = payload.get("aweme_details") if isinstance(payload, dict) else None
        if not isinstance(details, list) or not details:
            raise UpstreamApiError("API response has no aweme_details")

        detail = details[0]
        if not isinstance(detail, dict):
            raise UpstreamApiError("API detail entry is not an object")

        returned_id = detail.get("aweme_id")
        if returned_id is not None and str(returned_id) != reference.video_id:
            raise UpstreamApiError(f"API returned a different video ({returned_id})")

        return NativeDetail(data=detail)

    async def extract(self, reference: VideoReference) -> VideoResult:
        detail = await self.fetch_detail(reference)
        try:
            result = map_detail(detail, fallback_id=reference.video_id)
        except Exception as e:
            # mapping failures count as API failures
            raise UpstreamApiError(f"API detail could not be mapped: {e!r}") from e
        logger.info(f"API resolved video {reference.video_id} ({len(result.formats)} formats)")
        return result
