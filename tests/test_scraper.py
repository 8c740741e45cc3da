import json

import httpx
import pytest

from conftest import island_html, mock_client
from ttresolve.core.errors import ScrapeExtractionError
from ttresolve.services.reference import parse_reference
from ttresolve.services.scraper import PageScraper

REFERENCE = parse_reference("https://www.tiktok.com/@alice/video/123456789")


def universal(item):
    return island_html(
        "__UNIVERSAL_DATA_FOR_REHYDRATION__",
        {"__DEFAULT_SCOPE__": {"webapp.video-detail": {"itemInfo": {"itemStruct": item}}}},
    )


def sigi(item, video_id="123456789", script_id="SIGI_STATE"):
    return island_html(script_id, {"ItemModule": {video_id: item}})


def next_data(item):
    return island_html("__NEXT_DATA__", {"props": {"pageProps": {"itemInfo": {"itemStruct": item}}}})


def scraper() -> PageScraper:
    return PageScraper(client=None)


def test_universal_island_wins():
    html = next_data({"id": "next"}) + universal({"id": "universal"})
    detail = scraper().extract_detail(html, "123456789")
    assert detail.island == "universal_rehydration"
    assert detail.data["id"] == "universal"


def test_unparsable_island_falls_through():
    html = island_html("__UNIVERSAL_DATA_FOR_REHYDRATION__", "{broken") + sigi({"id": "sigi"})
    detail = scraper().extract_detail(html, "123456789")
    assert detail.island == "sigi_state"
    assert detail.data["id"] == "sigi"


def test_island_without_item_falls_through():
    html = universal(None) + next_data({"id": "next"})
    detail = scraper().extract_detail(html, "123456789")
    assert detail.island == "next_data"


def test_persisted_state_alias_is_recognized():
    html = sigi({"id": "legacy"}, script_id="sigi-persisted-data")
    assert scraper().extract_detail(html, "123456789").data["id"] == "legacy"


def test_persisted_state_is_keyed_by_video_id():
    html = sigi({"id": "other"}, video_id="555")
    with pytest.raises(ScrapeExtractionError):
        scraper().extract_detail(html, "123456789")


def test_no_island_is_terminal():
    with pytest.raises(ScrapeExtractionError):
        scraper().extract_detail("<html><script>var x = 1;</script></html>", "123456789")


@pytest.mark.asyncio
async def test_extract_fetches_canonical_url_with_browser_headers():
    seen = []
    html = universal({"id": "123456789", "video": {"playAddr": ["https://x.mp4"], "downloadAddr": "https://y.mp4"}})

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=html)

    async with mock_client(handler) as client:
        result = await PageScraper(client).extract(REFERENCE)

    assert str(seen[0].url) == REFERENCE.canonical_url
    assert seen[0].headers["Referer"] == "https://www.tiktok.com/"
    assert "Chrome" in seen[0].headers["User-Agent"]
    formats = {f.kind: f for f in result.formats}
    assert formats["direct"].candidate_urls == ["https://x.mp4"]
    assert formats["download"].is_watermarked is True


@pytest.mark.asyncio
async def test_page_error_is_terminal():
    async with mock_client(lambda request: httpx.Response(404)) as client:
        with pytest.raises(ScrapeExtractionError):
            await PageScraper(client).extract(REFERENCE)


@pytest.mark.asyncio
async def test_page_transport_error_is_terminal():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(ScrapeExtractionError):
            await PageScraper(client).extract(REFERENCE)


def test_island_payload_may_contain_html_like_text():
    item = {"id": "123456789", "desc": "a <b>bold</b> caption"}
    html = island_html("__UNIVERSAL_DATA_FOR_REHYDRATION__", json.dumps(
        {"__DEFAULT_SCOPE__": {"webapp.video-detail": {"itemInfo": {"itemStruct": item}}}}
    ))
    assert scraper().extract_detail(html, "123456789").data["desc"] == "a <b>bold</b> caption"
