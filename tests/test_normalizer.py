import pytest

from ttresolve.models.internal import NativeDetail, ScrapedDetail
from ttresolve.models.response import VideoMetadata
from ttresolve.services.normalizer import (
    as_url_list,
    map_detail,
    map_native_detail,
    map_scraped_detail,
    prefer_cdn_urls,
    scan_video_urls,
)


def test_as_url_list_accepts_scalar_or_sequence():
    assert as_url_list("https://a/1.mp4") == ["https://a/1.mp4"]
    assert as_url_list(["https://a/1.mp4", "", None, "https://a/1.mp4", "https://a/2.mp4"]) == [
        "https://a/1.mp4",
        "https://a/2.mp4",
    ]
    assert as_url_list(None) == []
    assert as_url_list({"url": "x"}) == []


class TestCdnPreference:
    """Host classification is a preference ordering, not a correctness filter"""

    def test_prefers_cdn_hosts(self):
        urls = [
            "https://www.tiktok.com/aweme/v1/play/?video_id=1",
            "https://v16m.tiktokcdn.com/abc/video.mp4",
            "https://v19.muscdn.com/abc/video.mp4",
        ]
        assert prefer_cdn_urls(urls) == urls[1:]

    def test_keeps_everything_when_nothing_qualifies(self):
        urls = ["https://www.tiktok.com/a.mp4", "https://api.tiktokv.com/b.mp4"]
        assert prefer_cdn_urls(urls) == urls

    @pytest.mark.parametrize(
        "urls",
        [
            ["https://www.tiktok.com/a.mp4"],
            ["https://v.tiktokcdn.com/a.mp4"],
            ["not a url"],
            ["https://www.tiktok.com/a.mp4", "https://v.tiktokcdn.com/a.mp4"],
        ],
    )
    def test_never_empties_a_non_empty_list(self, urls):
        assert prefer_cdn_urls(urls)

    def test_empty_stays_empty(self):
        assert prefer_cdn_urls([]) == []


class TestMetadataDefaults:
    def test_blank_input_gets_defaults(self):
        meta = VideoMetadata(id="42", title="   ", author=None, music={}, stats=None, thumbnail_urls=None)
        assert meta.title == "TikTok video #42"
        assert meta.author.display_name == "Unknown"
        assert meta.author.handle == "unknown"
        assert meta.music.title == "Original sound"
        assert meta.music.artist == ""
        assert meta.stats.views == meta.stats.likes == meta.stats.comments == meta.stats.shares == 0
        assert meta.thumbnail_urls == []
        assert meta.duration_ms == 0

    def test_defaults_are_idempotent(self):
        meta = VideoMetadata(id="42", stats={"views": "17", "likes": None})
        assert VideoMetadata.model_validate(meta.model_dump()) == meta
        assert VideoMetadata.model_validate(meta.model_dump(by_alias=True)) == meta

    def test_counters_are_coerced(self):
        meta = VideoMetadata(id="1", stats={"views": "1200", "likes": 3.0, "comments": "n/a", "shares": -5})
        assert meta.stats.model_dump() == {"views": 1200, "likes": 3, "comments": 0, "shares": 0}

    def test_camel_case_wire_names(self):
        meta = VideoMetadata(id="1", thumbnail_urls=["https://p/1.jpg"], duration_ms=1500)
        dumped = meta.model_dump(by_alias=True)
        assert dumped["thumbnailUrls"] == ["https://p/1.jpg"]
        assert dumped["durationMs"] == 1500
        assert dumped["author"] == {"displayName": "Unknown", "handle": "unknown"}


def test_native_mapping():
    detail = NativeDetail(
        data={
            "aweme_id": "7",
            "desc": "hello",
            "author": {"nickname": "Alice", "unique_id": "alice"},
            "statistics": {"play_count": 10, "digg_count": 2, "comment_count": 1, "share_count": 0},
            "video": {
                "play_addr": {
                    "url_list": ["https://www.tiktok.com/play/7", "https://v16.tiktokcdn.com/7.mp4"]
                },
                "download_addr": {"url_list": ["https://www.tiktok.com/dl/7"]},
                "has_watermark": True,
                "cover": {"url_list": ["https://p16.tiktokcdn.com/7.jpg"]},
                "duration": 15000,
            },
            "bit_rate": [
                {"gear_name": "normal_720_0", "bit_rate": 1200000, "play_addr": {"url_list": ["https://v.tiktokcdn.com/720"]}},
                {"gear_name": "empty", "play_addr": {"url_list": []}},
            ],
            "music": {"title": "Song", "author": "Band", "play_url": {"url_list": ["https://sf.tiktokcdn.com/m.mp3"]}},
        }
    )
    result = map_native_detail(detail)

    assert [f.kind for f in result.formats] == ["direct", "download", "alternative", "audio"]
    direct, download, alternative, audio = result.formats
    assert direct.candidate_urls == ["https://v16.tiktokcdn.com/7.mp4"]
    assert direct.is_watermarked is False
    assert download.is_watermarked is True
    assert download.quality_label == "medium"
    assert alternative.quality_label == "normal_720_0"
    assert alternative.bitrate == 1200000
    assert audio.container_format == "mp3"

    meta = result.metadata
    assert meta.id == "7"
    assert meta.title == "hello"
    assert meta.author.display_name == "Alice"
    assert meta.music.artist == "Band"
    assert meta.stats.views == 10
    assert meta.thumbnail_urls == ["https://p16.tiktokcdn.com/7.jpg"]
    assert meta.duration_ms == 15000


def test_native_mapping_tolerates_empty_detail():
    result = map_native_detail(NativeDetail(data={}), fallback_id="99")
    assert result.formats == []
    assert result.metadata.id == "99"
    assert result.metadata.title == "TikTok video #99"


def test_native_mapping_coerces_odd_gear_names():
    detail = NativeDetail(
        data={
            "bit_rate": [
                {"gear_name": 720, "play_addr": {"url_list": ["https://v.tiktokcdn.com/720"]}},
                {"gear_name": "  ", "play_addr": {"url_list": ["https://v.tiktokcdn.com/blank"]}},
            ]
        }
    )
    labels = [f.quality_label for f in map_native_detail(detail).formats]
    assert labels == ["720", "alternative"]


def test_native_download_without_flag_is_unwatermarked():
    result = map_native_detail(NativeDetail(data={"video": {"download_addr": {"url_list": ["https://v.tiktokcdn.com/d"]}}}))
    assert result.formats[0].kind == "download"
    assert result.formats[0].is_watermarked is False


def test_scraped_mapping():
    detail = ScrapedDetail(
        island="universal_rehydration",
        data={
            "id": "8",
            "desc": "",
            "author": {"nickname": "Bob", "uniqueId": "bob"},
            "statsV2": {"playCount": "1500", "diggCount": "12"},
            "video": {
                "playAddr": "https://v16-webapp.tiktok.com/8/video.mp4",
                "downloadAddr": ["https://v16-webapp.tiktok.com/8/dl.mp4"],
                "cover": "https://p16.tiktokcdn.com/8.jpg",
                "originCover": "https://p16.tiktokcdn.com/8.jpg",
                "duration": 12,
            },
            "music": {"title": "", "authorName": "Bob", "playUrl": "https://sf.tiktokcdn.com/8.mp3"},
        },
    )
    result = map_scraped_detail(detail)

    kinds = [f.kind for f in result.formats]
    assert kinds == ["direct", "download", "alternative", "audio"]
    assert result.formats[0].candidate_urls == ["https://v16-webapp.tiktok.com/8/video.mp4"]
    assert result.formats[1].is_watermarked is True
    assert "https://v16-webapp.tiktok.com/8/video.mp4" in result.formats[2].candidate_urls

    meta = result.metadata
    assert meta.title == "TikTok video #8"
    assert meta.author.handle == "bob"
    assert meta.music.title == "Original sound"
    assert meta.stats.views == 1500
    assert meta.stats.likes == 12
    assert meta.thumbnail_urls == ["https://p16.tiktokcdn.com/8.jpg"]
    assert meta.duration_ms == 12000


def test_scraped_legacy_author_handle():
    detail = ScrapedDetail(island="sigi_state", data={"id": "9", "author": "carol", "nickname": "Carol"})
    meta = map_scraped_detail(detail).metadata
    assert meta.author.handle == "carol"
    assert meta.author.display_name == "Carol"


def test_map_detail_dispatches_on_source():
    native = map_detail(NativeDetail(data={"video": {"play_addr": {"url_list": ["https://v.tiktokcdn.com/a.mp4"]}}}))
    scraped = map_detail(ScrapedDetail(island="next_data", data={"video": {"playAddr": "https://x.mp4"}}))
    assert native.formats[0].candidate_urls == ["https://v.tiktokcdn.com/a.mp4"]
    assert scraped.formats[0].candidate_urls == ["https://x.mp4"]


class TestDeepScan:
    """Best-effort heuristic: collects what looks like video links"""

    def test_collects_video_looking_urls(self):
        found = scan_video_urls(
            {
                "a": "https://cdn.example.com/clip.MP4",
                "b": "https://cdn.example.com/watch/video/1",
                "c": "https://cdn.example.com/image.jpg",
                "d": "ftp://cdn.example.com/video.mp4",
                "e": ["https://cdn.example.com/list.webm"],
            }
        )
        assert found == [
            "https://cdn.example.com/clip.MP4",
            "https://cdn.example.com/watch/video/1",
            "https://cdn.example.com/list.webm",
        ]

    def test_depth_is_bounded(self):
        found = scan_video_urls(
            {"a": {"b": {"c": {"url": "https://v.example.com/3.mp4", "d": {"url": "https://v.example.com/4.mp4"}}}}}
        )
        assert found == ["https://v.example.com/3.mp4"]

    def test_duplicates_are_dropped(self):
        assert scan_video_urls({"a": "https://v/x.mp4", "b": {"c": "https://v/x.mp4"}}) == ["https://v/x.mp4"]
