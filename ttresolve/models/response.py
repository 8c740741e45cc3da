from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

FormatKind = Literal["direct", "download", "alternative", "audio"]

DEFAULT_AUTHOR_NAME = "Unknown"
DEFAULT_AUTHOR_HANDLE = "unknown"
DEFAULT_MUSIC_TITLE = "Original sound"
TITLE_TEMPLATE = "TikTok video #{id}"


def _blank_to(value: Any, default: str) -> str:
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def _to_count(value: Any) -> int:
    """Upstream counters arrive as ints, floats or numeric strings"""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    if isinstance(value, str):
        try:
            return max(int(float(value.strip())), 0)
        except ValueError:
            return 0
    return 0


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MediaFormat(CamelModel):
    """One downloadable candidate; candidate_urls[0] is the first choice"""
    kind: FormatKind
    candidate_urls: List[str] = Field(..., min_length=1)
    container_format: Literal["mp4", "mp3"] = "mp4"
    quality_label: str
    is_watermarked: bool = False
    bitrate: Optional[int] = None

    @field_validator("quality_label", mode="before")
    @classmethod
    def coerce_quality_label(cls, v):
        return _blank_to(v, "unknown")


class Author(CamelModel):
    display_name: str = DEFAULT_AUTHOR_NAME
    handle: str = DEFAULT_AUTHOR_HANDLE

    @field_validator("display_name", mode="before")
    @classmethod
    def default_display_name(cls, v):
        return _blank_to(v, DEFAULT_AUTHOR_NAME)

    @field_validator("handle", mode="before")
    @classmethod
    def default_handle(cls, v):
        return _blank_to(v, DEFAULT_AUTHOR_HANDLE)


class MusicInfo(CamelModel):
    title: str = DEFAULT_MUSIC_TITLE
    artist: str = ""

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v):
        return _blank_to(v, DEFAULT_MUSIC_TITLE)

    @field_validator("artist", mode="before")
    @classmethod
    def default_artist(cls, v):
        return _blank_to(v, "")


class VideoStats(CamelModel):
    views: int = 0
    likes: int = 0
    comments: int = 0
    shares: int = 0

    @field_validator("views", "likes", "comments", "shares", mode="before")
    @classmethod
    def coerce_count(cls, v):
        return _to_count(v)


class VideoMetadata(CamelModel):
    """
    Descriptive metadata. Every field has a default, and the defaulting
    is idempotent: validating a dump of an instance returns an equal one.
    """
    id: str
    title: str = ""
    author: Author = Field(default_factory=Author)
    music: MusicInfo = Field(default_factory=MusicInfo)
    stats: VideoStats = Field(default_factory=VideoStats)
    thumbnail_urls: List[str] = Field(default_factory=list)
    duration_ms: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return _blank_to(v, "")

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, v):
        return "" if v is None else str(v)

    @field_validator("author", "music", "stats", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return {} if v is None else v

    @field_validator("thumbnail_urls", mode="before")
    @classmethod
    def clean_thumbnails(cls, v):
        if not isinstance(v, list):
            return []
        return [url for url in v if isinstance(url, str) and url]

    @field_validator("duration_ms", mode="before")
    @classmethod
    def coerce_duration(cls, v):
        return _to_count(v)

    @model_validator(mode="after")
    def default_title(self):
        if not (self.title or "").strip():
            self.title = TITLE_TEMPLATE.format(id=self.id)
        return self


class VideoResult(CamelModel):
    """Unified output of both extraction paths"""
    formats: List[MediaFormat] = Field(default_factory=list)
    metadata: VideoMetadata


class ErrorResponse(BaseModel):
    error: str


class MessageResponse(BaseModel):
    message: str
