from typing import Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class VideoReference(BaseModel):
    """One video, independent of the URL shape it was given in"""
    model_config = ConfigDict(frozen=True)

    video_id: str = Field(..., pattern=r"^\d+$")
    author_handle: str = "_"
    canonical_url: str


class ClientIdentity(BaseModel):
    """Per-call synthetic mobile client (never reused)"""
    model_config = ConfigDict(frozen=True)

    device_id: str
    client_descriptor_id: str
    install_id: str
    timestamp: int
    timestamp_ms: int
    query_parameters: Dict[str, str]


class NativeDetail(BaseModel):
    """Detail object as returned by the internal API (snake_case schema)"""
    source: Literal["api"] = "api"
    data: Dict[str, Any]


class ScrapedDetail(BaseModel):
    """Detail object pulled out of a page data island (camelCase schema)"""
    source: Literal["page"] = "page"
    island: str
    data: Dict[str, Any]


DetailObject = Union[NativeDetail, ScrapedDetail]


class ProxiedMedia(BaseModel):
    """Downloaded payload, alive for one proxy request only"""
    content: bytes
    filename: str
    attempts: int = 1

    @property
    def size(self) -> int:
        return len(self.content)
