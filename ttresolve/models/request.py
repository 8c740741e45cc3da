from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ResolveRequest(BaseModel):
    url: Optional[str] = Field(None, description="Share URL of the video")

    @field_validator("url")
    @classmethod
    def strip_url(cls, v):
        """Blank strings count as missing"""
        if v is None:
            return None
        v = v.strip()
        return v or None
