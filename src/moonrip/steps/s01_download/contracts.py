"""I/O contracts for Step 01: Download video."""

from pydantic import BaseModel, Field, field_validator

from moonrip.core.contracts import VideoInfo, is_video_url


class DownloadInput(BaseModel):
    url: str = Field(..., description="Video page URL")

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not is_video_url(value):
            raise ValueError(f"Not a video URL: {value!r}")
        return value.strip()


DownloadOutput = VideoInfo
