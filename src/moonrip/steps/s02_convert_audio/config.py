"""Configuration for Step 02: Convert audio."""

from pydantic import BaseModel, Field


class ConvertAudioConfig(BaseModel):
    binary: str = Field("ffmpeg", description="ffmpeg executable")
    write_tags: bool = Field(True, description="Tag title/artist from the video metadata")
    reuse_extracted_audio: bool = Field(
        True, description="Skip re-encoding when yt-dlp already produced the target container"
    )
