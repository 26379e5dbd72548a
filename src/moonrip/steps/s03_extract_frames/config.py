"""Configuration for Step 03: Sample candidate cover frames."""

from pydantic import BaseModel, Field


class ExtractFramesConfig(BaseModel):
    frame_count: int = Field(10, ge=1, description="Number of evenly spaced frames to sample")
    output_format: str = Field("jpg", description="Frame image format")
    jpeg_quality: int = Field(2, ge=1, le=31, description="ffmpeg -q:v (1 = best)")
    frames_subdir: str = Field("frames", description="Directory next to the video holding the frames")
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
