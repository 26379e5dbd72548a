"""I/O contracts for Step 03: Sample candidate cover frames."""

from pathlib import Path

from pydantic import BaseModel, Field

from moonrip.core.contracts import Frame


class ExtractFramesInput(BaseModel):
    video_path: Path = Field(..., description="Path to the downloaded video file")


class ExtractFramesOutput(BaseModel):
    frames_dir: Path = Field(..., description="Directory containing extracted frames")
    duration: float = Field(..., description="Video duration reported by ffprobe (seconds)")
    frames: list[Frame] = Field(default_factory=list, description="Frames in timestamp order")
