"""I/O contracts for Step 05: Embed the cover and deliver the file."""

from pathlib import Path

from pydantic import BaseModel, Field


class EmbedCoverInput(BaseModel):
    audio_path: Path = Field(..., description="Converted audio file")
    cover_path: Path = Field(..., description="Chosen cover image")
    video_path: Path | None = Field(None, description="Downloaded video; its stem names the delivered file")
    output_dir: Path | None = Field(None, description="Destination directory (default: cwd)")


class EmbedCoverOutput(BaseModel):
    final_path: Path = Field(..., description="Delivered audio file with cover art")
    cover_embedded: bool = Field(..., description="False for containers without picture support")
