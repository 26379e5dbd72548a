"""Configuration for Step 01: Download video."""

from pydantic import BaseModel, Field


class DownloadConfig(BaseModel):
    binary: str = Field("yt-dlp", description="yt-dlp executable")
    output_template: str = Field("%(id)s.%(ext)s", description="yt-dlp -o template inside the work dir")
    write_thumbnail: bool = Field(True, description="Also fetch the platform thumbnail as jpg")
    extra_args: list[str] = Field(default_factory=list, description="Extra yt-dlp arguments")
    video_extensions: list[str] = Field(
        default_factory=lambda: [".mp4", ".mkv", ".webm", ".mov", ".avi", ".flv"],
    )
    audio_extensions: list[str] = Field(
        default_factory=lambda: [".m4a", ".mp3", ".opus", ".ogg", ".wav", ".aac", ".flac"],
    )
