"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

VIDEO_HOSTS = ("youtube.com", "youtu.be")


def is_video_url(url: str) -> bool:
    """Loose check that a string looks like something yt-dlp can fetch."""
    url = url.strip()
    if not url:
        return False
    return any(host in url for host in VIDEO_HOSTS) or url.startswith(("http://", "https://"))


class AudioFormat(str, Enum):
    MP3 = "mp3"
    M4A = "m4a"
    WAV = "wav"

    @property
    def spec(self) -> FormatSpec:
        return FORMATS[self]

    @property
    def extension(self) -> str:
        return FORMATS[self].extension


class FormatSpec(NamedTuple):
    extension: str
    codec: str
    quality_args: tuple[str, ...]
    label: str


FORMATS: dict[AudioFormat, FormatSpec] = {
    AudioFormat.MP3: FormatSpec(".mp3", "libmp3lame", ("-q:a", "0"), "MP3 (most compatible)"),
    AudioFormat.M4A: FormatSpec(".m4a", "aac", ("-b:a", "256k"), "M4A (better quality, smaller size)"),
    AudioFormat.WAV: FormatSpec(".wav", "pcm_s16le", (), "WAV (lossless)"),
}


class StepMeta(BaseModel):
    """Timing record attached to every executed step."""

    step_name: str
    elapsed_seconds: float = 0.0
    params: dict[str, Any] = Field(default_factory=dict)


class VideoInfo(BaseModel):
    """What the downloader left in the work dir."""

    model_config = ConfigDict(frozen=True)

    video_path: Path = Field(..., description="Downloaded video file")
    audio_path: Path | None = Field(None, description="Audio track, if yt-dlp extracted one")
    title: str = Field("Unknown", description="Video title")
    artist: str | None = Field(None, description="Artist or uploader")
    thumbnail: str | None = Field(None, description="Thumbnail URL reported by yt-dlp")


class Frame(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path
    timestamp: float = Field(..., description="Seconds from start of video")


class ScoredFrame(Frame):
    score: int = Field(0, ge=0, le=10)
    description: str = ""


class RipInputs(BaseModel):
    """Validated user request: one per run."""

    model_config = ConfigDict(frozen=True)

    url: str
    format: AudioFormat = AudioFormat.MP3
    prompt: str | None = None
    output_dir: Path = Field(default_factory=Path.cwd)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not is_video_url(value):
            raise ValueError("Invalid video URL. Must be a valid URL.")
        return value

    @field_validator("prompt")
    @classmethod
    def _blank_prompt_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()

    @field_validator("output_dir", mode="before")
    @classmethod
    def _expand_home(cls, value: Any) -> Any:
        if value is None or value == "":
            return Path.cwd()
        return Path(value).expanduser()


class RipResult(BaseModel):
    final_path: Path
    title: str
    cover_timestamp: float
    cover_score: int
    cover_description: str
    steps: list[StepMeta] = Field(default_factory=list)


class VisionConfig(BaseModel):
    """Where to reach Moondream. Env vars override endpoint and api_key."""

    local_endpoint: str = "http://localhost:2020/v1"
    probe_timeout: float = Field(1.0, description="Seconds to wait for the local server probe")
    cloud_endpoint: str = "https://api.moondream.ai/v1"
    endpoint: str | None = Field(None, description="Explicit endpoint, skips the local probe")
    api_key: str | None = None
    request_timeout: float = 60.0


class PipelineConfig(BaseModel):
    """Top-level configuration loaded from pipeline.yaml."""

    project_name: str = "moonrip"
    work_dir: Path = Path(".moonrip-temp")
    keep_work_dir: bool = False
    log_level: str = "INFO"
    vision: VisionConfig = Field(default_factory=VisionConfig)
    steps: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Per-step config overrides keyed by step name"
    )
