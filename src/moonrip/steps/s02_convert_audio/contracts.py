"""I/O contracts for Step 02: Convert audio."""

from pathlib import Path

from pydantic import BaseModel, Field

from moonrip.core.contracts import AudioFormat, VideoInfo


class ConvertAudioInput(VideoInfo):
    format: AudioFormat = Field(AudioFormat.MP3, description="Target audio format")


class ConvertAudioOutput(BaseModel):
    audio_path: Path = Field(..., description="Audio file in the requested format")
    reencoded: bool = Field(..., description="False when the extracted audio was reused as-is")
