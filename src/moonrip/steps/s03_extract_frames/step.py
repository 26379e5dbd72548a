"""Step 03: Extract evenly spaced frames from the video with ffmpeg."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import ClassVar

from moonrip.core.contracts import Frame
from moonrip.core.errors import FrameExtractionError
from moonrip.core.step_base import BaseStep
from moonrip.utils.subprocess_utils import run_command
from .config import ExtractFramesConfig
from .contracts import ExtractFramesInput, ExtractFramesOutput

logger = logging.getLogger(__name__)


def sample_timestamps(duration: float, count: int) -> list[float]:
    """``duration / (count + 1) * i`` for i in 1..count: strictly inside (0, duration)."""
    interval = duration / (count + 1)
    return [interval * i for i in range(1, count + 1)]


class ExtractFramesStep(BaseStep[ExtractFramesInput, ExtractFramesOutput, ExtractFramesConfig]):
    name: ClassVar[str] = "extract_frames"
    input_type: ClassVar = ExtractFramesInput
    output_type: ClassVar = ExtractFramesOutput
    config_type: ClassVar = ExtractFramesConfig
    error_type: ClassVar = FrameExtractionError

    def validate_inputs(self, inputs: ExtractFramesInput) -> bool:
        if not inputs.video_path.exists():
            logger.error(f"Video not found: {inputs.video_path}")
            return False
        return True

    def probe_duration(self, video_path: Path) -> float:
        cmd = [
            self.config.ffprobe_binary,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(video_path),
        ]
        try:
            result = run_command(cmd, check=False)
        except (OSError, subprocess.SubprocessError) as e:
            raise FrameExtractionError(f"Failed to get video duration: {e}") from e
        if result.returncode != 0:
            raise FrameExtractionError(
                f"Failed to get video duration: ffprobe exited with code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        try:
            duration = float(result.stdout.strip())
        except ValueError as e:
            raise FrameExtractionError(
                f"Failed to get video duration: unparseable ffprobe output {result.stdout.strip()!r}"
            ) from e
        if duration <= 0:
            raise FrameExtractionError(f"Failed to get video duration: got {duration}")
        return duration

    def extract_frame(self, video_path: Path, timestamp: float, frame_path: Path) -> None:
        cmd = [
            self.config.ffmpeg_binary,
            "-ss", f"{timestamp:.3f}",
            "-i", str(video_path),
            "-frames:v", "1",
            "-q:v", str(self.config.jpeg_quality),
            "-y", str(frame_path),
        ]
        try:
            result = run_command(cmd, check=False)
        except (OSError, subprocess.SubprocessError) as e:
            raise FrameExtractionError(f"Failed to extract frame at {timestamp:.2f}s: {e}") from e
        if result.returncode != 0:
            raise FrameExtractionError(
                f"Failed to extract frame at {timestamp:.2f}s: {result.stderr.strip()[-500:]}"
            )

    def run(self, inputs: ExtractFramesInput) -> ExtractFramesOutput:
        output_dir = inputs.video_path.parent / self.config.frames_subdir
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FrameExtractionError(f"Failed to create frames directory: {e}") from e

        duration = self.probe_duration(inputs.video_path)
        timestamps = sample_timestamps(duration, self.config.frame_count)

        frames: list[Frame] = []
        for i, timestamp in enumerate(timestamps, 1):
            frame_path = output_dir / f"frame_{i:03d}.{self.config.output_format}"
            self.extract_frame(inputs.video_path, timestamp, frame_path)
            frames.append(Frame(path=frame_path, timestamp=timestamp))

        logger.info(f"Extracted {len(frames)} frames from {duration:.1f}s of video")
        return ExtractFramesOutput(frames_dir=output_dir, duration=duration, frames=frames)
