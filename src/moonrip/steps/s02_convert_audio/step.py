"""Step 02: Transcode the downloaded media to the requested audio format."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from moonrip.core.contracts import AudioFormat, VideoInfo
from moonrip.core.errors import ConversionError
from moonrip.core.step_base import BaseStep
from moonrip.utils.progress_parsers import FfmpegProgress
from moonrip.utils.subprocess_utils import stream_command
from .config import ConvertAudioConfig
from .contracts import ConvertAudioInput, ConvertAudioOutput

logger = logging.getLogger(__name__)


def output_path_for(info: VideoInfo, fmt: AudioFormat) -> Path:
    """``<work>/<video stem><ext>``; the stem becomes the final file name."""
    source = info.audio_path or info.video_path
    out = info.video_path.with_suffix(fmt.extension)
    if out == source:
        out = source.with_name(f"{source.stem}_converted{fmt.extension}")
    return out


class ConvertAudioStep(BaseStep[ConvertAudioInput, ConvertAudioOutput, ConvertAudioConfig]):
    name: ClassVar[str] = "convert_audio"
    input_type: ClassVar = ConvertAudioInput
    output_type: ClassVar = ConvertAudioOutput
    config_type: ClassVar = ConvertAudioConfig
    error_type: ClassVar = ConversionError

    def validate_inputs(self, inputs: ConvertAudioInput) -> bool:
        source = inputs.audio_path or inputs.video_path
        if not source.exists():
            logger.error(f"Source media not found: {source}")
            return False
        return True

    def build_command(self, inputs: ConvertAudioInput, output_path: Path) -> list[str]:
        spec = inputs.format.spec
        cmd = [
            self.config.binary,
            "-i", str(inputs.audio_path or inputs.video_path),
            "-vn",
            "-acodec", spec.codec,
            *spec.quality_args,
        ]
        if self.config.write_tags:
            cmd += ["-metadata", f"title={inputs.title}"]
            if inputs.artist:
                cmd += ["-metadata", f"artist={inputs.artist}"]
        cmd += ["-y", str(output_path)]
        return cmd

    def run(self, inputs: ConvertAudioInput) -> ConvertAudioOutput:
        fmt = inputs.format
        if (
            self.config.reuse_extracted_audio
            and inputs.audio_path is not None
            and inputs.audio_path.suffix.lower() == fmt.extension
        ):
            logger.info(f"Extracted audio is already {fmt.value}, skipping re-encode")
            return ConvertAudioOutput(audio_path=inputs.audio_path, reencoded=False)

        output_path = output_path_for(inputs, fmt)
        tracker = FfmpegProgress()

        def on_line(line: str) -> None:
            percent = tracker.feed(line)
            if percent is not None:
                self.progress.update(percent)

        self.progress.start(f"Converting to {fmt.value.upper()}")
        try:
            result = stream_command(self.build_command(inputs, output_path), on_line)
        except OSError as e:
            raise ConversionError(
                f"Conversion to {fmt.value.upper()} failed: could not start {self.config.binary}: {e}"
            ) from e
        finally:
            self.progress.finish()

        if result.returncode != 0:
            raise ConversionError(
                f"Conversion to {fmt.value.upper()} failed: ffmpeg exited with code "
                f"{result.returncode}: {result.output}"
            )
        logger.info(f"Wrote {output_path.name}")
        return ConvertAudioOutput(audio_path=output_path, reencoded=True)
