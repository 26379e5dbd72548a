"""Step 05: Mux the cover image into the audio file and copy it to the output dir."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import ClassVar

from moonrip.core.errors import EmbedError
from moonrip.core.step_base import BaseStep
from moonrip.utils.subprocess_utils import run_command
from .config import EmbedCoverConfig
from .contracts import EmbedCoverInput, EmbedCoverOutput

logger = logging.getLogger(__name__)

# Containers ffmpeg can carry an attached picture in
PICTURE_CONTAINERS = {".mp3", ".m4a"}


class EmbedCoverStep(BaseStep[EmbedCoverInput, EmbedCoverOutput, EmbedCoverConfig]):
    name: ClassVar[str] = "embed_cover"
    input_type: ClassVar = EmbedCoverInput
    output_type: ClassVar = EmbedCoverOutput
    config_type: ClassVar = EmbedCoverConfig
    error_type: ClassVar = EmbedError

    def validate_inputs(self, inputs: EmbedCoverInput) -> bool:
        for path in (inputs.audio_path, inputs.cover_path):
            if not path.exists():
                logger.error(f"Missing input: {path}")
                return False
        return True

    def cover_tag_args(self, extension: str) -> list[str]:
        if extension == ".mp3":
            return [
                "-id3v2_version", "3",
                "-metadata:s:v", f"title={self.config.cover_title}",
                "-metadata:s:v", f"comment={self.config.cover_comment}",
            ]
        return ["-disposition:v:0", "attached_pic"]

    def build_command(self, audio_path: Path, cover_path: Path, output_path: Path) -> list[str]:
        return [
            self.config.binary,
            "-i", str(audio_path),
            "-i", str(cover_path),
            "-map", "0:a",
            "-map", "1:0",
            "-c", "copy",
            *self.cover_tag_args(audio_path.suffix.lower()),
            "-y", str(output_path),
        ]

    def mux(self, audio_path: Path, cover_path: Path, output_path: Path) -> None:
        cmd = self.build_command(audio_path, cover_path, output_path)
        try:
            result = run_command(cmd, check=False)
        except (OSError, subprocess.SubprocessError) as e:
            raise EmbedError(f"Failed to embed cover art: {e}") from e
        if result.returncode != 0:
            raise EmbedError(f"Failed to embed cover art: {result.stderr.strip()[-1000:]}")

    def run(self, inputs: EmbedCoverInput) -> EmbedCoverOutput:
        audio_path = inputs.audio_path
        extension = audio_path.suffix
        final_dir = inputs.output_dir or Path.cwd()
        stem = (inputs.video_path or audio_path).stem
        final_path = final_dir / f"{stem}{extension}"

        embedded = extension.lower() in PICTURE_CONTAINERS
        if embedded:
            source = audio_path.with_name(f"{audio_path.stem}{self.config.temp_suffix}{extension}")
            self.mux(audio_path, inputs.cover_path, source)
        else:
            logger.warning(f"{extension} cannot carry cover art; copying audio without it")
            source = audio_path

        try:
            final_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, final_path)
        except OSError as e:
            raise EmbedError(f"Failed to copy to output directory: {e}") from e

        if embedded:
            try:
                source.unlink()
            except OSError as e:
                logger.debug(f"Could not remove {source}: {e}")

        logger.info(f"Saved {final_path}")
        return EmbedCoverOutput(final_path=final_path, cover_embedded=embedded)
