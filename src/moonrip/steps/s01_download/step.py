"""Step 01: Fetch the best available video (and thumbnail) with yt-dlp."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from moonrip.core.contracts import VideoInfo
from moonrip.core.errors import DownloadError
from moonrip.core.step_base import BaseStep
from moonrip.utils.progress_parsers import parse_ytdlp_percent
from moonrip.utils.subprocess_utils import stream_command
from .config import DownloadConfig
from .contracts import DownloadInput

logger = logging.getLogger(__name__)

METADATA_TEMPLATE = "after_move:%(id)s|%(title)s|%(artist,uploader)s|%(thumbnail)s"
_MISSING = {"", "NA", "None"}


def parse_metadata_line(line: str) -> dict[str, str | None]:
    """Split ``id|title|artist|thumbnail`` as printed by yt-dlp.

    The title sits between fixed-position fields so a ``|`` inside it survives.
    """
    parts = line.strip().split("|")
    if len(parts) < 4:
        return {"id": None, "title": None, "artist": None, "thumbnail": None}
    fields = {
        "id": parts[0],
        "title": "|".join(parts[1:-2]),
        "artist": parts[-2],
        "thumbnail": parts[-1],
    }
    return {k: (None if v.strip() in _MISSING else v.strip()) for k, v in fields.items()}


def _prefer_id(paths: list[Path], video_id: str | None) -> list[Path]:
    if video_id and len(paths) > 1:
        matching = [p for p in paths if video_id in p.stem]
        return matching or paths
    return paths


class DownloadStep(BaseStep[DownloadInput, VideoInfo, DownloadConfig]):
    name: ClassVar[str] = "download"
    input_type: ClassVar = DownloadInput
    output_type: ClassVar = VideoInfo
    config_type: ClassVar = DownloadConfig
    error_type: ClassVar = DownloadError

    def validate_inputs(self, inputs: DownloadInput) -> bool:
        return bool(inputs.url)

    def build_command(self, url: str) -> list[str]:
        cmd = [self.config.binary, "--no-playlist"]
        if self.config.write_thumbnail:
            cmd += ["--write-thumbnail", "--convert-thumbnails", "jpg"]
        cmd += [
            "-o", str(self.work_dir / self.config.output_template),
            "--print", METADATA_TEMPLATE,
            # --print implies --quiet; keep the progress lines
            "--progress",
            "--newline",
            *self.config.extra_args,
            url,
        ]
        return cmd

    def run(self, inputs: DownloadInput) -> VideoInfo:
        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DownloadError(f"Failed to create temp directory: {e}") from e

        metadata_lines: list[str] = []

        def on_line(line: str) -> None:
            percent = parse_ytdlp_percent(line)
            if percent is not None:
                self.progress.update(percent)
            elif line.count("|") >= 3 and not line.startswith("["):
                metadata_lines.append(line)

        self.progress.start("Downloading")
        try:
            result = stream_command(self.build_command(inputs.url), on_line, channel="stdout")
        except OSError as e:
            raise DownloadError(f"Download failed: could not start {self.config.binary}: {e}") from e
        finally:
            self.progress.finish()

        if result.returncode != 0:
            raise DownloadError(
                f"Download failed: {self.config.binary} exited with code {result.returncode}: {result.output}"
            )

        meta = parse_metadata_line(metadata_lines[-1] if metadata_lines else "")
        if not metadata_lines:
            logger.warning("yt-dlp printed no metadata line; title falls back to 'Unknown'")

        video_path, audio_path = self.classify_outputs(meta["id"])
        info = VideoInfo(
            video_path=video_path,
            audio_path=audio_path,
            title=meta["title"] or "Unknown",
            artist=meta["artist"],
            thumbnail=meta["thumbnail"],
        )
        logger.info(f"Downloaded '{info.title}' -> {video_path.name}")
        return info

    def classify_outputs(self, video_id: str | None) -> tuple[Path, Path | None]:
        """Pick the video (and optional audio) file yt-dlp left in the work dir."""
        try:
            files = sorted(p for p in self.work_dir.iterdir() if p.is_file())
        except OSError as e:
            raise DownloadError(f"Failed to find downloaded video: {e}") from e

        video_exts = {e.lower() for e in self.config.video_extensions}
        audio_exts = {e.lower() for e in self.config.audio_extensions}
        videos = _prefer_id([p for p in files if p.suffix.lower() in video_exts], video_id)
        audios = _prefer_id([p for p in files if p.suffix.lower() in audio_exts], video_id)

        if not videos:
            names = ", ".join(p.name for p in files) or "nothing"
            raise DownloadError(
                f"No video file found after download (work dir holds: {names}). "
                "Check if yt-dlp completed successfully."
            )
        return videos[0], (audios[0] if audios else None)
