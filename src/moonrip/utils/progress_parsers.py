"""Regexes over yt-dlp and ffmpeg text output.

These are the only place that knows the external tools' progress format.
"""

from __future__ import annotations

import re

YTDLP_PERCENT_RE = re.compile(r"\[download\]\s+(\d{1,3}(?:\.\d+)?)%")
FFMPEG_DURATION_RE = re.compile(r"Duration:\s*(\d+):(\d+):(\d+(?:\.\d+)?)")
FFMPEG_TIME_RE = re.compile(r"time=\s*(\d+):(\d+):(\d+(?:\.\d+)?)")
FIRST_INT_RE = re.compile(r"\d+")


def _hms_to_seconds(hours: str, minutes: str, seconds: str) -> float:
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def parse_ytdlp_percent(line: str) -> float | None:
    """``[download]  42.3% of 10.00MiB at ...`` -> 42.3"""
    match = YTDLP_PERCENT_RE.search(line)
    if not match:
        return None
    return min(100.0, float(match.group(1)))


def parse_ffmpeg_duration(line: str) -> float | None:
    """``Duration: 00:03:32.10, start: ...`` -> 212.1"""
    match = FFMPEG_DURATION_RE.search(line)
    if not match:
        return None
    return _hms_to_seconds(*match.groups())


def parse_ffmpeg_time(line: str) -> float | None:
    """``size= 1024kB time=00:01:10.50 bitrate=...`` -> 70.5"""
    match = FFMPEG_TIME_RE.search(line)
    if not match:
        return None
    return _hms_to_seconds(*match.groups())


def parse_first_int(text: str) -> int | None:
    match = FIRST_INT_RE.search(text)
    return int(match.group(0)) if match else None


class FfmpegProgress:
    """Turns a stream of ffmpeg stderr lines into percent-complete values."""

    def __init__(self) -> None:
        self.duration: float | None = None

    def feed(self, line: str) -> float | None:
        if self.duration is None:
            self.duration = parse_ffmpeg_duration(line)
            return None
        if self.duration <= 0:
            return None
        current = parse_ffmpeg_time(line)
        if current is None:
            return None
        return min(100.0, current / self.duration * 100.0)
