"""Fixtures for E2E pipeline tests.

External tools are replaced by fakes that write the files the real ones
would, so the whole pipeline runs without network, ffmpeg or a GPU.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from moonrip.utils.subprocess_utils import StreamResult

VIDEO_ID = "dQw4w9WgXcQ"
METADATA_LINE = f"{VIDEO_ID}|Never Gonna Give You Up|Rick Astley|https://i.ytimg.com/vi/{VIDEO_ID}/maxres.jpg"


class FakeTools:
    """Records every command and writes each tool's output file."""

    def __init__(self, duration: float = 30.0, audio_ext: str | None = None):
        self.duration = duration
        # yt-dlp also leaves an audio-only file when set
        self.audio_ext = audio_ext
        self.commands: list[list[str]] = []

    def stream(self, cmd, on_line=None, cwd=None, channel="stderr", tail_lines=200):
        self.commands.append(cmd)
        if cmd[0] == "yt-dlp":
            out_dir = Path(cmd[cmd.index("-o") + 1]).parent
            (out_dir / f"{VIDEO_ID}.mp4").write_bytes(b"video")
            if self.audio_ext:
                (out_dir / f"{VIDEO_ID}{self.audio_ext}").write_bytes(b"extracted audio")
            lines = ["[download]  50.0% of 3.00MiB", "[download] 100% of 3.00MiB", METADATA_LINE]
        else:
            Path(cmd[-1]).write_bytes(b"audio")
            lines = [f"  Duration: 00:00:{self.duration:05.2f}, start: 0.0", "size= 1kB time=00:00:30.00"]
        for line in lines:
            if on_line is not None:
                on_line(line)
        return StreamResult(0, "\n".join(lines))

    def run(self, cmd, cwd=None, timeout=3600, check=True):
        self.commands.append(cmd)
        if cmd[0] == "ffprobe":
            return subprocess.CompletedProcess(cmd, 0, f"{self.duration}\n", "")
        out = Path(cmd[-1])
        # frames carry their own file name so the fake vision client can tell them apart
        out.write_bytes(out.name.encode() if "-frames:v" in cmd else b"audio+cover")
        return subprocess.CompletedProcess(cmd, 0, "", "")


@pytest.fixture
def fake_tools(monkeypatch) -> FakeTools:
    tools = FakeTools()
    monkeypatch.setattr("moonrip.steps.s01_download.step.stream_command", tools.stream)
    monkeypatch.setattr("moonrip.steps.s02_convert_audio.step.stream_command", tools.stream)
    monkeypatch.setattr("moonrip.steps.s03_extract_frames.step.run_command", tools.run)
    monkeypatch.setattr("moonrip.steps.s05_embed_cover.step.run_command", tools.run)
    return tools
