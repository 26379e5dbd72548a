"""Shared pytest fixtures for moonrip tests."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from moonrip.core.contracts import Frame
from moonrip.core.errors import VisionServiceError


class FakeVisionClient:
    """Stands in for MoondreamClient; frames are identified by their bytes.

    ``answers`` maps image bytes to the score answer text; a value of
    ``None`` makes the query raise like an unreachable server would.
    """

    def __init__(self, answers: dict[bytes, str | None] | None = None, default: str = "0"):
        self.answers = answers or {}
        self.default = default
        self.questions: list[str] = []
        self.captioned: list[bytes] = []
        self.fail_captions = False
        self.closed = False

    def caption(self, image: bytes, length: str = "normal") -> str:
        if self.fail_captions:
            raise VisionServiceError("caption down")
        self.captioned.append(image)
        return f"caption of {image.decode()}"

    def query(self, image: bytes, question: str) -> str:
        self.questions.append(question)
        answer = self.answers.get(image, self.default)
        if answer is None:
            raise VisionServiceError("query down")
        return answer

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Empty per-test work dir, like the runner prepares."""
    path = tmp_path / ".moonrip-temp"
    path.mkdir()
    return path


@pytest.fixture
def make_frames(work_dir: Path):
    """Write ``count`` fake frame files whose bytes are their own file name."""

    def _make(count: int, duration: float = 50.0) -> list[Frame]:
        frames_dir = work_dir / "frames"
        frames_dir.mkdir(exist_ok=True)
        interval = duration / (count + 1)
        frames = []
        for i in range(1, count + 1):
            path = frames_dir / f"frame_{i:03d}.jpg"
            path.write_bytes(path.name.encode())
            frames.append(Frame(path=path, timestamp=interval * i))
        return frames

    return _make


@pytest.fixture
def fake_vision():
    return FakeVisionClient


@pytest.fixture
def completed():
    """Build CompletedProcess results for patched run_command calls."""

    def _completed(cmd: list[str], returncode: int = 0, stdout: str = "", stderr: str = ""):
        return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)

    return _completed
