"""Safe subprocess runners for external tools (yt-dlp, ffmpeg, ffprobe)."""

from __future__ import annotations

import logging
import subprocess
from collections import deque
from pathlib import Path
from typing import Callable, Literal, NamedTuple

logger = logging.getLogger(__name__)


class StreamResult(NamedTuple):
    returncode: int
    output: str


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: int = 3600,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run an external command with logging and error handling."""
    cmd_str = " ".join(cmd)
    logger.info(f"Running: {cmd_str}")

    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )

    if result.stdout:
        logger.debug(f"stdout: {result.stdout[-500:]}")
    if result.stderr:
        logger.debug(f"stderr: {result.stderr[-500:]}")

    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, cmd_str, result.stdout, result.stderr
        )
    return result


def stream_command(
    cmd: list[str],
    on_line: Callable[[str], None] | None = None,
    cwd: Path | None = None,
    channel: Literal["stdout", "stderr"] = "stderr",
    tail_lines: int = 200,
) -> StreamResult:
    """Run a command and hand each output line to ``on_line`` as it arrives.

    ``channel="stdout"`` merges stderr into stdout; ``channel="stderr"``
    discards stdout and reads stderr (where ffmpeg writes its stats).
    Carriage returns count as line breaks, so ffmpeg's in-place stats line
    arrives once per refresh. Only the last ``tail_lines`` lines are kept.
    """
    logger.info(f"Running: {' '.join(cmd)}")

    if channel == "stdout":
        pipes = {"stdout": subprocess.PIPE, "stderr": subprocess.STDOUT}
    else:
        pipes = {"stdout": subprocess.DEVNULL, "stderr": subprocess.PIPE}

    tail: deque[str] = deque(maxlen=tail_lines)
    with subprocess.Popen(
        cmd,
        cwd=cwd,
        text=True,
        encoding="utf-8",
        errors="replace",
        bufsize=1,
        **pipes,
    ) as proc:
        stream = proc.stdout if channel == "stdout" else proc.stderr
        assert stream is not None
        for raw in stream:
            line = raw.rstrip("\n")
            if not line:
                continue
            tail.append(line)
            if on_line is not None:
                on_line(line)
        returncode = proc.wait()

    output = "\n".join(tail)
    if output:
        logger.debug(f"output tail: {output[-500:]}")
    return StreamResult(returncode, output)
