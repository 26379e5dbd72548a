"""Presence checks for the external tools the pipeline shells out to."""

from __future__ import annotations

import logging
import shutil
import sys

from moonrip.core.errors import MissingDependencyError

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("yt-dlp", "ffmpeg")

_INSTALL = {
    "yt-dlp": {
        "darwin": "macOS (Homebrew):\n  brew install yt-dlp",
        "linux": "Linux (apt):\n  sudo apt install yt-dlp\n\nLinux (pip):\n  pip install yt-dlp",
        "win32": "Windows (winget):\n  winget install yt-dlp.yt-dlp",
        "url": "https://github.com/yt-dlp/yt-dlp#installation",
    },
    "ffmpeg": {
        "darwin": "macOS (Homebrew):\n  brew install ffmpeg",
        "linux": "Linux (apt):\n  sudo apt install ffmpeg",
        "win32": "Windows (winget):\n  winget install Gyan.FFmpeg",
        "url": "https://ffmpeg.org/download.html",
    },
}


def install_instructions(tool: str, platform: str | None = None) -> str:
    """Human-readable install hints for ``tool`` on ``platform`` (default: this one)."""
    platform = platform or sys.platform
    if platform.startswith("linux"):
        platform = "linux"
    hints = _INSTALL.get(tool, {})
    methods = hints.get(platform) or "\n\n".join(
        hints[p] for p in ("darwin", "linux", "win32") if p in hints
    )
    lines = [
        f"ERROR: {tool} is not installed.",
        "",
        "Install it with one of the following methods:",
        "",
        methods,
        "",
        f"Or visit: {hints.get('url', 'your package manager')}",
    ]
    return "\n".join(lines)


def check_command(command: str) -> bool:
    return shutil.which(command) is not None


def check_dependencies(tools: tuple[str, ...] = REQUIRED_TOOLS) -> None:
    """Raise MissingDependencyError naming the first tool not on PATH."""
    for tool in tools:
        if not check_command(tool):
            raise MissingDependencyError(tool, install_instructions(tool))
        logger.debug(f"{tool} found at {shutil.which(tool)}")
