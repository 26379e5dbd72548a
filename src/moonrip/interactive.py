"""Question-and-answer collection of RipInputs for ``moonrip interactive``."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt

from moonrip.core.contracts import FORMATS, AudioFormat, RipInputs, is_video_url

FORMAT_CHOICES = {str(i): fmt for i, fmt in enumerate(AudioFormat, 1)}


def ask_url(console: Console) -> str:
    while True:
        url = Prompt.ask("Enter video URL", console=console).strip()
        if is_video_url(url):
            return url
        console.print("[yellow]Please enter a valid video URL[/yellow]\n")


def ask_format(console: Console) -> AudioFormat:
    console.print("\nSelect audio format:")
    for key, fmt in FORMAT_CHOICES.items():
        console.print(f"  {key}. {FORMATS[fmt].label}")
    choice = Prompt.ask("\nChoice (1-3, default: 1)", console=console, default="", show_default=False)
    return FORMAT_CHOICES.get(choice.strip(), AudioFormat.MP3)


def ask_prompt(console: Console) -> str | None:
    console.print("\nCover art selection:")
    console.print("  You can describe what kind of image you want for the cover art,")
    console.print("  or press Enter to let AI automatically select the best frame.")
    answer = Prompt.ask(
        "\nDescribe your ideal cover image (or press Enter)",
        console=console,
        default="",
        show_default=False,
    )
    return answer.strip() or None


def ask_output_dir(console: Console) -> Path:
    answer = Prompt.ask(
        "\nOutput directory (default: current)", console=console, default="", show_default=False
    ).strip()
    if not answer:
        return Path.cwd()
    return Path(answer).expanduser()


def collect_inputs(console: Console | None = None) -> RipInputs:
    console = console or Console()
    console.print("\n[bold]Welcome to moonrip![/bold]\n")
    url = ask_url(console)
    fmt = ask_format(console)
    prompt = ask_prompt(console)
    output_dir = ask_output_dir(console)
    return RipInputs(url=url, format=fmt, prompt=prompt, output_dir=output_dir)
