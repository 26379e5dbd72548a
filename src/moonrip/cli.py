"""CLI entry point for moonrip.

Usage:
    moonrip <url> [-p PROMPT] [-o DIR] [-f mp3|m4a|wav]        # Flag-driven run
    moonrip interactive                                        # Ask for everything
    moonrip check                                              # Verify yt-dlp/ffmpeg and Moondream
    moonrip info                                               # Show pipeline steps
    moonrip run-step extract_frames -i '{"video_path": "x.mp4"}'

``moonrip rip <url>`` is the explicit spelling of the flag-driven run.
``--help``/``-h`` prints usage and exits 1.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn, Optional

import typer
import yaml
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from typer.core import TyperGroup

from moonrip.core.contracts import AudioFormat, PipelineConfig, RipInputs, RipResult
from moonrip.core.errors import InvalidArgumentsError, MissingDependencyError, MoonripError
from moonrip.core.logging import setup_logging
from moonrip.utils.dependencies import REQUIRED_TOOLS, check_command, check_dependencies

HELP_FLAGS = ("--help", "-h")
DEFAULT_COMMAND = "rip"


class DefaultRipGroup(TyperGroup):
    """Route anything that is not a sub-command to ``rip``.

    ``moonrip <url> -p ...`` and a bare ``moonrip`` both land on ``rip``, so
    a missing URL is reported as a usage error there.
    """

    def parse_args(self, ctx: typer.Context, args: list[str]) -> list[str]:
        if not args or (args[0] not in self.commands and args[0] not in HELP_FLAGS):
            args = [DEFAULT_COMMAND, *args]
        return super().parse_args(ctx, args)


def _help_and_fail(ctx: typer.Context, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    console.print(escape(ctx.get_help()))
    raise typer.Exit(1)


def help_option():
    return typer.Option(
        False,
        *HELP_FLAGS,
        is_eager=True,
        callback=_help_and_fail,
        help="Show this message and exit with status 1",
    )


app = typer.Typer(
    name="moonrip",
    help="Download a video as audio with AI-picked cover art",
    cls=DefaultRipGroup,
    add_help_option=False,
)
console = Console()


@app.callback()
def main(show_help: bool = help_option()) -> None:
    """Download a video as audio with AI-picked cover art."""


DEFAULT_CONFIG = Path("configs/pipeline.yaml")


def _fail(error: MoonripError) -> NoReturn:
    console.print(f"\n[red]Error:[/red] {escape(error.message)}")
    if isinstance(error, MissingDependencyError):
        console.print(error.install_instructions)
    raise typer.Exit(1)


def _banner() -> None:
    console.print(
        Panel.fit(
            "[bold]moonrip[/bold] - Video to Audio\nwith AI-powered cover art selection",
            border_style="cyan",
        )
    )


def parse_rip_inputs(
    url: str,
    prompt: Optional[str] = None,
    output: Optional[Path] = None,
    audio_format: AudioFormat = AudioFormat.MP3,
) -> RipInputs:
    """Validate command-line values into RipInputs."""
    try:
        return RipInputs(url=url, format=audio_format, prompt=prompt, output_dir=output)
    except ValidationError as e:
        message = e.errors()[0]["msg"].removeprefix("Value error, ")
        raise InvalidArgumentsError(message) from e


def _load_config(config: Optional[Path]) -> PipelineConfig:
    from moonrip.core.pipeline_runner import load_pipeline_config

    try:
        if config is None and DEFAULT_CONFIG.exists():
            config = DEFAULT_CONFIG
        return load_pipeline_config(config)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        console.print(f"[red]Could not load config {config}:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _startup(config: Optional[Path], verbose: bool) -> PipelineConfig:
    load_dotenv()
    pipeline_cfg = _load_config(config)
    setup_logging("DEBUG" if verbose else pipeline_cfg.log_level)
    return pipeline_cfg


def _check_dependencies() -> None:
    console.print("\nChecking dependencies...")
    try:
        check_dependencies()
    except MoonripError as e:
        _fail(e)
    for tool in REQUIRED_TOOLS:
        console.print(f"   [green]*[/green] {tool} found")


def _print_result(result: RipResult, verbose: bool) -> None:
    console.print(f"\nSelected frame at {result.cover_timestamp:.1f}s (score: {result.cover_score})")
    if result.cover_description:
        console.print(f"Description: {escape(result.cover_description)}")
    if verbose:
        table = Table(title="Step timings")
        table.add_column("Step", style="cyan")
        table.add_column("Seconds", justify="right")
        for meta in result.steps:
            table.add_row(meta.step_name, f"{meta.elapsed_seconds:.1f}")
        console.print(table)
    console.print("\n" + "=" * 50)
    console.print("[bold green]Complete![/bold green]")
    console.print("=" * 50)
    console.print(f"\nSaved to: {result.final_path}\n")


def _execute(inputs: RipInputs, pipeline_cfg: PipelineConfig, verbose: bool, vision=None) -> None:
    from moonrip.core.pipeline_runner import run_pipeline
    from moonrip.core.progress import RichProgress

    console.print("\n" + "=" * 50)
    console.print(f"Ripping {inputs.url} to {inputs.format.value.upper()}")
    if inputs.prompt:
        console.print(f'Looking for a cover that shows: "{escape(inputs.prompt)}"')
    console.print("=" * 50)

    try:
        result = run_pipeline(inputs, pipeline_cfg, progress=RichProgress(console), vision=vision)
    except MoonripError as e:
        _fail(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)
    _print_result(result, verbose)


@app.command(add_help_option=False)
def rip(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Video URL (YouTube or any yt-dlp supported site)"),
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Custom prompt for cover art selection"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default: current directory)"),
    audio_format: AudioFormat = typer.Option(AudioFormat.MP3, "--format", "-f", help="Audio format"),
    frames: Optional[int] = typer.Option(None, "--frames", min=1, help="Number of candidate frames"),
    config: Optional[Path] = typer.Option(None, help="Pipeline config path"),
    keep_temp: bool = typer.Option(False, "--keep-temp", help="Keep the work dir after the run"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    show_help: bool = help_option(),
) -> None:
    """Download a video and save its audio with the best frame as cover art."""
    try:
        inputs = parse_rip_inputs(url, prompt, output, audio_format)
    except InvalidArgumentsError as e:
        console.print(escape(ctx.get_help()))
        _fail(e)

    pipeline_cfg = _startup(config, verbose)
    if frames is not None:
        pipeline_cfg.steps.setdefault("extract_frames", {})["frame_count"] = frames
    if keep_temp:
        pipeline_cfg.keep_work_dir = True

    _banner()
    _check_dependencies()
    _execute(inputs, pipeline_cfg, verbose)


@app.command()
def interactive(
    config: Optional[Path] = typer.Option(None, help="Pipeline config path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Ask for the URL, format, cover prompt and output directory, then run."""
    from moonrip.interactive import collect_inputs
    from moonrip.vision.manager import start_vision_service, stop_vision_service

    pipeline_cfg = _startup(config, verbose)
    _banner()
    _check_dependencies()

    session = start_vision_service(pipeline_cfg.vision)
    where = "local Moondream server" if session.is_local else "Moondream cloud API"
    console.print(f"   [green]*[/green] Using {where} ({session.endpoint})")
    try:
        try:
            inputs = collect_inputs(console)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted[/yellow]")
            raise typer.Exit(130)
        _execute(inputs, pipeline_cfg, verbose, vision=session)
    finally:
        stop_vision_service(session)


@app.command()
def check(config: Optional[Path] = typer.Option(None, help="Pipeline config path")) -> None:
    """Verify external tools and report where the vision service would be reached."""
    from moonrip.vision.manager import probe_local_server, resolve_vision_config

    pipeline_cfg = _startup(config, verbose=False)
    vision_cfg = resolve_vision_config(pipeline_cfg.vision)

    table = Table(title="moonrip environment")
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    missing = [tool for tool in REQUIRED_TOOLS if not check_command(tool)]
    for tool in REQUIRED_TOOLS:
        table.add_row(tool, "[red]missing[/red]" if tool in missing else "[green]found[/green]")
    local = probe_local_server(vision_cfg.local_endpoint, vision_cfg.probe_timeout)
    table.add_row(f"Moondream local ({vision_cfg.local_endpoint})", "[green]up[/green]" if local else "[dim]down[/dim]")
    table.add_row("MOONDREAM_ENDPOINT", vision_cfg.endpoint or "[dim]unset[/dim]")
    table.add_row("MOONDREAM_API_KEY", "[green]set[/green]" if vision_cfg.api_key else "[dim]unset[/dim]")
    console.print(table)

    if missing:
        try:
            check_dependencies()
        except MoonripError as e:
            _fail(e)


@app.command()
def info(config: Optional[Path] = typer.Option(None, help="Pipeline config path")) -> None:
    """Show pipeline steps and their inputs."""
    from moonrip.core.pipeline_runner import STEP_MODULES, import_step_class

    pipeline_cfg = _load_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Inputs", style="yellow")
    table.add_column("Overrides", style="dim")

    for i, (name, module) in enumerate(STEP_MODULES.items(), 1):
        step_cls = import_step_class(module)
        overrides = pipeline_cfg.steps.get(name, {})
        table.add_row(
            str(i),
            name,
            module,
            ", ".join(step_cls.input_type.model_fields),
            ", ".join(f"{k}={v}" for k, v in overrides.items()) or "-",
        )
    console.print(table)


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. extract_frames)"),
    config: Optional[Path] = typer.Option(None, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run a single pipeline step against files already on disk."""
    from moonrip.core.pipeline_runner import STEP_MODULES, import_step_class, make_step, resolve_work_dir
    from moonrip.core.progress import RichProgress
    from moonrip.vision.manager import start_vision_service, stop_vision_service

    pipeline_cfg = _startup(config, verbose)
    module = STEP_MODULES.get(step_name)
    if module is None:
        console.print(f"[red]Unknown step '{step_name}'. Known: {', '.join(STEP_MODULES)}[/red]")
        raise typer.Exit(1)
    step_cls = import_step_class(module)

    if input_json:
        try:
            input_data = json.loads(input_json)
        except json.JSONDecodeError as e:
            console.print(f"[red]--input is not valid JSON:[/red] {escape(str(e))}")
            raise typer.Exit(1)
    else:
        schema = step_cls.input_type.model_json_schema()
        required = schema.get("required", [])
        console.print(f"[yellow]Step '{step_name}' requires input fields: {required}[/yellow]")
        console.print("[yellow]Use --input/-i with JSON string, e.g.:[/yellow]")
        console.print(f'  moonrip run-step {step_name} -i \'{{"field": "value"}}\'')
        raise typer.Exit(1)

    session = start_vision_service(pipeline_cfg.vision) if step_cls.needs_vision else None
    try:
        step = make_step(
            step_cls,
            pipeline_cfg,
            resolve_work_dir(pipeline_cfg),
            RichProgress(console),
            session.client if session else None,
        )
        console.print(f"[green]Running step: {step_name}[/green]")
        try:
            output = step.execute(step_cls.input_type(**input_data))
        except ValidationError as e:
            console.print(f"[red]Invalid input:[/red] {escape(str(e))}")
            raise typer.Exit(1)
        except MoonripError as e:
            _fail(e)
    finally:
        stop_vision_service(session)
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


if __name__ == "__main__":
    app()
