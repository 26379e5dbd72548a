"""Tests for the typer CLI surface."""

from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from moonrip import cli
from moonrip.core.contracts import AudioFormat
from moonrip.core.errors import InvalidArgumentsError
from moonrip.vision.manager import VisionSession

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    # wide console so tables are not truncated; leave root logging alone
    monkeypatch.setattr(cli, "console", Console(width=200))
    monkeypatch.setattr(cli, "setup_logging", lambda level: None)


@pytest.fixture
def captured(monkeypatch):
    """Replace dependency checks and the pipeline run; collect what would have run."""
    calls = []

    def fake_execute(inputs, pipeline_cfg, verbose, vision=None):
        calls.append({"inputs": inputs, "config": pipeline_cfg, "verbose": verbose, "vision": vision})

    monkeypatch.setattr(cli, "check_dependencies", lambda: None)
    monkeypatch.setattr(cli, "_execute", fake_execute)
    return calls


class TestParseRipInputs:
    def test_defaults(self):
        inputs = cli.parse_rip_inputs("https://youtu.be/x")
        assert inputs.format is AudioFormat.MP3
        assert inputs.prompt is None
        assert inputs.output_dir == Path.cwd()

    def test_invalid_url_message(self):
        with pytest.raises(InvalidArgumentsError) as exc_info:
            cli.parse_rip_inputs("not-a-url")
        assert exc_info.value.message == "Invalid video URL. Must be a valid URL."


class TestRipCommand:
    def test_bare_url(self, captured):
        result = runner.invoke(cli.app, ["rip", "https://www.youtube.com/watch?v=dQw4w9WgXcQ"])
        assert result.exit_code == 0, result.output
        inputs = captured[0]["inputs"]
        assert inputs.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert inputs.format is AudioFormat.MP3
        assert inputs.prompt is None
        assert captured[0]["vision"] is None

    def test_all_flags(self, captured, tmp_path: Path):
        result = runner.invoke(cli.app, [
            "rip", "https://youtu.be/x",
            "-p", "vibrant concert scene",
            "-o", str(tmp_path / "Music"),
            "-f", "m4a",
            "--frames", "3",
            "--keep-temp",
        ])
        assert result.exit_code == 0, result.output
        call = captured[0]
        assert call["inputs"].prompt == "vibrant concert scene"
        assert call["inputs"].output_dir == tmp_path / "Music"
        assert call["inputs"].format is AudioFormat.M4A
        assert call["config"].steps["extract_frames"]["frame_count"] == 3
        assert call["config"].keep_work_dir is True

    def test_missing_url(self, captured):
        result = runner.invoke(cli.app, ["rip"])
        assert result.exit_code != 0
        assert captured == []

    def test_invalid_url(self, captured):
        result = runner.invoke(cli.app, ["rip", "not-a-url"])
        assert result.exit_code == 1
        assert "Invalid video URL. Must be a valid URL." in result.output
        assert "Usage" in result.output
        assert captured == []

    def test_unknown_format(self, captured):
        result = runner.invoke(cli.app, ["rip", "https://youtu.be/x", "-f", "flac"])
        assert result.exit_code == 2
        assert captured == []

    def test_missing_dependency(self, monkeypatch):
        monkeypatch.setattr("moonrip.utils.dependencies.shutil.which", lambda name: None)
        result = runner.invoke(cli.app, ["rip", "https://youtu.be/x"])
        assert result.exit_code == 1
        assert "yt-dlp is not installed" in result.output
        assert "Or visit:" in result.output

    def test_pipeline_error_exits_1(self, monkeypatch, tmp_path: Path):
        from moonrip.core.errors import DownloadError

        def boom(inputs, pipeline_cfg, progress=None, vision=None):
            raise DownloadError("Download failed: yt-dlp exited with code 1: Video unavailable")

        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(cli, "check_dependencies", lambda: None)
        monkeypatch.setattr("moonrip.core.pipeline_runner.run_pipeline", boom)
        result = runner.invoke(cli.app, ["rip", "https://youtu.be/x"])
        assert result.exit_code == 1
        assert "Video unavailable" in result.output


class TestDefaultRoute:
    def test_url_without_subcommand(self, captured, tmp_path: Path):
        result = runner.invoke(cli.app, [
            "https://youtu.be/x", "-p", "vibrant concert scene", "-o", str(tmp_path / "Music"),
        ])
        assert result.exit_code == 0, result.output
        inputs = captured[0]["inputs"]
        assert inputs.url == "https://youtu.be/x"
        assert inputs.prompt == "vibrant concert scene"
        assert inputs.output_dir == tmp_path / "Music"

    def test_no_args(self, captured):
        result = runner.invoke(cli.app, [])
        assert result.exit_code == 2
        assert captured == []

    @pytest.mark.parametrize("args", [
        ["--help"],
        ["-h"],
        ["rip", "--help"],
        ["https://youtu.be/x", "-h"],
    ])
    def test_help_exits_1(self, captured, args):
        result = runner.invoke(cli.app, args)
        assert result.exit_code == 1
        assert "Usage" in result.output
        assert captured == []

    def test_subcommands_still_route(self):
        result = runner.invoke(cli.app, ["info"])
        assert result.exit_code == 0, result.output
        assert "download" in result.output


class TestInteractiveCommand:
    def test_collects_inputs(self, captured, monkeypatch, tmp_path: Path, fake_vision):
        client = fake_vision()
        session = VisionSession(client=client, is_local=True, endpoint="http://localhost:2020/v1")
        monkeypatch.setattr("moonrip.vision.manager.start_vision_service", lambda cfg: session)
        monkeypatch.setenv("HOME", str(tmp_path))

        answers = "nope\nhttps://youtu.be/x\n2\nred guitar on stage\n~/Music\n"
        result = runner.invoke(cli.app, ["interactive"], input=answers)

        assert result.exit_code == 0, result.output
        assert "Please enter a valid video URL" in result.output
        call = captured[0]
        assert call["inputs"].url == "https://youtu.be/x"
        assert call["inputs"].format is AudioFormat.M4A
        assert call["inputs"].prompt == "red guitar on stage"
        assert call["inputs"].output_dir == tmp_path / "Music"
        assert call["vision"] is session
        assert client.closed is True

    def test_defaults(self, captured, monkeypatch, fake_vision):
        session = VisionSession(client=fake_vision(), is_local=False, endpoint="https://api.moondream.ai/v1")
        monkeypatch.setattr("moonrip.vision.manager.start_vision_service", lambda cfg: session)

        result = runner.invoke(cli.app, ["interactive"], input="https://youtu.be/x\n\n\n\n")

        assert result.exit_code == 0, result.output
        assert "Moondream cloud API" in result.output
        inputs = captured[0]["inputs"]
        assert inputs.format is AudioFormat.MP3
        assert inputs.prompt is None
        assert inputs.output_dir == Path.cwd()


class TestCheckCommand:
    def test_all_found(self, monkeypatch):
        monkeypatch.setattr("moonrip.utils.dependencies.shutil.which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr("moonrip.vision.manager.probe_local_server", lambda url, timeout: False)
        result = runner.invoke(cli.app, ["check"])
        assert result.exit_code == 0, result.output
        assert "found" in result.output
        assert "down" in result.output

    def test_missing_ffmpeg(self, monkeypatch):
        monkeypatch.setattr(
            "moonrip.utils.dependencies.shutil.which",
            lambda name: None if name == "ffmpeg" else f"/usr/bin/{name}",
        )
        monkeypatch.setattr("moonrip.vision.manager.probe_local_server", lambda url, timeout: True)
        result = runner.invoke(cli.app, ["check"])
        assert result.exit_code == 1
        assert "ffmpeg is not installed" in result.output


class TestInfoAndRunStep:
    def test_info_lists_steps(self):
        result = runner.invoke(cli.app, ["info"])
        assert result.exit_code == 0, result.output
        for name in ("download", "convert_audio", "extract_frames", "select_cover", "embed_cover"):
            assert name in result.output

    def test_unknown_step(self):
        result = runner.invoke(cli.app, ["run-step", "colorize"])
        assert result.exit_code == 1
        assert "Unknown step" in result.output

    def test_missing_input(self):
        result = runner.invoke(cli.app, ["run-step", "extract_frames"])
        assert result.exit_code == 1
        assert "video_path" in result.output

    def test_bad_json(self):
        result = runner.invoke(cli.app, ["run-step", "extract_frames", "-i", "{video_path"])
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_step_failure(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        payload = f'{{"audio_path": "{tmp_path / "a.mp3"}", "cover_path": "{tmp_path / "c.jpg"}"}}'
        result = runner.invoke(cli.app, ["run-step", "embed_cover", "-i", payload])
        assert result.exit_code == 1
        assert "Input validation failed" in result.output
