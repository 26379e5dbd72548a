"""Tests for shared contracts: RipInputs, formats, frames."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from moonrip.core.contracts import (
    FORMATS,
    AudioFormat,
    PipelineConfig,
    RipInputs,
    ScoredFrame,
    VideoInfo,
    is_video_url,
)


class TestIsVideoUrl:
    @pytest.mark.parametrize("url", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "youtube.com/watch?v=abc",
        "http://vimeo.com/12345",
    ])
    def test_accepts(self, url):
        assert is_video_url(url) is True

    @pytest.mark.parametrize("url", ["not-a-url", "", "   ", "ftp://example.com/video"])
    def test_rejects(self, url):
        assert is_video_url(url) is False


class TestRipInputs:
    def test_bare_url_defaults(self):
        inputs = RipInputs(url="https://www.youtube.com/watch?v=dQw4w9WgXcQ")
        assert inputs.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert inputs.format is AudioFormat.MP3
        assert inputs.prompt is None
        assert inputs.output_dir == Path.cwd()

    def test_prompt_and_output(self, tmp_path: Path):
        inputs = RipInputs(url="https://youtu.be/x", prompt="vibrant concert scene", output_dir=tmp_path)
        assert inputs.prompt == "vibrant concert scene"
        assert inputs.output_dir == tmp_path

    def test_blank_prompt_is_none(self):
        assert RipInputs(url="https://youtu.be/x", prompt="   ").prompt is None

    def test_home_expansion(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("HOME", str(tmp_path))
        inputs = RipInputs(url="https://youtu.be/x", output_dir="~/Music")
        assert inputs.output_dir == tmp_path / "Music"

    def test_empty_output_dir_is_cwd(self):
        assert RipInputs(url="https://youtu.be/x", output_dir="").output_dir == Path.cwd()

    def test_invalid_url(self):
        with pytest.raises(ValidationError, match="Invalid video URL"):
            RipInputs(url="not-a-url")

    def test_format_from_string(self):
        assert RipInputs(url="https://youtu.be/x", format="wav").format is AudioFormat.WAV

    def test_frozen(self):
        inputs = RipInputs(url="https://youtu.be/x")
        with pytest.raises(ValidationError):
            inputs.url = "https://youtu.be/y"


class TestFormats:
    def test_every_format_has_spec(self):
        assert set(FORMATS) == set(AudioFormat)

    def test_codec_table(self):
        assert AudioFormat.MP3.spec.codec == "libmp3lame"
        assert AudioFormat.MP3.spec.quality_args == ("-q:a", "0")
        assert AudioFormat.M4A.spec.quality_args == ("-b:a", "256k")
        assert AudioFormat.WAV.spec.quality_args == ()

    def test_extensions(self):
        assert [f.extension for f in AudioFormat] == [".mp3", ".m4a", ".wav"]


class TestModels:
    def test_video_info_defaults(self):
        info = VideoInfo(video_path=Path("/tmp/id.mp4"))
        assert info.title == "Unknown"
        assert info.audio_path is None
        assert info.artist is None

    def test_video_info_immutable(self):
        info = VideoInfo(video_path=Path("/tmp/id.mp4"))
        with pytest.raises(ValidationError):
            info.title = "changed"

    def test_scored_frame_range(self):
        with pytest.raises(ValidationError):
            ScoredFrame(path=Path("f.jpg"), timestamp=1.0, score=11)

    def test_pipeline_config_defaults(self):
        cfg = PipelineConfig()
        assert cfg.work_dir == Path(".moonrip-temp")
        assert cfg.keep_work_dir is False
        assert cfg.vision.local_endpoint == "http://localhost:2020/v1"
        assert cfg.steps == {}
