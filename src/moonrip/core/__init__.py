"""moonrip core: pipeline runner, base step, shared contracts and errors."""

from .step_base import BaseStep
from .contracts import (
    AudioFormat,
    Frame,
    PipelineConfig,
    RipInputs,
    RipResult,
    ScoredFrame,
    StepMeta,
    VideoInfo,
    VisionConfig,
)
from .errors import MoonripError
from .pipeline_runner import run_pipeline, load_pipeline_config
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "AudioFormat",
    "Frame",
    "PipelineConfig",
    "RipInputs",
    "RipResult",
    "ScoredFrame",
    "StepMeta",
    "VideoInfo",
    "VisionConfig",
    "MoonripError",
    "run_pipeline",
    "load_pipeline_config",
    "setup_logging",
]
