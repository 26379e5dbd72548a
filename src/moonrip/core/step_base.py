"""Base class for all pipeline steps.

Every step declares typed Input, Output, Config via Pydantic models.
This lets the pipeline runner wire a step's input from the outputs of the
steps before it, and lets ``moonrip run-step`` build inputs from JSON.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel

from .contracts import StepMeta
from .errors import MoonripError
from .progress import NullProgress, ProgressSink

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)
ConfigT = TypeVar("ConfigT", bound=BaseModel)

logger = logging.getLogger(__name__)


class BaseStep(ABC, Generic[InputT, OutputT, ConfigT]):
    """Abstract base for pipeline steps.

    Subclasses must:
    1. Define concrete Pydantic models for InputT, OutputT, ConfigT
    2. Set class variables: name, input_type, output_type, config_type, error_type
    3. Implement run() and validate_inputs()

    Example:
        class ExtractFramesStep(BaseStep[ExtractFramesInput, ExtractFramesOutput, ExtractFramesConfig]):
            name = "extract_frames"
            input_type = ExtractFramesInput
            output_type = ExtractFramesOutput
            config_type = ExtractFramesConfig
            error_type = FrameExtractionError

            def run(self, inputs: ExtractFramesInput) -> ExtractFramesOutput: ...
            def validate_inputs(self, inputs: ExtractFramesInput) -> bool: ...
    """

    name: ClassVar[str] = ""
    input_type: ClassVar[type[BaseModel]]
    output_type: ClassVar[type[BaseModel]]
    config_type: ClassVar[type[BaseModel]]
    error_type: ClassVar[type[MoonripError]] = MoonripError
    # Runner passes the vision client to steps that set this
    needs_vision: ClassVar[bool] = False

    def __init__(self, config: ConfigT, work_dir: Path, progress: ProgressSink | None = None):
        self.config = config
        self.work_dir = Path(work_dir)
        self.progress = progress or NullProgress()
        self.last_meta: StepMeta | None = None

    @abstractmethod
    def run(self, inputs: InputT) -> OutputT:
        """Execute this pipeline step. Returns output model."""
        ...

    @abstractmethod
    def validate_inputs(self, inputs: InputT) -> bool:
        """Check that all required input artifacts exist and are valid."""
        ...

    def execute(self, inputs: InputT) -> OutputT:
        """Run with logging, timing, and validation."""
        step_name = self.name or self.__class__.__name__
        logger.debug(f"[{step_name}] Validating inputs...")

        if not self.validate_inputs(inputs):
            raise self.error_type(f"[{step_name}] Input validation failed")

        logger.info(f"[{step_name}] Starting...")
        t0 = time.time()
        result = self.run(inputs)
        elapsed = time.time() - t0
        logger.info(f"[{step_name}] Done in {elapsed:.1f}s")
        self.last_meta = StepMeta(
            step_name=step_name,
            elapsed_seconds=elapsed,
            params=self.config.model_dump(mode="json"),
        )
        return result

    @classmethod
    def get_input_schema(cls) -> dict:
        """Return JSON schema for inputs."""
        return cls.input_type.model_json_schema()

    @classmethod
    def get_output_schema(cls) -> dict:
        """Return JSON schema for outputs."""
        return cls.output_type.model_json_schema()

    @classmethod
    def get_config_schema(cls) -> dict:
        """Return JSON schema for config."""
        return cls.config_type.model_json_schema()
