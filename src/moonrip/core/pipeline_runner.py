"""Pipeline orchestrator: runs the rip steps in order around one work dir."""

from __future__ import annotations

import importlib
import logging
import shutil
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError

from .contracts import PipelineConfig, RipInputs, RipResult, StepMeta
from .errors import DownloadError
from .progress import ProgressSink

logger = logging.getLogger(__name__)

# Execution order; each step's input is drawn from the outputs before it
STEP_MODULES: dict[str, str] = {
    "download": "moonrip.steps.s01_download",
    "convert_audio": "moonrip.steps.s02_convert_audio",
    "extract_frames": "moonrip.steps.s03_extract_frames",
    "select_cover": "moonrip.steps.s04_select_cover",
    "embed_cover": "moonrip.steps.s05_embed_cover",
}


def load_pipeline_config(config_path: Path | None = None) -> PipelineConfig:
    """Load and validate pipeline.yaml; no path means built-in defaults."""
    if config_path is None:
        return PipelineConfig()
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return PipelineConfig(**raw)


def load_step_config(pipeline_cfg: PipelineConfig, step_name: str, config_class: type[BaseModel]) -> BaseModel:
    """Build a step config from the ``steps.<name>`` section of the pipeline config."""
    return config_class(**pipeline_cfg.steps.get(step_name, {}))


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'moonrip.steps.s03_extract_frames'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def resolve_work_dir(pipeline_cfg: PipelineConfig) -> Path:
    work_dir = pipeline_cfg.work_dir
    return work_dir if work_dir.is_absolute() else Path.cwd() / work_dir


def prepare_work_dir(work_dir: Path) -> Path:
    """Start every run from an empty work dir; a crashed run may have left files."""
    try:
        if work_dir.exists():
            logger.info(f"Removing stale work dir {work_dir}")
            shutil.rmtree(work_dir)
        work_dir.mkdir(parents=True)
    except OSError as e:
        raise DownloadError(f"Failed to create temp directory {work_dir}: {e}") from e
    return work_dir


def cleanup_work_dir(work_dir: Path) -> None:
    if not work_dir.exists():
        return
    try:
        shutil.rmtree(work_dir)
        logger.debug(f"Removed work dir {work_dir}")
    except OSError as e:
        logger.warning(f"Could not remove work dir {work_dir}: {e}")


def build_step_input(step_cls, context: dict[str, Any]) -> BaseModel:
    """Pick the keys the step's input model declares out of the running context."""
    fields = step_cls.input_type.model_fields
    data = {k: v for k, v in context.items() if k in fields}
    try:
        return step_cls.input_type(**data)
    except ValidationError as e:
        raise step_cls.error_type(f"[{step_cls.name}] Invalid step input: {e}") from e


def make_step(step_cls, pipeline_cfg: PipelineConfig, work_dir: Path, progress=None, client=None):
    step_config = load_step_config(pipeline_cfg, step_cls.name, step_cls.config_type)
    kwargs: dict[str, Any] = {"config": step_config, "work_dir": work_dir, "progress": progress}
    if step_cls.needs_vision:
        kwargs["client"] = client
    return step_cls(**kwargs)


def run_pipeline(
    inputs: RipInputs,
    pipeline_cfg: PipelineConfig,
    progress: ProgressSink | None = None,
    vision=None,
) -> RipResult:
    """Download, convert, sample, score and embed; always clean up afterwards.

    ``vision`` is an already started VisionSession. When omitted the runner
    starts one and stops it again on the way out.
    """
    from moonrip.vision.manager import start_vision_service, stop_vision_service

    work_dir = resolve_work_dir(pipeline_cfg)
    owns_vision = vision is None
    context: dict[str, Any] = inputs.model_dump()
    metas: list[StepMeta] = []

    logger.info(f"Pipeline '{pipeline_cfg.project_name}' with {len(STEP_MODULES)} steps")
    try:
        if owns_vision:
            vision = start_vision_service(pipeline_cfg.vision)
        prepare_work_dir(work_dir)

        for step_name, module in STEP_MODULES.items():
            logger.info(f"--- Step: {step_name} ---")
            step_cls = import_step_class(module)
            step = make_step(step_cls, pipeline_cfg, work_dir, progress, vision.client)
            output = step.execute(build_step_input(step_cls, context))
            context.update(output.model_dump())
            if step.last_meta is not None:
                metas.append(step.last_meta)
    finally:
        if owns_vision:
            stop_vision_service(vision)
        if pipeline_cfg.keep_work_dir:
            logger.info(f"Keeping work dir {work_dir}")
        else:
            cleanup_work_dir(work_dir)

    logger.info("Pipeline complete.")
    return RipResult(
        final_path=context["final_path"],
        title=context.get("title") or "Unknown",
        cover_timestamp=context["cover_timestamp"],
        cover_score=context["cover_score"],
        cover_description=context["cover_description"],
        steps=metas,
    )
