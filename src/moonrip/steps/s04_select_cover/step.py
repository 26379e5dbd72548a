"""Step 04: Ask Moondream to caption and score each frame, keep the best one."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from moonrip.core.contracts import Frame, ScoredFrame
from moonrip.core.errors import CoverArtSelectionError, VisionServiceError
from moonrip.core.progress import ProgressSink
from moonrip.core.step_base import BaseStep
from moonrip.utils.progress_parsers import parse_first_int
from moonrip.vision.moondream import MoondreamClient
from .config import SelectCoverConfig
from .contracts import SelectCoverInput, SelectCoverOutput

logger = logging.getLogger(__name__)


def pick_best(scored: list[ScoredFrame]) -> ScoredFrame:
    """Highest score wins; on ties the earliest frame is kept."""
    if not scored:
        raise CoverArtSelectionError("No suitable frames found")
    return max(scored, key=lambda f: f.score)


class SelectCoverStep(BaseStep[SelectCoverInput, SelectCoverOutput, SelectCoverConfig]):
    name: ClassVar[str] = "select_cover"
    input_type: ClassVar = SelectCoverInput
    output_type: ClassVar = SelectCoverOutput
    config_type: ClassVar = SelectCoverConfig
    error_type: ClassVar = CoverArtSelectionError
    needs_vision: ClassVar[bool] = True

    def __init__(
        self,
        config: SelectCoverConfig,
        work_dir: Path,
        progress: ProgressSink | None = None,
        client: MoondreamClient | None = None,
    ):
        super().__init__(config, work_dir, progress)
        self.client = client

    def validate_inputs(self, inputs: SelectCoverInput) -> bool:
        if not inputs.frames:
            logger.error("No frames to choose from")
            return False
        return True

    def question_for(self, prompt: str | None) -> str:
        if prompt:
            return self.config.prompt_question.format(prompt=prompt)
        return self.config.default_question

    def score_answer(self, answer: str) -> int:
        value = parse_first_int(answer)
        if value is None:
            return 0
        return max(self.config.min_score, min(self.config.max_score, value))

    def score_frame(self, client: MoondreamClient, frame: Frame, question: str) -> tuple[ScoredFrame, bool]:
        """Returns the scored frame and whether the score request succeeded."""
        try:
            image = frame.path.read_bytes()
        except OSError as e:
            raise CoverArtSelectionError(f"Failed to read frame {frame.path}: {e}") from e

        try:
            description = client.caption(image, length=self.config.caption_length)
        except VisionServiceError as e:
            logger.warning(f"Caption failed for {frame.path.name}: {e}")
            description = ""

        # A failed score request counts as 0 rather than dropping the frame
        try:
            answer = client.query(image, question)
        except VisionServiceError as e:
            logger.warning(f"Scoring failed for {frame.path.name}: {e}")
            return ScoredFrame(path=frame.path, timestamp=frame.timestamp, description=description), False

        score = self.score_answer(answer)
        logger.debug(f"{frame.path.name} @ {frame.timestamp:.1f}s -> {score} ({answer!r})")
        scored = ScoredFrame(
            path=frame.path, timestamp=frame.timestamp, score=score, description=description
        )
        return scored, True

    def run(self, inputs: SelectCoverInput) -> SelectCoverOutput:
        if not inputs.frames:
            raise CoverArtSelectionError("No suitable frames found")

        client = self.client
        if client is None:
            raise CoverArtSelectionError("No vision client; start a vision session and pass its client in")

        question = self.question_for(inputs.prompt)
        scored: list[ScoredFrame] = []
        answered = 0
        self.progress.start("Scoring frames")
        try:
            for i, frame in enumerate(inputs.frames, 1):
                result, ok = self.score_frame(client, frame, question)
                scored.append(result)
                answered += ok
                self.progress.update(i / len(inputs.frames) * 100.0)
        finally:
            self.progress.finish()

        if answered == 0:
            raise CoverArtSelectionError(
                f"Could not score any of {len(scored)} frames; is the Moondream service reachable?"
            )

        best = pick_best(scored)
        logger.info(f"Selected frame at {best.timestamp:.1f}s (score: {best.score})")
        logger.info(f"Description: {best.description}")
        return SelectCoverOutput(
            cover_path=best.path,
            cover_timestamp=best.timestamp,
            cover_score=best.score,
            cover_description=best.description,
            scored_frames=scored,
        )
