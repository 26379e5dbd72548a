"""I/O contracts for Step 04: Score frames and pick the cover."""

from pathlib import Path

from pydantic import BaseModel, Field

from moonrip.core.contracts import Frame, ScoredFrame


class SelectCoverInput(BaseModel):
    frames: list[Frame] = Field(..., description="Candidate frames in timestamp order")
    prompt: str | None = Field(None, description="What the cover should show; None = generic album art")


class SelectCoverOutput(BaseModel):
    cover_path: Path = Field(..., description="Chosen frame image")
    cover_timestamp: float
    cover_score: int
    cover_description: str
    scored_frames: list[ScoredFrame] = Field(default_factory=list)
