"""Configuration for Step 04: Score frames and pick the cover."""

from pydantic import BaseModel, Field


class SelectCoverConfig(BaseModel):
    caption_length: str = Field("normal", description="Moondream caption length: short|normal")
    prompt_question: str = Field(
        'On a scale of 0-10, how well does this image match the description: "{prompt}"? '
        "Answer with just a number.",
        description="Score question when the user gave a prompt ({prompt} is substituted)",
    )
    default_question: str = Field(
        "On a scale of 0-10, how suitable is this image as album cover art? "
        "Consider composition, visual appeal, and focus. Answer with just a number.",
        description="Score question without a user prompt",
    )
    min_score: int = 0
    max_score: int = 10
