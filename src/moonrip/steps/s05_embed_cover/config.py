"""Configuration for Step 05: Embed the cover and deliver the file."""

from pydantic import BaseModel, Field


class EmbedCoverConfig(BaseModel):
    binary: str = Field("ffmpeg", description="ffmpeg executable")
    cover_title: str = Field("Album cover", description="Title tag on the picture stream")
    cover_comment: str = Field("Cover (front)", description="Comment tag marking the front cover")
    temp_suffix: str = Field("_with_cover", description="Suffix of the muxed sibling before copying out")
