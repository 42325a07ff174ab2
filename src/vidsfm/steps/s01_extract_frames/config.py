"""Configuration for Step 01: Video to Frames."""

from pathlib import Path

from pydantic import BaseModel, Field


class ExtractFramesConfig(BaseModel):
    quality: int = Field(2, ge=1, le=31, description="ffmpeg -q:v JPEG quality (lower is better)")
    image_ext: str = Field("jpg", description="Frame image format")
    name_pattern: str = Field("frame_%04d", description="ffmpeg output name pattern without extension")
    render_node: Path = Field(Path("/dev/dri/renderD128"), description="VAAPI device for AMD decoding")
