"""I/O contracts for Step 02: COLMAP feature extraction."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from vidsfm.core.contracts import RunConfig


class ExtractFeaturesInput(BaseModel):
    images_dir: Path = Field(..., description="Directory of extracted frames")
    database_path: Path = Field(..., description="COLMAP database to create or extend")

    @classmethod
    def from_run_config(cls, run_config: RunConfig) -> ExtractFeaturesInput:
        return cls(images_dir=run_config.images_dir, database_path=run_config.database_path)


class ExtractFeaturesOutput(BaseModel):
    database_path: Path = Field(..., description="COLMAP database holding keypoints/descriptors")
    image_count: int = Field(..., description="Number of images handed to the extractor")
