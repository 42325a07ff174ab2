"""I/O contracts for Step 04-alt: GLOMAP global mapping."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from vidsfm.core.contracts import RunConfig


class GlobalMapperInput(BaseModel):
    database_path: Path = Field(..., description="Matched COLMAP database")
    images_dir: Path = Field(..., description="Images the database was built from")
    sparse_dir: Path = Field(..., description="Output directory for sparse models")

    @classmethod
    def from_run_config(cls, run_config: RunConfig) -> GlobalMapperInput:
        return cls(
            database_path=run_config.database_path,
            images_dir=run_config.images_dir,
            sparse_dir=run_config.sparse_dir,
        )


class GlobalMapperOutput(BaseModel):
    sparse_dir: Path = Field(..., description="GLOMAP sparse reconstruction directory")
    model_dir: Path = Field(..., description="Expected model directory (sparse/0)")
    missing_files: list[str] = Field(default_factory=list, description="Expected model files not found")
