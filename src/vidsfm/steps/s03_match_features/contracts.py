"""I/O contracts for Step 03: exhaustive feature matching."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from vidsfm.core.contracts import RunConfig


class MatchFeaturesInput(BaseModel):
    database_path: Path = Field(..., description="COLMAP database with extracted features")

    @classmethod
    def from_run_config(cls, run_config: RunConfig) -> MatchFeaturesInput:
        return cls(database_path=run_config.database_path)


class MatchFeaturesOutput(BaseModel):
    database_path: Path = Field(..., description="COLMAP database now holding matches")
