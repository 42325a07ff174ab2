"""Common Pydantic models shared across pipeline steps."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class ReconstructionEngine(str, Enum):
    """Which mapper builds the sparse model."""

    INCREMENTAL = "incremental"  # COLMAP mapper
    GLOBAL = "global"  # GLOMAP mapper


class StepMeta(BaseModel):
    """Timing record for one executed stage."""

    step_name: str
    elapsed_seconds: float = 0.0
    skipped: bool = False


class ToolPaths(BaseModel):
    """Executable names (or absolute paths) of the external tools."""

    ffmpeg: str = "ffmpeg"
    colmap: str = "colmap"
    glomap: str = "glomap"


class PipelineConfig(BaseModel):
    """Top-level pipeline configuration loaded from pipeline.yaml."""

    project_name: str = "vidsfm"
    workspace: Path = Path("/workspace")
    input_video: str = "input.mp4"
    fps: PositiveInt = 5
    engine: ReconstructionEngine = ReconstructionEngine.GLOBAL
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    tools: ToolPaths = Field(default_factory=ToolPaths)
    steps: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Per-step config overrides keyed by step name"
    )


class RunConfig(BaseModel):
    """Fully resolved settings for one invocation. Frozen once built."""

    model_config = ConfigDict(frozen=True)

    workspace: Path
    video_path: Path
    database_path: Path
    images_dir: Path
    sparse_dir: Path
    fps: PositiveInt = 5
    engine: ReconstructionEngine = ReconstructionEngine.GLOBAL
    force: bool = False

    @classmethod
    def for_workspace(
        cls,
        workspace: Path,
        input_video: str = "input.mp4",
        fps: int = 5,
        engine: ReconstructionEngine = ReconstructionEngine.GLOBAL,
        force: bool = False,
    ) -> RunConfig:
        """Derive every artifact path from the workspace root."""
        workspace = Path(workspace)
        return cls(
            workspace=workspace,
            video_path=workspace / input_video,
            database_path=workspace / "database.db",
            images_dir=workspace / "images",
            sparse_dir=workspace / "sparse",
            fps=fps,
            engine=engine,
            force=force,
        )


class PipelineResult(BaseModel):
    """Summary of a full pipeline run."""

    engine: ReconstructionEngine
    stages: list[StepMeta] = Field(default_factory=list)
    model_dir: Path
    missing_files: list[str] = Field(default_factory=list)

    @property
    def reconstruction_ok(self) -> bool:
        return not self.missing_files
