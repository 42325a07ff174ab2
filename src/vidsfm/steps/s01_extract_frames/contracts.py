"""I/O contracts for Step 01: Video to Frames extraction."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from vidsfm.core.contracts import RunConfig


class ExtractFramesInput(BaseModel):
    video_path: Path = Field(..., description="Path to input video file (.mp4)")
    images_dir: Path = Field(..., description="Directory that receives the frames")
    fps: int = Field(5, gt=0, description="Frames sampled per second of video")
    force: bool = Field(False, description="Re-extract even if frames already exist")

    @classmethod
    def from_run_config(cls, run_config: RunConfig) -> ExtractFramesInput:
        return cls(
            video_path=run_config.video_path,
            images_dir=run_config.images_dir,
            fps=run_config.fps,
            force=run_config.force,
        )


class ExtractFramesOutput(BaseModel):
    frames_dir: Path = Field(..., description="Directory containing extracted frames")
    frame_count: int = Field(..., description="Number of frames in frames_dir")
    fps_used: int | None = Field(None, description="Sampling rate, None when frames were reused")
    decoder: str | None = Field(None, description="Decode strategy that succeeded (cuda|vaapi|cpu)")
    skipped: bool = Field(False, description="True when existing frames were kept")
    frame_list: list[str] = Field(default_factory=list, description="List of frame filenames")
