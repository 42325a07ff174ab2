"""Typed wrappers around the external command-line tools.

Each tool turns a Pydantic params model into an argument list and runs it
through :func:`run_command`. Steps only talk to :class:`ExternalTool`, so
tests can hand them fakes that record calls instead of spawning processes.
"""

from __future__ import annotations

import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, Field

from vidsfm.utils.subprocess_utils import run_command
from .contracts import ToolPaths

ParamsT = TypeVar("ParamsT", bound=BaseModel)


class ToolResult(BaseModel):
    """Exit status and (when captured) output of one tool invocation."""

    command: list[str] = Field(default_factory=list)
    returncode: int
    stdout: str | None = None
    stderr: str | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def raise_for_status(self) -> None:
        if not self.ok:
            raise subprocess.CalledProcessError(
                self.returncode, " ".join(self.command), self.stdout, self.stderr
            )


class ExternalTool(ABC, Generic[ParamsT]):
    """One external program invoked with typed parameters."""

    name: ClassVar[str] = ""

    def __init__(self, binary: str):
        self.binary = binary

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    @abstractmethod
    def build_command(self, params: ParamsT) -> list[str]:
        ...

    def run(
        self,
        params: ParamsT,
        *,
        quiet: bool = False,
        env: dict[str, str] | None = None,
    ) -> ToolResult:
        """Run the tool to completion. ``quiet`` captures output instead of streaming it."""
        cmd = self.build_command(params)
        result = run_command(cmd, check=False, env=env, capture=quiet)
        return ToolResult(
            command=cmd,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )


# ── ffmpeg ───────────────────────────────────────────────────────────

class FfmpegParams(BaseModel):
    video_path: Path
    output_pattern: Path = Field(..., description="e.g. images/frame_%04d.jpg")
    fps: int = Field(..., gt=0)
    quality: int = Field(2, description="JPEG quality scale for -q:v (2 = high)")
    input_args: list[str] = Field(default_factory=list, description="Decoder args placed before -i")
    extra_filters: list[str] = Field(default_factory=list, description="Filters appended after fps=")


class Ffmpeg(ExternalTool[FfmpegParams]):
    name: ClassVar[str] = "ffmpeg"

    def build_command(self, params: FfmpegParams) -> list[str]:
        vf = ",".join([f"fps={params.fps}", *params.extra_filters])
        return [
            self.binary,
            *params.input_args,
            "-i", str(params.video_path),
            "-vf", vf,
            "-q:v", str(params.quality),
            str(params.output_pattern),
            "-y",
        ]


# ── COLMAP / GLOMAP ──────────────────────────────────────────────────

class FeatureExtractorParams(BaseModel):
    image_path: Path
    database_path: Path
    camera_model: str = "SIMPLE_RADIAL"
    single_camera: bool = True


class ColmapFeatureExtractor(ExternalTool[FeatureExtractorParams]):
    name: ClassVar[str] = "colmap feature_extractor"

    def build_command(self, params: FeatureExtractorParams) -> list[str]:
        return [
            self.binary, "feature_extractor",
            "--image_path", str(params.image_path),
            "--database_path", str(params.database_path),
            "--ImageReader.camera_model", params.camera_model,
            "--ImageReader.single_camera", "1" if params.single_camera else "0",
        ]


class ExhaustiveMatcherParams(BaseModel):
    database_path: Path


class ColmapExhaustiveMatcher(ExternalTool[ExhaustiveMatcherParams]):
    name: ClassVar[str] = "colmap exhaustive_matcher"

    def build_command(self, params: ExhaustiveMatcherParams) -> list[str]:
        return [self.binary, "exhaustive_matcher", "--database_path", str(params.database_path)]


class MapperParams(BaseModel):
    database_path: Path
    image_path: Path
    output_path: Path


class ColmapMapper(ExternalTool[MapperParams]):
    """COLMAP incremental mapper."""

    name: ClassVar[str] = "colmap mapper"

    def build_command(self, params: MapperParams) -> list[str]:
        return [
            self.binary, "mapper",
            "--database_path", str(params.database_path),
            "--image_path", str(params.image_path),
            "--output_path", str(params.output_path),
        ]


class GlomapMapper(ExternalTool[MapperParams]):
    """GLOMAP global mapper."""

    name: ClassVar[str] = "glomap mapper"

    def build_command(self, params: MapperParams) -> list[str]:
        return [
            self.binary, "mapper",
            "--database_path", str(params.database_path),
            "--output_path", str(params.output_path),
            "--image_path", str(params.image_path),
        ]


@dataclass
class Toolbox:
    """The set of tools handed to pipeline steps."""

    ffmpeg: ExternalTool[FfmpegParams]
    feature_extractor: ExternalTool[FeatureExtractorParams]
    matcher: ExternalTool[ExhaustiveMatcherParams]
    incremental_mapper: ExternalTool[MapperParams]
    global_mapper: ExternalTool[MapperParams]

    @classmethod
    def from_paths(cls, paths: ToolPaths | None = None) -> Toolbox:
        paths = paths or ToolPaths()
        return cls(
            ffmpeg=Ffmpeg(paths.ffmpeg),
            feature_extractor=ColmapFeatureExtractor(paths.colmap),
            matcher=ColmapExhaustiveMatcher(paths.colmap),
            incremental_mapper=ColmapMapper(paths.colmap),
            global_mapper=GlomapMapper(paths.glomap),
        )
