"""Shared pytest fixtures for vidsfm tests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import pytest
from pydantic import BaseModel

from vidsfm.core.contracts import PipelineConfig, RunConfig
from vidsfm.core.tools import ExternalTool, ToolResult, Toolbox
from vidsfm.utils.io import RECONSTRUCTION_FILES


@dataclass
class ToolCall:
    params: Any
    quiet: bool
    env: dict[str, str] | None


class FakeTool(ExternalTool):
    """Records invocations instead of spawning a process."""

    name = "fake tool"

    def __init__(
        self,
        binary: str,
        returncodes: tuple[int, ...] = (0,),
        effect: Callable[[BaseModel], None] | None = None,
        effect_on_failure: bool = False,
        installed: bool = True,
        call_log: list[str] | None = None,
    ):
        super().__init__(binary)
        self.returncodes = list(returncodes)
        self.effect = effect
        self.effect_on_failure = effect_on_failure
        self.installed = installed
        self.call_log = call_log
        self.calls: list[ToolCall] = []

    def available(self) -> bool:
        return self.installed

    def build_command(self, params: BaseModel) -> list[str]:
        return [self.binary, *(f"{k}={v}" for k, v in params.model_dump().items())]

    def run(self, params, *, quiet=False, env=None) -> ToolResult:
        self.calls.append(ToolCall(params=params, quiet=quiet, env=env))
        if self.call_log is not None:
            self.call_log.append(self.binary)
        returncode = self.returncodes.pop(0) if len(self.returncodes) > 1 else self.returncodes[0]
        if self.effect and (returncode == 0 or self.effect_on_failure):
            self.effect(params)
        return ToolResult(command=self.build_command(params), returncode=returncode)


def write_frames(count: int) -> Callable[[BaseModel], None]:
    """ffmpeg stand-in: writes ``count`` numbered frames to the output pattern."""

    def effect(params) -> None:
        pattern = str(params.output_pattern)
        for i in range(1, count + 1):
            Path(pattern % i).write_bytes(b"\xff\xd8fake")

    return effect


def touch_database(params) -> None:
    params.database_path.write_bytes(b"SQLite format 3\x00")


def write_model(params) -> None:
    model_dir = params.output_path / "0"
    model_dir.mkdir(parents=True, exist_ok=True)
    for name in RECONSTRUCTION_FILES:
        (model_dir / name).write_bytes(b"\x00" * 8)


@pytest.fixture
def call_log() -> list[str]:
    return []


@pytest.fixture
def toolbox(call_log: list[str]) -> Toolbox:
    """Fake tools that produce the artifacts each real tool would."""
    return Toolbox(
        ffmpeg=FakeTool("ffmpeg", effect=write_frames(10), call_log=call_log),
        feature_extractor=FakeTool("colmap-features", effect=touch_database, call_log=call_log),
        matcher=FakeTool("colmap-matcher", call_log=call_log),
        incremental_mapper=FakeTool("colmap-mapper", effect=write_model, call_log=call_log),
        global_mapper=FakeTool("glomap-mapper", effect=write_model, call_log=call_log),
    )


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture
def input_video(workspace: Path) -> Path:
    video = workspace / "input.mp4"
    video.write_bytes(b"\x00\x00\x00\x18ftypmp42")
    return video


@pytest.fixture
def run_config(workspace: Path) -> RunConfig:
    return RunConfig.for_workspace(workspace)


@pytest.fixture
def pipeline_cfg(workspace: Path) -> PipelineConfig:
    return PipelineConfig(workspace=workspace)


@pytest.fixture
def sample_frames(run_config: RunConfig) -> Path:
    """Images directory already holding five extracted frames."""
    run_config.images_dir.mkdir(parents=True, exist_ok=True)
    for i in range(1, 6):
        (run_config.images_dir / f"frame_{i:04d}.jpg").write_bytes(b"\xff\xd8old")
    return run_config.images_dir


@pytest.fixture
def fake_tool() -> type[FakeTool]:
    return FakeTool


@pytest.fixture
def frames_effect() -> Callable[[int], Callable[[BaseModel], None]]:
    return write_frames
