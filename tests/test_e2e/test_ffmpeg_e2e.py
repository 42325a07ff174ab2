"""End-to-end frame extraction against a real ffmpeg binary."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from vidsfm.core.contracts import RunConfig
from vidsfm.core.hardware import Accelerator
from vidsfm.core.tools import Toolbox
from vidsfm.steps.s01_extract_frames.config import ExtractFramesConfig
from vidsfm.steps.s01_extract_frames.contracts import ExtractFramesInput
from vidsfm.steps.s01_extract_frames.step import ExtractFramesStep

pytestmark = [
    pytest.mark.e2e,
    pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed"),
]

DURATION_S = 4


@pytest.fixture
def synthetic_video(tmp_path: Path) -> Path:
    """A 4 s, 25 fps test-pattern video generated by ffmpeg itself."""
    video_path = tmp_path / "workspace" / "input.mp4"
    video_path.parent.mkdir(parents=True)
    subprocess.run(
        [
            "ffmpeg", "-hide_banner", "-loglevel", "error",
            "-f", "lavfi", "-i", f"testsrc=duration={DURATION_S}:size=160x120:rate=25",
            "-pix_fmt", "yuv420p", str(video_path), "-y",
        ],
        check=True,
    )
    return video_path


@pytest.mark.parametrize("fps", [2, 5])
def test_frame_count_matches_rate(synthetic_video: Path, fps: int):
    run_config = RunConfig.for_workspace(synthetic_video.parent, fps=fps)
    step = ExtractFramesStep(
        config=ExtractFramesConfig(), tools=Toolbox.from_paths(), accelerator=Accelerator.CPU
    )

    output = step.execute(ExtractFramesInput.from_run_config(run_config))

    expected = DURATION_S * fps
    assert abs(output.frame_count - expected) <= 1
    assert output.frame_list[0] == "frame_0001.jpg"


def test_rerun_without_force_keeps_frames(synthetic_video: Path):
    run_config = RunConfig.for_workspace(synthetic_video.parent)
    step = ExtractFramesStep(
        config=ExtractFramesConfig(), tools=Toolbox.from_paths(), accelerator=Accelerator.CPU
    )
    first = step.execute(ExtractFramesInput.from_run_config(run_config))
    mtimes = {p.name: p.stat().st_mtime_ns for p in run_config.images_dir.iterdir()}

    second = step.execute(ExtractFramesInput.from_run_config(run_config))

    assert second.skipped is True
    assert second.frame_count == first.frame_count
    assert {p.name: p.stat().st_mtime_ns for p in run_config.images_dir.iterdir()} == mtimes
