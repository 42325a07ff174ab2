"""Tests for S04: incremental (COLMAP) and global (GLOMAP) mapping steps."""

import subprocess

import pytest

from vidsfm.core.errors import PrerequisiteError
from vidsfm.core.hardware import Accelerator
from vidsfm.steps.s04_global_mapper.config import GlobalMapperConfig
from vidsfm.steps.s04_global_mapper.contracts import GlobalMapperInput
from vidsfm.steps.s04_global_mapper.step import GlobalMapperStep
from vidsfm.steps.s04_incremental_mapper.config import IncrementalMapperConfig
from vidsfm.steps.s04_incremental_mapper.contracts import IncrementalMapperInput
from vidsfm.steps.s04_incremental_mapper.step import IncrementalMapperStep


class TestIncrementalMapperStep:
    def test_creates_sparse_dir_and_runs(self, toolbox, run_config):
        step = IncrementalMapperStep(
            config=IncrementalMapperConfig(), tools=toolbox, accelerator=Accelerator.CPU
        )
        output = step.execute(IncrementalMapperInput.from_run_config(run_config))

        assert run_config.sparse_dir.is_dir()
        assert output.model_dir == run_config.sparse_dir / "0"
        assert output.missing_files == []
        params = toolbox.incremental_mapper.calls[0].params
        assert params.image_path == run_config.images_dir
        assert params.output_path == run_config.sparse_dir
        assert toolbox.global_mapper.calls == []

    def test_reports_missing_artifacts(self, toolbox, run_config):
        toolbox.incremental_mapper.effect = None
        step = IncrementalMapperStep(
            config=IncrementalMapperConfig(), tools=toolbox, accelerator=Accelerator.CPU
        )
        output = step.execute(IncrementalMapperInput.from_run_config(run_config))
        assert output.missing_files == ["cameras.bin", "images.bin", "points3D.bin"]

    def test_tool_failure_propagates(self, toolbox, run_config):
        toolbox.incremental_mapper.returncodes = [1]
        step = IncrementalMapperStep(
            config=IncrementalMapperConfig(), tools=toolbox, accelerator=Accelerator.CPU
        )
        with pytest.raises(subprocess.CalledProcessError):
            step.execute(IncrementalMapperInput.from_run_config(run_config))


class TestGlobalMapperStep:
    def test_runs_glomap(self, toolbox, run_config):
        step = GlobalMapperStep(config=GlobalMapperConfig(), tools=toolbox, accelerator=Accelerator.CPU)
        output = step.execute(GlobalMapperInput.from_run_config(run_config))

        assert run_config.sparse_dir.is_dir()
        assert output.missing_files == []
        assert toolbox.global_mapper.calls[0].params.database_path == run_config.database_path
        assert toolbox.incremental_mapper.calls == []

    def test_missing_glomap(self, toolbox, run_config):
        toolbox.global_mapper.installed = False
        step = GlobalMapperStep(config=GlobalMapperConfig(), tools=toolbox, accelerator=Accelerator.CPU)
        with pytest.raises(PrerequisiteError, match="glomap"):
            step.execute(GlobalMapperInput.from_run_config(run_config))
        assert not run_config.sparse_dir.exists()
