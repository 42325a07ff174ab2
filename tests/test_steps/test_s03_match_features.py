"""Tests for S03: exhaustive feature matching step."""

import subprocess

import pytest

from vidsfm.core.errors import PrerequisiteError
from vidsfm.core.hardware import Accelerator
from vidsfm.steps.s03_match_features.config import MatchFeaturesConfig
from vidsfm.steps.s03_match_features.contracts import MatchFeaturesInput
from vidsfm.steps.s03_match_features.step import MatchFeaturesStep


def _step(toolbox, accelerator=Accelerator.CPU) -> MatchFeaturesStep:
    return MatchFeaturesStep(config=MatchFeaturesConfig(), tools=toolbox, accelerator=accelerator)


class TestMatchFeaturesStep:
    def test_missing_database(self, toolbox, run_config):
        with pytest.raises(PrerequisiteError, match="extract-features"):
            _step(toolbox).execute(MatchFeaturesInput.from_run_config(run_config))
        assert toolbox.matcher.calls == []

    def test_runs_matcher(self, toolbox, run_config):
        run_config.database_path.write_bytes(b"db")
        output = _step(toolbox, Accelerator.AMD).execute(MatchFeaturesInput.from_run_config(run_config))

        assert output.database_path == run_config.database_path
        call = toolbox.matcher.calls[0]
        assert call.params.database_path == run_config.database_path
        assert call.env == {"CUDA_VISIBLE_DEVICES": ""}

    def test_tool_failure_propagates(self, toolbox, run_config):
        run_config.database_path.write_bytes(b"db")
        toolbox.matcher.returncodes = [1]
        with pytest.raises(subprocess.CalledProcessError):
            _step(toolbox).execute(MatchFeaturesInput.from_run_config(run_config))
