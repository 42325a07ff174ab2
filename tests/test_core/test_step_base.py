"""Tests for BaseStep execution order and reuse hooks."""

from __future__ import annotations

from typing import ClassVar

import pytest
from pydantic import BaseModel

from vidsfm.core.hardware import Accelerator
from vidsfm.core.step_base import BaseStep


class _Input(BaseModel):
    value: int = 1


class _Output(BaseModel):
    value: int
    reused: bool = False


class _Config(BaseModel):
    pass


class _CountingStep(BaseStep[_Input, _Output, _Config]):
    name: ClassVar[str] = "counting"
    input_type: ClassVar = _Input
    output_type: ClassVar = _Output
    config_type: ClassVar = _Config

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.events: list[str] = []

    def check_prerequisites(self, inputs: _Input) -> None:
        self.events.append("prerequisites")

    def run(self, inputs: _Input) -> _Output:
        self.events.append("run")
        return _Output(value=inputs.value)


class _ReusingStep(_CountingStep):
    done = True

    def is_complete(self, inputs: _Input) -> bool:
        return self.done

    def existing_output(self, inputs: _Input) -> _Output:
        return _Output(value=inputs.value, reused=True)


def _make(cls):
    return cls(config=_Config(), tools=None, accelerator=Accelerator.CPU)


class TestExecute:
    def test_runs_after_prerequisites(self):
        step = _make(_CountingStep)
        assert step.execute(_Input(value=7)) == _Output(value=7)
        assert step.events == ["prerequisites", "run"]

    def test_reuse_skips_prerequisites_and_run(self):
        step = _make(_ReusingStep)
        output = step.execute(_Input())
        assert output.reused is True
        assert step.events == []

    def test_incomplete_step_runs(self):
        step = _make(_ReusingStep)
        step.done = False
        assert step.execute(_Input()).reused is False
        assert step.events == ["prerequisites", "run"]


class TestReuseHooks:
    def test_is_complete_requires_existing_output(self):
        with pytest.raises(TypeError, match="existing_output"):

            class _Broken(_CountingStep):
                def is_complete(self, inputs: _Input) -> bool:
                    return True

    def test_inherited_pair_is_accepted(self):
        class _Child(_ReusingStep):
            pass

        assert _make(_Child).execute(_Input()).reused is True
