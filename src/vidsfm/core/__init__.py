"""vidsfm core: pipeline runner, base step, tools, shared contracts."""

from .step_base import BaseStep
from .contracts import PipelineConfig, PipelineResult, ReconstructionEngine, RunConfig, StepMeta
from .errors import PrerequisiteError
from .hardware import Accelerator, detect_accelerator
from .pipeline_runner import load_pipeline_config, resolve_run_config, run_pipeline, run_stage
from .tools import Toolbox
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "PipelineConfig",
    "PipelineResult",
    "ReconstructionEngine",
    "RunConfig",
    "StepMeta",
    "PrerequisiteError",
    "Accelerator",
    "detect_accelerator",
    "load_pipeline_config",
    "resolve_run_config",
    "run_pipeline",
    "run_stage",
    "Toolbox",
    "setup_logging",
]
