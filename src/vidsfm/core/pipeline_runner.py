"""Pipeline orchestrator: resolves the run configuration and executes steps in order."""

from __future__ import annotations

import importlib
import logging
import time
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel

from .contracts import (
    PipelineConfig,
    PipelineResult,
    ReconstructionEngine,
    RunConfig,
    StepMeta,
)
from .hardware import Accelerator, detect_accelerator, log_accelerator_summary
from .tools import Toolbox

logger = logging.getLogger(__name__)

STEP_MODULES: dict[str, str] = {
    "extract_frames": "vidsfm.steps.s01_extract_frames",
    "extract_features": "vidsfm.steps.s02_extract_features",
    "match_features": "vidsfm.steps.s03_match_features",
    "reconstruct_incremental": "vidsfm.steps.s04_incremental_mapper",
    "reconstruct_global": "vidsfm.steps.s04_global_mapper",
}

RECONSTRUCTION_STEPS: dict[ReconstructionEngine, str] = {
    ReconstructionEngine.INCREMENTAL: "reconstruct_incremental",
    ReconstructionEngine.GLOBAL: "reconstruct_global",
}


def load_pipeline_config(config_path: Path) -> PipelineConfig:
    """Load and validate pipeline.yaml."""
    with open(config_path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    return PipelineConfig(**raw)


def load_step_config(
    source: Path | dict[str, Any] | None, config_class: type[BaseModel]
) -> BaseModel:
    """Build a step config from a YAML file or an inline mapping."""
    if isinstance(source, Path):
        with open(source, encoding="utf-8") as f:
            source = yaml.safe_load(f)
    return config_class(**(source or {}))


def import_step_class(module_path: str):
    """Dynamically import a step class from its module path.

    Expects module_path like 'vidsfm.steps.s01_extract_frames'
    and looks for a class ending in 'Step' in that module's step.py.
    """
    step_module = importlib.import_module(f"{module_path}.step")
    for attr_name in dir(step_module):
        attr = getattr(step_module, attr_name)
        if (
            isinstance(attr, type)
            and hasattr(attr, "run")
            and attr_name.endswith("Step")
            and attr_name != "BaseStep"
        ):
            return attr
    raise ImportError(f"No Step class found in {module_path}.step")


def resolve_run_config(
    pipeline_cfg: PipelineConfig,
    workspace: Path | None = None,
    fps: int | None = None,
    input_video: str | None = None,
    use_incremental: bool = False,
    force: bool = False,
) -> RunConfig:
    """Merge CLI overrides over the pipeline config into a frozen RunConfig."""
    engine = ReconstructionEngine.INCREMENTAL if use_incremental else pipeline_cfg.engine
    return RunConfig.for_workspace(
        workspace=workspace if workspace is not None else pipeline_cfg.workspace,
        input_video=input_video or pipeline_cfg.input_video,
        fps=fps if fps is not None else pipeline_cfg.fps,
        engine=engine,
        force=force,
    )


def run_stage(
    step_name: str,
    run_config: RunConfig,
    pipeline_cfg: PipelineConfig,
    tools: Toolbox | None = None,
    accelerator: Accelerator | None = None,
) -> BaseModel:
    """Run one named stage against the resolved configuration."""
    if step_name not in STEP_MODULES:
        raise KeyError(f"Unknown step '{step_name}'. Known: {', '.join(STEP_MODULES)}")

    step_cls = import_step_class(STEP_MODULES[step_name])
    step_config = load_step_config(pipeline_cfg.steps.get(step_name), step_cls.config_type)
    step = step_cls(
        config=step_config,
        tools=tools or Toolbox.from_paths(pipeline_cfg.tools),
        accelerator=accelerator,
    )
    return step.execute(step_cls.input_type.from_run_config(run_config))


def run_pipeline(
    run_config: RunConfig,
    pipeline_cfg: PipelineConfig,
    tools: Toolbox | None = None,
    accelerator: Accelerator | None = None,
    console: Console | None = None,
) -> PipelineResult:
    """Extract frames, extract features, match, then reconstruct.

    Any stage failure propagates immediately. Missing model files after
    reconstruction are reported as a warning only.
    """
    console = console or Console()
    tools = tools or Toolbox.from_paths(pipeline_cfg.tools)
    if accelerator is None:
        accelerator = detect_accelerator()

    console.print(Panel.fit("COLMAP/GLOMAP Reconstruction Pipeline", style="bold green"))
    log_accelerator_summary(accelerator)

    step_names = [
        "extract_frames",
        "extract_features",
        "match_features",
        RECONSTRUCTION_STEPS[run_config.engine],
    ]
    logger.info(f"Pipeline '{pipeline_cfg.project_name}' with {len(step_names)} steps")

    stages: list[StepMeta] = []
    output = None
    for index, name in enumerate(step_names, 1):
        logger.info(f"--- Step {index}/{len(step_names)}: {name} ---")
        t0 = time.time()
        output = run_stage(name, run_config, pipeline_cfg, tools=tools, accelerator=accelerator)
        stages.append(
            StepMeta(
                step_name=name,
                elapsed_seconds=time.time() - t0,
                skipped=getattr(output, "skipped", False),
            )
        )

    result = PipelineResult(
        engine=run_config.engine,
        stages=stages,
        model_dir=output.model_dir,
        missing_files=output.missing_files,
    )

    console.print(Panel.fit("Pipeline Complete!", style="bold green"))
    logger.info(f"Results available in: {run_config.sparse_dir}")
    if result.reconstruction_ok:
        logger.info("Reconstruction successful")
        logger.info(f"  - Camera parameters: {result.model_dir / 'cameras.bin'}")
        logger.info(f"  - Camera poses: {result.model_dir / 'images.bin'}")
        logger.info(f"  - 3D points: {result.model_dir / 'points3D.bin'}")
    else:
        logger.warning(
            f"Reconstruction may have failed: {', '.join(result.missing_files)} "
            f"not found in {result.model_dir}. Check output above for errors."
        )
    return result
