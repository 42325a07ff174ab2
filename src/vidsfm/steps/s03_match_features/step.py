"""Step 03: COLMAP exhaustive (all-pairs) matching."""

from __future__ import annotations

import logging
from typing import ClassVar

from vidsfm.core.errors import PrerequisiteError
from vidsfm.core.hardware import Accelerator
from vidsfm.core.step_base import BaseStep
from vidsfm.core.tools import ExhaustiveMatcherParams
from vidsfm.steps.s02_extract_features.step import NO_CUDA_ENV
from .config import MatchFeaturesConfig
from .contracts import MatchFeaturesInput, MatchFeaturesOutput

logger = logging.getLogger(__name__)


class MatchFeaturesStep(BaseStep[MatchFeaturesInput, MatchFeaturesOutput, MatchFeaturesConfig]):
    name: ClassVar[str] = "match_features"
    input_type: ClassVar = MatchFeaturesInput
    output_type: ClassVar = MatchFeaturesOutput
    config_type: ClassVar = MatchFeaturesConfig

    def check_prerequisites(self, inputs: MatchFeaturesInput) -> None:
        if not inputs.database_path.is_file():
            raise PrerequisiteError(
                self.name,
                f"database not found: {inputs.database_path}",
                "run 'extract-features' first",
            )
        self.require_tool(self.tools.matcher)

    def run(self, inputs: MatchFeaturesInput) -> MatchFeaturesOutput:
        if self.accelerator is Accelerator.NVIDIA:
            logger.info("Attempting GPU-accelerated matching...")
        elif self.accelerator is Accelerator.AMD:
            logger.warning("AMD GPU detected but COLMAP only supports NVIDIA CUDA")
            logger.info("Running exhaustive matching on CPU (this may be slower)...")
        else:
            logger.info("Running exhaustive matching on CPU...")

        env = NO_CUDA_ENV if self.config.disable_cuda_env else None
        params = ExhaustiveMatcherParams(database_path=inputs.database_path)
        self.tools.matcher.run(params, env=env).raise_for_status()

        logger.info("Feature matching complete")
        return MatchFeaturesOutput(database_path=inputs.database_path)
