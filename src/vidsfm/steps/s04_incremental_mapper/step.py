"""Step 04: COLMAP incremental Structure-from-Motion."""

from __future__ import annotations

import logging
from typing import ClassVar

from vidsfm.core.step_base import BaseStep
from vidsfm.core.tools import MapperParams
from vidsfm.utils.io import missing_reconstruction_files
from .config import IncrementalMapperConfig
from .contracts import IncrementalMapperInput, IncrementalMapperOutput

logger = logging.getLogger(__name__)


class IncrementalMapperStep(
    BaseStep[IncrementalMapperInput, IncrementalMapperOutput, IncrementalMapperConfig]
):
    name: ClassVar[str] = "reconstruct_incremental"
    input_type: ClassVar = IncrementalMapperInput
    output_type: ClassVar = IncrementalMapperOutput
    config_type: ClassVar = IncrementalMapperConfig

    def check_prerequisites(self, inputs: IncrementalMapperInput) -> None:
        self.require_tool(self.tools.incremental_mapper)

    def run(self, inputs: IncrementalMapperInput) -> IncrementalMapperOutput:
        inputs.sparse_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Running COLMAP incremental mapper. This may take a while for large datasets...")

        params = MapperParams(
            database_path=inputs.database_path,
            image_path=inputs.images_dir,
            output_path=inputs.sparse_dir,
        )
        self.tools.incremental_mapper.run(params).raise_for_status()

        model_dir = inputs.sparse_dir / self.config.model_name
        logger.info("COLMAP reconstruction complete")
        return IncrementalMapperOutput(
            sparse_dir=inputs.sparse_dir,
            model_dir=model_dir,
            missing_files=missing_reconstruction_files(model_dir),
        )
