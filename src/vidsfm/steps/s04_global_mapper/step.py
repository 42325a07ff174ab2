"""Step 04-alt: GLOMAP global Structure-from-Motion.

Solves rotations and positions for all images at once instead of
registering them one by one, which is typically much faster than the
incremental mapper on video sequences.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from vidsfm.core.step_base import BaseStep
from vidsfm.core.tools import MapperParams
from vidsfm.utils.io import missing_reconstruction_files
from .config import GlobalMapperConfig
from .contracts import GlobalMapperInput, GlobalMapperOutput

logger = logging.getLogger(__name__)


class GlobalMapperStep(BaseStep[GlobalMapperInput, GlobalMapperOutput, GlobalMapperConfig]):
    name: ClassVar[str] = "reconstruct_global"
    input_type: ClassVar = GlobalMapperInput
    output_type: ClassVar = GlobalMapperOutput
    config_type: ClassVar = GlobalMapperConfig

    def check_prerequisites(self, inputs: GlobalMapperInput) -> None:
        self.require_tool(self.tools.global_mapper)

    def run(self, inputs: GlobalMapperInput) -> GlobalMapperOutput:
        inputs.sparse_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Running GLOMAP global mapper. GLOMAP is typically 10-100x faster than COLMAP!")

        params = MapperParams(
            database_path=inputs.database_path,
            image_path=inputs.images_dir,
            output_path=inputs.sparse_dir,
        )
        self.tools.global_mapper.run(params).raise_for_status()

        model_dir = inputs.sparse_dir / self.config.model_name
        logger.info("GLOMAP reconstruction complete")
        return GlobalMapperOutput(
            sparse_dir=inputs.sparse_dir,
            model_dir=model_dir,
            missing_files=missing_reconstruction_files(model_dir),
        )
