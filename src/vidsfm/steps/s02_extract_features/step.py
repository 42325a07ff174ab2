"""Step 02: COLMAP SIFT feature extraction."""

from __future__ import annotations

import logging
from typing import ClassVar

from vidsfm.core.errors import PrerequisiteError
from vidsfm.core.hardware import Accelerator
from vidsfm.core.step_base import BaseStep
from vidsfm.core.tools import FeatureExtractorParams
from vidsfm.utils.io import count_images
from .config import ExtractFeaturesConfig
from .contracts import ExtractFeaturesInput, ExtractFeaturesOutput

logger = logging.getLogger(__name__)

# Explicit --SiftExtraction.use_gpu is unreliable; hiding CUDA devices avoids
# crashes and COLMAP still falls back to whatever it can use.
NO_CUDA_ENV = {"CUDA_VISIBLE_DEVICES": ""}


class ExtractFeaturesStep(BaseStep[ExtractFeaturesInput, ExtractFeaturesOutput, ExtractFeaturesConfig]):
    name: ClassVar[str] = "extract_features"
    input_type: ClassVar = ExtractFeaturesInput
    output_type: ClassVar = ExtractFeaturesOutput
    config_type: ClassVar = ExtractFeaturesConfig

    def check_prerequisites(self, inputs: ExtractFeaturesInput) -> None:
        if count_images(inputs.images_dir) == 0:
            raise PrerequisiteError(
                self.name,
                f"no images found in {inputs.images_dir}",
                "run 'extract-frames' first",
            )
        self.require_tool(self.tools.feature_extractor)

    def run(self, inputs: ExtractFeaturesInput) -> ExtractFeaturesOutput:
        image_count = count_images(inputs.images_dir)
        logger.info(f"Processing {image_count} images...")

        if self.accelerator is Accelerator.NVIDIA:
            logger.info("Attempting GPU-accelerated feature extraction...")
        elif self.accelerator is Accelerator.AMD:
            logger.warning("AMD GPU detected but COLMAP only supports NVIDIA CUDA")
            logger.info("Using CPU for feature extraction (this may be slower)...")
        else:
            logger.info("Using CPU for feature extraction...")

        params = FeatureExtractorParams(
            image_path=inputs.images_dir,
            database_path=inputs.database_path,
            camera_model=self.config.camera_model,
            single_camera=self.config.single_camera,
        )
        env = NO_CUDA_ENV if self.config.disable_cuda_env else None
        self.tools.feature_extractor.run(params, env=env).raise_for_status()

        logger.info("Feature extraction complete")
        return ExtractFeaturesOutput(database_path=inputs.database_path, image_count=image_count)
