"""Step 01: Extract frames from video with ffmpeg."""

from __future__ import annotations

import logging
from typing import ClassVar

from vidsfm.core.errors import PrerequisiteError
from vidsfm.core.step_base import BaseStep
from vidsfm.core.tools import FfmpegParams
from vidsfm.utils.io import count_images, list_images, remove_images
from .config import ExtractFramesConfig
from .contracts import ExtractFramesInput, ExtractFramesOutput
from .decoding import decode_strategies

logger = logging.getLogger(__name__)


class ExtractFramesStep(BaseStep[ExtractFramesInput, ExtractFramesOutput, ExtractFramesConfig]):
    name: ClassVar[str] = "extract_frames"
    input_type: ClassVar = ExtractFramesInput
    output_type: ClassVar = ExtractFramesOutput
    config_type: ClassVar = ExtractFramesConfig

    @property
    def _suffixes(self) -> tuple[str, ...]:
        return (f".{self.config.image_ext.lstrip('.')}",)

    def is_complete(self, inputs: ExtractFramesInput) -> bool:
        return not inputs.force and count_images(inputs.images_dir, self._suffixes) > 0

    def existing_output(self, inputs: ExtractFramesInput) -> ExtractFramesOutput:
        frames = list_images(inputs.images_dir, self._suffixes)
        logger.warning(
            f"Found {len(frames)} existing images in {inputs.images_dir} - skipping frame extraction"
        )
        logger.info("Use --force to re-extract frames")
        return ExtractFramesOutput(
            frames_dir=inputs.images_dir,
            frame_count=len(frames),
            skipped=True,
            frame_list=[f.name for f in frames],
        )

    def check_prerequisites(self, inputs: ExtractFramesInput) -> None:
        self.require_tool(self.tools.ffmpeg)
        if not inputs.video_path.is_file():
            raise PrerequisiteError(
                self.name,
                f"input video not found: {inputs.video_path}",
                f"place your video as '{inputs.video_path.name}' in the workspace or pass --input",
            )

    def run(self, inputs: ExtractFramesInput) -> ExtractFramesOutput:
        output_dir = inputs.images_dir

        removed = remove_images(output_dir, self._suffixes)
        if removed:
            logger.warning(f"Removed {removed} existing images due to --force")
        output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"Video: {inputs.video_path.name}")
        pattern = output_dir / f"{self.config.name_pattern}.{self.config.image_ext.lstrip('.')}"

        strategies = decode_strategies(self.accelerator, self.config.render_node)
        for strategy in strategies:
            if not strategy.accelerated:
                logger.info("Using CPU for decoding...")
            params = FfmpegParams(
                video_path=inputs.video_path,
                output_pattern=pattern,
                fps=inputs.fps,
                quality=self.config.quality,
                input_args=strategy.input_args,
                extra_filters=strategy.extra_filters,
            )
            result = self.tools.ffmpeg.run(params, quiet=strategy.accelerated)
            if result.ok:
                break
            if not strategy.accelerated:
                result.raise_for_status()
            logger.warning(
                f"{strategy.label} decoding failed (exit {result.returncode}), falling back to CPU..."
            )
            # Drop partial output so the CPU pass starts from an empty directory.
            remove_images(output_dir, self._suffixes)

        if strategy.accelerated:
            logger.info(f"Used {strategy.label} acceleration for decoding")

        frames = list_images(output_dir, self._suffixes)
        logger.info(f"Extracted {len(frames)} frames at {inputs.fps} fps")
        return ExtractFramesOutput(
            frames_dir=output_dir,
            frame_count=len(frames),
            fps_used=inputs.fps,
            decoder=strategy.name,
            frame_list=[f.name for f in frames],
        )
