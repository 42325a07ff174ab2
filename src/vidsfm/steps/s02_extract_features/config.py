"""Configuration for Step 02: COLMAP feature extraction."""

from pydantic import BaseModel, Field


class ExtractFeaturesConfig(BaseModel):
    camera_model: str = Field("SIMPLE_RADIAL", description="Camera model: SIMPLE_RADIAL|PINHOLE|OPENCV")
    single_camera: bool = Field(True, description="Share intrinsics across all images")
    disable_cuda_env: bool = Field(
        True, description="Run with CUDA_VISIBLE_DEVICES='' and let COLMAP pick its own device"
    )
