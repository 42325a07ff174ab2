"""Configuration for Step 03: exhaustive feature matching."""

from pydantic import BaseModel, Field


class MatchFeaturesConfig(BaseModel):
    disable_cuda_env: bool = Field(
        True, description="Run with CUDA_VISIBLE_DEVICES='' and let COLMAP pick its own device"
    )
