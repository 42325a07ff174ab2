"""Configuration for Step 04: COLMAP incremental mapping."""

from pydantic import BaseModel, Field


class IncrementalMapperConfig(BaseModel):
    model_name: str = Field("0", description="Model subdirectory checked after mapping")
