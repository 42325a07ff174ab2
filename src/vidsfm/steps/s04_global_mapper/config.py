"""Configuration for Step 04-alt: GLOMAP global mapping."""

from pydantic import BaseModel, Field


class GlobalMapperConfig(BaseModel):
    model_name: str = Field("0", description="Model subdirectory checked after mapping")
