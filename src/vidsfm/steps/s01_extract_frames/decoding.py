"""ffmpeg decode strategies per accelerator class."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from vidsfm.core.hardware import RENDER_NODE, Accelerator


class DecodeStrategy(BaseModel):
    """How ffmpeg decodes the video. Only the decode path differs between strategies."""

    name: str
    label: str
    input_args: list[str] = Field(default_factory=list)
    extra_filters: list[str] = Field(default_factory=list)

    @property
    def accelerated(self) -> bool:
        return bool(self.input_args)


CPU_DECODE = DecodeStrategy(name="cpu", label="CPU")


def cuda_decode() -> DecodeStrategy:
    return DecodeStrategy(
        name="cuda",
        label="NVIDIA GPU (CUDA)",
        input_args=["-hwaccel", "cuda"],
        extra_filters=["hwdownload", "format=nv12", "format=yuv420p"],
    )


def vaapi_decode(render_node: Path = RENDER_NODE) -> DecodeStrategy:
    return DecodeStrategy(
        name="vaapi",
        label="AMD GPU (VAAPI)",
        input_args=[
            "-hwaccel", "vaapi",
            "-hwaccel_device", str(render_node),
            "-hwaccel_output_format", "vaapi",
        ],
        extra_filters=["hwdownload", "format=nv12"],
    )


def decode_strategies(
    accelerator: Accelerator, render_node: Path = RENDER_NODE
) -> list[DecodeStrategy]:
    """Candidates to try in order. The list always ends with CPU decoding."""
    if accelerator is Accelerator.NVIDIA:
        return [cuda_decode(), CPU_DECODE]
    if accelerator is Accelerator.AMD:
        return [vaapi_decode(render_node), CPU_DECODE]
    return [CPU_DECODE]
