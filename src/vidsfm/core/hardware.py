"""Host GPU capability detection.

Only ffmpeg decoding acts on the result. COLMAP decides on its own whether
CUDA is usable, so for the feature and matching stages it is informational.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

NVIDIA_SMI = "nvidia-smi"
RENDER_NODE = Path("/dev/dri/renderD128")


class Accelerator(str, Enum):
    NVIDIA = "nvidia"
    AMD = "amd"
    CPU = "cpu"


def _nvidia_available(nvidia_smi: str) -> bool:
    binary = shutil.which(nvidia_smi)
    if binary is None:
        return False
    try:
        result = subprocess.run(
            [binary],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=30,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug(f"{nvidia_smi} probe failed: {exc}")
        return False
    return result.returncode == 0


def _amd_available(render_node: Path) -> bool:
    return render_node.parent.is_dir() and render_node.exists()


def detect_accelerator(
    nvidia_smi: str = NVIDIA_SMI,
    render_node: Path = RENDER_NODE,
) -> Accelerator:
    """Classify the host: a working nvidia-smi wins, then a DRI render node."""
    if _nvidia_available(nvidia_smi):
        return Accelerator.NVIDIA
    if _amd_available(render_node):
        return Accelerator.AMD
    return Accelerator.CPU


def log_accelerator_summary(accelerator: Accelerator) -> None:
    if accelerator is Accelerator.NVIDIA:
        logger.info("NVIDIA GPU detected - full acceleration available")
    elif accelerator is Accelerator.AMD:
        logger.info("AMD GPU detected - video decoding acceleration available")
        logger.warning(
            "COLMAP only supports NVIDIA CUDA - will use CPU for feature extraction/matching"
        )
    else:
        logger.warning("No GPU detected - will use CPU for all operations (slower)")
