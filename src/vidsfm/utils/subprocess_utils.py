"""Subprocess runner for the external tools (ffmpeg, COLMAP, GLOMAP)."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: int | None = None,
    check: bool = True,
    env: dict[str, str] | None = None,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    """Run an external command with logging and error handling.

    Output is passed through to the console unless ``capture`` is set.
    Captured output is decoded as UTF-8 with undecodable bytes replaced, since
    tools echo file names and media metadata byte for byte.
    ``env`` entries are layered over the current process environment.
    """
    cmd_str = " ".join(cmd)
    if env:
        overrides = " ".join(f"{k}={v!r}" for k, v in env.items())
        logger.info(f"Running: {overrides} {cmd_str}")
    else:
        logger.info(f"Running: {cmd_str}")

    full_env = {**os.environ, **env} if env else None
    result = subprocess.run(
        cmd,
        cwd=cwd,
        env=full_env,
        capture_output=capture,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
        check=False,
    )

    if result.stdout:
        logger.debug(f"stdout: {result.stdout[-500:]}")
    if result.stderr:
        logger.debug(f"stderr: {result.stderr[-500:]}")

    if check and result.returncode != 0:
        raise subprocess.CalledProcessError(
            result.returncode, cmd_str, result.stdout, result.stderr
        )
    return result
