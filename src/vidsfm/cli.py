"""CLI entry point for the vidsfm pipeline.

Usage:
    vidsfm                              # Run full pipeline
    vidsfm full-pipeline --fps 10       # Same, custom frame rate
    vidsfm extract-frames --force       # Run a single stage
    vidsfm full-pipeline --use-colmap   # COLMAP mapper instead of GLOMAP
    vidsfm info                         # Show hardware and workspace state
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

import click
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from vidsfm.core.contracts import PipelineConfig
from vidsfm.core.errors import PrerequisiteError
from vidsfm.core.logging import setup_logging

app = typer.Typer(
    name="vidsfm",
    help="Video to sparse 3D reconstruction with ffmpeg, COLMAP and GLOMAP.",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True, soft_wrap=True)

DEFAULT_CONFIG = Path("configs/pipeline.yaml")

WORKSPACE_OPTION = typer.Option(
    None, "--workspace", "-w", envvar="VIDSFM_WORKSPACE",
    help="Workspace root holding the video and all artifacts (default: /workspace)",
)
CONFIG_OPTION = typer.Option(None, "--config", help=f"Pipeline config path (default: {DEFAULT_CONFIG} if present)")
FPS_OPTION = typer.Option(None, "--fps", min=1, help="Frame extraction rate (default: 5)")
INPUT_OPTION = typer.Option(None, "--input", help="Input video file under the workspace (default: input.mp4)")
USE_COLMAP_OPTION = typer.Option(False, "--use-colmap", help="Use COLMAP incremental mapper instead of GLOMAP")
FORCE_OPTION = typer.Option(False, "--force", help="Force re-extraction of frames even if they exist")


def _options(ctx: typer.Context, **given) -> dict:
    """Overlay options given after the command on those given before it."""
    merged = dict(ctx.obj or {})
    for key, value in given.items():
        if value is None or value is False:
            merged.setdefault(key, value)
        else:
            merged[key] = value
    return merged


def _load_config(config: Path | None) -> PipelineConfig:
    from vidsfm.core.pipeline_runner import load_pipeline_config

    if config is not None:
        return load_pipeline_config(config)
    if DEFAULT_CONFIG.exists():
        return load_pipeline_config(DEFAULT_CONFIG)
    return PipelineConfig()


def _exit_code(returncode: int) -> int:
    # Negative return codes mean the tool was killed by a signal.
    if returncode < 0:
        return 128 - returncode
    return returncode or 1


def _config_or_exit(opts: dict) -> PipelineConfig:
    try:
        return _load_config(opts.get("config"))
    except (OSError, ValidationError) as exc:
        err_console.print(f"Invalid pipeline config: {exc}", style="red", markup=False)
        raise typer.Exit(1)


def _dispatch(step_name: str | None, opts: dict) -> None:
    from vidsfm.core.pipeline_runner import resolve_run_config, run_pipeline, run_stage

    pipeline_cfg = _config_or_exit(opts)
    setup_logging(pipeline_cfg.log_level)
    run_config = resolve_run_config(
        pipeline_cfg,
        workspace=opts.get("workspace"),
        fps=opts.get("fps"),
        input_video=opts.get("input_video"),
        use_incremental=bool(opts.get("use_colmap")),
        force=bool(opts.get("force")),
    )

    try:
        if step_name is None:
            run_pipeline(run_config, pipeline_cfg, console=console)
        else:
            run_stage(step_name, run_config, pipeline_cfg)
    except PrerequisiteError as exc:
        err_console.print(str(exc), style="red", markup=False)
        raise typer.Exit(1)
    except subprocess.CalledProcessError as exc:
        err_console.print(
            f"Command failed with exit code {exc.returncode}: {exc.cmd}", style="red", markup=False
        )
        raise typer.Exit(_exit_code(exc.returncode))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    workspace: Optional[Path] = WORKSPACE_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    fps: Optional[int] = FPS_OPTION,
    input_video: Optional[str] = INPUT_OPTION,
    use_colmap: bool = USE_COLMAP_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """Video to sparse 3D reconstruction. Runs the full pipeline when no command is given."""
    ctx.obj = dict(
        workspace=workspace, config=config, fps=fps,
        input_video=input_video, use_colmap=use_colmap, force=force,
    )
    if ctx.invoked_subcommand is None:
        _dispatch(None, ctx.obj)


@app.command("full-pipeline")
def full_pipeline(
    ctx: typer.Context,
    workspace: Optional[Path] = WORKSPACE_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    fps: Optional[int] = FPS_OPTION,
    input_video: Optional[str] = INPUT_OPTION,
    use_colmap: bool = USE_COLMAP_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """Run the entire pipeline (default if no command given)."""
    _dispatch(None, _options(
        ctx, workspace=workspace, config=config, fps=fps,
        input_video=input_video, use_colmap=use_colmap, force=force,
    ))


@app.command("extract-frames")
def extract_frames(
    ctx: typer.Context,
    workspace: Optional[Path] = WORKSPACE_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    fps: Optional[int] = FPS_OPTION,
    input_video: Optional[str] = INPUT_OPTION,
    use_colmap: bool = USE_COLMAP_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """Extract frames from the input video with ffmpeg."""
    _dispatch("extract_frames", _options(
        ctx, workspace=workspace, config=config, fps=fps,
        input_video=input_video, use_colmap=use_colmap, force=force,
    ))


@app.command("extract-features")
def extract_features(
    ctx: typer.Context,
    workspace: Optional[Path] = WORKSPACE_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    fps: Optional[int] = FPS_OPTION,
    input_video: Optional[str] = INPUT_OPTION,
    use_colmap: bool = USE_COLMAP_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """Extract image features with COLMAP."""
    _dispatch("extract_features", _options(
        ctx, workspace=workspace, config=config, fps=fps,
        input_video=input_video, use_colmap=use_colmap, force=force,
    ))


@app.command("match-features")
def match_features(
    ctx: typer.Context,
    workspace: Optional[Path] = WORKSPACE_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    fps: Optional[int] = FPS_OPTION,
    input_video: Optional[str] = INPUT_OPTION,
    use_colmap: bool = USE_COLMAP_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """Match features across all image pairs."""
    _dispatch("match_features", _options(
        ctx, workspace=workspace, config=config, fps=fps,
        input_video=input_video, use_colmap=use_colmap, force=force,
    ))


def reconstruct_incremental(
    ctx: typer.Context,
    workspace: Optional[Path] = WORKSPACE_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    fps: Optional[int] = FPS_OPTION,
    input_video: Optional[str] = INPUT_OPTION,
    use_colmap: bool = USE_COLMAP_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """3D reconstruction with the COLMAP incremental mapper (slower, robust)."""
    _dispatch("reconstruct_incremental", _options(
        ctx, workspace=workspace, config=config, fps=fps,
        input_video=input_video, use_colmap=use_colmap, force=force,
    ))


def reconstruct_global(
    ctx: typer.Context,
    workspace: Optional[Path] = WORKSPACE_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    fps: Optional[int] = FPS_OPTION,
    input_video: Optional[str] = INPUT_OPTION,
    use_colmap: bool = USE_COLMAP_OPTION,
    force: bool = FORCE_OPTION,
) -> None:
    """3D reconstruction with the GLOMAP global mapper (faster, recommended)."""
    _dispatch("reconstruct_global", _options(
        ctx, workspace=workspace, config=config, fps=fps,
        input_video=input_video, use_colmap=use_colmap, force=force,
    ))


app.command("reconstruct-incremental")(reconstruct_incremental)
app.command("reconstruct-global")(reconstruct_global)
# Engine-named aliases
app.command("reconstruct-colmap", hidden=True)(reconstruct_incremental)
app.command("reconstruct-glomap", hidden=True)(reconstruct_global)


@app.command("info")
def info(
    ctx: typer.Context,
    workspace: Optional[Path] = WORKSPACE_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    input_video: Optional[str] = INPUT_OPTION,
) -> None:
    """Show detected hardware and the state of the workspace."""
    from vidsfm.core.hardware import detect_accelerator
    from vidsfm.core.pipeline_runner import resolve_run_config
    from vidsfm.utils.io import count_images, missing_reconstruction_files, model_dirs

    opts = _options(ctx, workspace=workspace, config=config, input_video=input_video)
    pipeline_cfg = _config_or_exit(opts)
    run_config = resolve_run_config(
        pipeline_cfg, workspace=opts.get("workspace"), input_video=opts.get("input_video")
    )
    accelerator = detect_accelerator()
    model_dir = run_config.sparse_dir / "0"

    console.print(f"Accelerator: [cyan]{accelerator.value}[/cyan]")
    table = Table(title=f"Workspace: {run_config.workspace}")
    table.add_column("Artifact", style="cyan")
    table.add_column("Path", style="dim", overflow="fold")
    table.add_column("Status", style="yellow", no_wrap=True)
    table.add_row(
        "Input video", str(run_config.video_path),
        "present" if run_config.video_path.is_file() else "missing",
    )
    table.add_row("Frames", str(run_config.images_dir), f"{count_images(run_config.images_dir)} images")
    table.add_row(
        "Database", str(run_config.database_path),
        "present" if run_config.database_path.is_file() else "missing",
    )
    models = model_dirs(run_config.sparse_dir)
    table.add_row(
        "Sparse models", str(run_config.sparse_dir),
        f"{len(models)} found, {model_dir.name}: "
        + ("complete" if not missing_reconstruction_files(model_dir) else "incomplete"),
    )
    console.print(table)


@app.command("help")
def help_(ctx: typer.Context) -> None:
    """Show this help message."""
    typer.echo(ctx.parent.get_help())


def main(args: list[str] | None = None) -> None:
    """Console-script entry point. Usage errors exit with status 1."""
    command = typer.main.get_command(app)
    try:
        code = command.main(args=args, prog_name="vidsfm", standalone_mode=False)
    except click.UsageError as exc:
        exc.show()
        code = 1
    except click.ClickException as exc:
        exc.show()
        code = exc.exit_code
    except click.Abort:
        err_console.print("Aborted!")
        code = 1
    raise SystemExit(code if isinstance(code, int) else 0)


if __name__ == "__main__":
    main()
