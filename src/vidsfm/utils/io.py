"""Filesystem helpers: image listing and reconstruction artifact checks."""

from __future__ import annotations

from pathlib import Path

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png")

# Files a COLMAP/GLOMAP binary model directory must contain.
RECONSTRUCTION_FILES = ("cameras.bin", "images.bin", "points3D.bin")


def list_images(directory: Path, suffixes: tuple[str, ...] = IMAGE_SUFFIXES) -> list[Path]:
    """Return image files directly inside ``directory``, sorted by name."""
    if not directory.is_dir():
        return []
    wanted = {s.lower() for s in suffixes}
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in wanted)


def count_images(directory: Path, suffixes: tuple[str, ...] = IMAGE_SUFFIXES) -> int:
    return len(list_images(directory, suffixes))


def remove_images(directory: Path, suffixes: tuple[str, ...] = IMAGE_SUFFIXES) -> int:
    """Delete image files in ``directory``. Returns how many were removed."""
    removed = 0
    for path in list_images(directory, suffixes):
        path.unlink()
        removed += 1
    return removed


def model_dirs(sparse_dir: Path) -> list[Path]:
    """Numbered model subdirectories (``0``, ``1``, ...) in numeric order."""
    if not sparse_dir.is_dir():
        return []
    return sorted(
        (d for d in sparse_dir.iterdir() if d.is_dir() and d.name.isdigit()),
        key=lambda d: int(d.name),
    )


def missing_reconstruction_files(model_dir: Path) -> list[str]:
    """Names of expected model files absent from ``model_dir``."""
    return [name for name in RECONSTRUCTION_FILES if not (model_dir / name).is_file()]
