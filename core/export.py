"""Raster snapshots and phase-sweep animations of the views."""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Mapping

import numpy as np
from PIL import Image

import config

logger = logging.getLogger(__name__)


def to_uint8(image: np.ndarray) -> np.ndarray:
    """Convert a [0, 1] float RGB image to 8-bit."""
    return np.round(np.clip(image, 0.0, 1.0) * 255).astype(np.uint8)


def unique_path(path: Path) -> Path:
    """Return `path`, or `path` with a numeric suffix if it already exists."""
    if not path.exists():
        return path
    num = 1
    while True:
        candidate = path.with_name(f"{path.stem}{num}{path.suffix}")
        if not candidate.exists():
            return candidate
        num += 1


def view_path(path: Path, plane: str) -> Path:
    """Per-view file name: `scan.png` -> `scan_Axial.png`."""
    path = Path(path)
    return path.with_name(f"{path.stem}{config.VIEW_SUFFIXES[plane]}{path.suffix}")


def save_view_images(images: Mapping[str, np.ndarray], path: Path) -> List[Path]:
    """Write one raster image per view.

    The format follows the extension of `path` (png, bmp, jpg). Existing
    files are never overwritten.

    Args:
        images: Plane name -> (H, W, 3) float RGB image
        path: Base file name

    Returns:
        Paths of the written files
    """
    written = []
    for plane, image in images.items():
        target = unique_path(view_path(path, plane))
        Image.fromarray(to_uint8(image)).save(target)
        written.append(target)
    logger.info("Saved view images: %s", ", ".join(str(p) for p in written))
    return written


def phase_fractions(frames: int = config.GIF_FRAMES) -> np.ndarray:
    """Phase fractions of one full revolution, both ends included."""
    return np.linspace(0.0, 1.0, frames)


def save_phase_gifs(
    render: Callable[[float], Dict[str, np.ndarray]],
    path: Path,
    frames: int = config.GIF_FRAMES,
    duration: int = config.GIF_FRAME_DURATION_MS,
) -> List[Path]:
    """Write a looping GIF per view sweeping the phase over one cycle.

    Args:
        render: Callable taking a phase fraction in [0, 1] and returning
            plane name -> float RGB image
        path: Base file name; existing files are replaced
        frames: Number of frames in the sweep
        duration: Frame duration in milliseconds

    Returns:
        Paths of the written files
    """
    sequences: Dict[str, List[Image.Image]] = {}
    for fraction in phase_fractions(frames):
        for plane, image in render(float(fraction)).items():
            frame = Image.fromarray(to_uint8(image)).quantize(colors=config.GIF_COLORS)
            sequences.setdefault(plane, []).append(frame)

    written = []
    for plane, sequence in sequences.items():
        target = view_path(Path(path).with_suffix(".gif"), plane)
        sequence[0].save(
            target,
            format="GIF",
            save_all=True,
            append_images=sequence[1:],
            duration=duration,
            loop=0,
        )
        written.append(target)
    logger.info("Saved phase animations: %s", ", ".join(str(p) for p in written))
    return written
