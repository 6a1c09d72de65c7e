"""Slice compositing: range mapping, colormap lookup, phasor projection and alpha blend.

All functions are pure and operate on 2D slices. Ranges are assumed to be
valid (lo < hi); callers widen degenerate ranges beforehand.
"""

from typing import Optional, Tuple

import numpy as np
from scipy import ndimage

import config

# 4-connected neighbourhood used to find region perimeters
_PERIMETER_STRUCTURE = ndimage.generate_binary_structure(2, 1)


def to_color_index(
    values: np.ndarray, display_range: Tuple[float, float], num_colors: int
) -> np.ndarray:
    """Map sample values to colormap indices.

    Values are scaled linearly so that `lo` maps to 0 and `hi` to
    `num_colors - 1`, clamped in between and rounded half away from zero.
    Non-finite values map to index 0.

    Args:
        values: Real-valued 2D slice
        display_range: (lo, hi) with lo < hi
        num_colors: Size of the color table

    Returns:
        Integer index array with the shape of `values`
    """
    lo, hi = display_range
    values = np.asarray(values, dtype=np.float64)
    finite = np.isfinite(values)

    with np.errstate(invalid="ignore", over="ignore"):
        scaled = np.clip((values - lo) / (hi - lo), 0.0, 1.0)
        index = np.floor(scaled * (num_colors - 1) + 0.5)
    index = np.where(finite & np.isfinite(index), index, 0)
    return index.astype(np.intp)


def apply_colormap(
    values: np.ndarray, display_range: Tuple[float, float], color_table: np.ndarray
) -> np.ndarray:
    """Convert a real slice to an (H, W, 3) RGB image through a color table."""
    index = to_color_index(values, display_range, len(color_table))
    return np.asarray(color_table, dtype=np.float64)[index]


def project_phasor(overlay: np.ndarray, phase: float) -> np.ndarray:
    """Real projection of a complex phasor slice at the given phase angle.

    The displacement phasor rotates `config.PHASE_MULTIPLIER` times per
    revolution of `phase`.
    """
    return np.abs(overlay) * np.cos(np.angle(overlay) + config.PHASE_MULTIPLIER * phase)


def visibility_mask(overlay: np.ndarray, mask_range: Tuple[float, float]) -> np.ndarray:
    """Boolean mask of overlay samples whose magnitude lies inside `mask_range`."""
    lo, hi = mask_range
    magnitude = np.abs(overlay)
    with np.errstate(invalid="ignore"):
        return (magnitude >= lo) & (magnitude <= hi)


def composite(
    background: np.ndarray,
    back_range: Tuple[float, float],
    back_map: np.ndarray,
    overlay: Optional[np.ndarray] = None,
    over_range: Optional[Tuple[float, float]] = None,
    over_map: Optional[np.ndarray] = None,
    mask_range: Tuple[float, float] = config.DEFAULT_MASK_RANGE,
    alpha: float = config.DEFAULT_ALPHA,
    phase: float = 0.0,
) -> np.ndarray:
    """Blend a background slice with an optional complex overlay slice.

    Args:
        background: Real 2D slice
        back_range: Display range of the background
        back_map: Background color table (N, 3)
        overlay: Complex 2D slice with the shape of `background`, or None
        over_range: Display range of the projected overlay
        over_map: Overlay color table (N, 3)
        mask_range: Visible range of overlay magnitudes
        alpha: Overlay opacity in [0, 1]
        phase: Phase angle in radians

    Returns:
        (H, W, 3) float RGB image with values in [0, 1]
    """
    image = apply_colormap(background, back_range, back_map)
    if overlay is None:
        return image

    projected = project_phasor(overlay, phase)
    mask = visibility_mask(overlay, mask_range) & np.isfinite(projected)
    over_rgb = apply_colormap(projected, over_range, over_map)

    weight = alpha * mask.astype(np.float64)[:, :, np.newaxis]
    return image * (1.0 - weight) + over_rgb * weight


def region_perimeter(region: np.ndarray) -> np.ndarray:
    """Pixels of a region with a 4-connected neighbour outside it.

    Pixels on the image border count as perimeter.
    """
    region = np.asarray(region, dtype=bool)
    if not region.any():
        return region.copy()
    interior = ndimage.binary_erosion(region, structure=_PERIMETER_STRUCTURE, border_value=0)
    return region & ~interior


def paint_roi(image: np.ndarray, region: np.ndarray) -> np.ndarray:
    """Mark an ROI on a composite: saturated red inside, perimeter in color."""
    region = np.asarray(region, dtype=bool)
    painted = image.copy()
    painted[region, 0] = 1.0
    painted[region_perimeter(region)] = config.ROI_PERIMETER_COLOR
    return painted
