"""Color tables: matplotlib colormaps, explicit RGB tables and complex maps."""

import logging
from typing import Sequence, Union

import numpy as np
from matplotlib import colormaps

import config

logger = logging.getLogger(__name__)

ColorSpec = Union[str, np.ndarray, Sequence[Sequence[float]]]

# Piecewise-linear complex maps: mode -> (segment colors, segments per table)
_COMPLEX_SEGMENTS = {
    0: ([(0, 0, 1), (0, 1, 1), (0, 1, 0)], 2),
    # Sinkus
    1: ([(1, 1, 1), (0, 0, 0), (0, 1, 1), (1, 1, 0), (1, 0, 0)], 4),
    # Mayo
    2: ([(.5, 0, .5), (0, 0, 1), (0, 1, .5), (1, 1, 0), (1, 0, 0)], 4),
    3: ([(.5, 0, .5), (0, 0, .75), (0, 1, 1), (1, 1, 0), (1, 0, 0)], 4),
    4: ([(.5, 0, .5), (.5, .5, 1), (0, 1, 1), (1, 1, 0), (1, 0, 0)], 4),
    5: ([(.5, .5, 1), (.5, 0, .5), (0, 1, 1), (1, 1, 0), (1, 0, 0)], 4),
    6: ([(.5, 0, .5), (0, 0, 1), (0, 1, 1), (1, 1, 0), (1, 0, 0)], 4),
    7: ([(0, 0, 0), (.5, 0, .5), (1, 0, 0), (1, 1, 0), (1, 1, 1)], 4),
    8: ([(0, 0, 0), (.5, 0, .5), (0, 0, 1), (0, 1, 1), (1, 1, 0), (1, 0, 0), (1, 1, 1)], 4),
    9: ([(0, 0, 0), (.5, 0, .5), (0, 0, 1), (0, 1, 1), (0, 1, 0), (1, 1, 0), (1, 0, 0)], 6),
    # Doppler
    10: ([(0, 1, 1), (0, 0, 1), (0, 0, 0), (1, 0, 0), (1, 1, 0)], 4),
    11: ([(0, 1, 1), (0, 0, 1), (1, 1, 1), (1, 0, 0), (1, 1, 0)], 4),
}


def make_map(start: Sequence[float], end: Sequence[float], num: int) -> np.ndarray:
    """Linear ramp of `num` colors from `start` to `end`."""
    return np.stack(
        [np.linspace(start[i], end[i], num) for i in range(3)], axis=1
    )


def make_complex_map(mode: int, num: int = config.COLORMAP_SIZE) -> np.ndarray:
    """Build one of the complex-valued display colormaps.

    Modes 0-11 are chains of linear ramps between fixed colors (1 is the
    Sinkus map, 2 the Mayo map, 10 the Doppler map). Any other mode yields a
    sinusoidal map with channels 120 degrees apart.

    Args:
        mode: Colormap index
        num: Nominal number of entries

    Returns:
        (N, 3) array of RGB values
    """
    if mode in _COMPLEX_SEGMENTS:
        colors, parts = _COMPLEX_SEGMENTS[mode]
        seg_len = int(num // parts)
        ramps = [
            make_map(colors[i], colors[i + 1], seg_len)
            for i in range(len(colors) - 1)
        ]
        return np.concatenate(ramps, axis=0)

    # Sinusoidal maps can dip below zero; clamp to valid colors
    t = 2 * np.pi * np.arange(num) / num
    cmap = np.stack([np.sin(t), np.sin(t + np.pi / 3), np.sin(t + 2 * np.pi / 3)], axis=1)
    return np.clip(cmap, 0.0, 1.0)


def validate_table(table) -> np.ndarray:
    """Check an explicit color table and return it as a float array."""
    arr = np.asarray(table, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 3 or arr.shape[0] < 1:
        raise ValueError(f"Color table must have shape (N, 3), got {arr.shape}")
    if not np.all(np.isfinite(arr)) or arr.min() < 0 or arr.max() > 1:
        raise ValueError("Color table values must lie in [0, 1]")
    return arr


def _named_colormap(name: str, num: int) -> np.ndarray:
    key = name.lower()
    if key in config.COMPLEX_MAP_MODES:
        return make_complex_map(config.COMPLEX_MAP_MODES[key], num)
    for candidate in (name, key):
        if candidate in colormaps:
            cmap = colormaps[candidate]
            return cmap(np.linspace(0.0, 1.0, num))[:, :3]
    raise KeyError(name)


def get_colormap(
    cmap: ColorSpec,
    num: int = config.COLORMAP_SIZE,
    default: str = config.DEFAULT_BACK_MAP,
) -> np.ndarray:
    """Resolve a colormap name or explicit table to an (N, 3) RGB table.

    Unknown names log a warning and fall back to `default`.
    """
    if not isinstance(cmap, str):
        return validate_table(cmap)

    try:
        return _named_colormap(cmap, num)
    except KeyError:
        logger.warning("'%s' is not a valid colormap! Switching to '%s'.", cmap, default)
        return _named_colormap(default, num)


def colormap_name(cmap: ColorSpec, default: str = config.DEFAULT_BACK_MAP) -> str:
    """Name shown in the colormap dropdown for a colormap name or table."""
    if not isinstance(cmap, str):
        return "custom"
    key = cmap.lower()
    if key in config.COLORMAP_NAMES:
        return key
    if cmap in colormaps:
        return cmap
    return default
