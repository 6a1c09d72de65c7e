"""Configuration constants for Overlay Displacement."""

from typing import Dict, Tuple

import numpy as np

WINDOW_TITLE = "Overlay Displacement"
WINDOW_SIZE = (1366, 768)

# Viewing planes, in the order the views are laid out. View i fixes array axis i
# of a (z, y, x) volume.
PLANES: Tuple[str, ...] = ("axial", "coronal", "sagittal")

PLANE_TITLES: Dict[str, str] = {
    "axial": "Axial (XY)",
    "coronal": "Coronal (XZ)",
    "sagittal": "Sagittal (YZ)",
}

# File name suffixes used when exporting views
VIEW_SUFFIXES: Dict[str, str] = {
    "axial": "_Axial",
    "coronal": "_Coronal",
    "sagittal": "_Sagittal",
}

# Layouts on a 2x3 grid: plane -> (row, column, row span, column span)
LAYOUTS: Dict[int, Dict[str, Tuple[int, int, int, int]]] = {
    1: {"axial": (0, 0, 2, 1), "coronal": (0, 1, 2, 1), "sagittal": (0, 2, 2, 1)},
    2: {"axial": (0, 0, 2, 2), "sagittal": (0, 2, 1, 1), "coronal": (1, 2, 1, 1)},
    3: {"axial": (0, 2, 1, 1), "coronal": (0, 0, 2, 2), "sagittal": (1, 2, 1, 1)},
    4: {"axial": (0, 2, 1, 1), "coronal": (1, 2, 1, 1), "sagittal": (0, 0, 2, 2)},
}
DEFAULT_LAYOUT = 1

# Colormaps offered in the dropdowns. "mayo" and "custom" are complex maps.
COLORMAP_NAMES = [
    "gray", "viridis", "jet", "hsv", "hot", "cool", "spring", "summer",
    "autumn", "winter", "bone", "copper", "pink", "prism", "flag",
    "mayo", "custom",
]
COLORMAP_SIZE = 256
DEFAULT_BACK_MAP = "gray"
DEFAULT_OVER_MAP = "hot"
FALLBACK_OVER_MAP = "custom"

# Complex colormap modes behind the named complex maps
COMPLEX_MAP_MODES: Dict[str, int] = {
    "mayo": 2,
    "custom": 10,
}

# Display defaults
DEFAULT_ALPHA = 0.5
DEFAULT_MASK_RANGE = (-np.inf, np.inf)
DEFAULT_PIXEL_SIZE = (1.0, 1.0, 1.0)
DEFAULT_TIME = 0.0
EMPTY_VOLUME_RANGE = (-1e9, 1e9)

# The overlay phase advances this many times faster than the time slider
PHASE_MULTIPLIER = 5

# Fraction of the current range moved per pixel of a contrast drag
CONTRAST_DRAG_GAIN = 0.01

# Animated export
GIF_FRAMES = 100
GIF_FRAME_DURATION_MS = 40
GIF_COLORS = 256

# Colors (RGB 0-255)
CROSSHAIR_COLOR = (204, 128, 77)
VIEW_BORDER_COLOR = (77, 77, 77)
ACTIVE_BORDER_COLOR = (255, 0, 0)
VIEW_BACKGROUND_COLOR = (0, 0, 0)
ROI_CURVE_COLOR = (0, 255, 0)

# ROI painting on composites (RGB 0-1)
ROI_PERIMETER_COLOR = (0.0, 1.0, 0.0)

# ROI editing modes
ROI_OFF = 0
ROI_ADD = 1
ROI_REMOVE = -1
ROI_NAME_FORMAT = "ROI {}"
ROI_NEW_ENTRY = "<NEW>"
DEFAULT_ROI_VARIABLE = "VOIs"

# Menu panel width in pixels
MENU_WIDTH = 200

# Keyboard shortcuts
SHORTCUTS = {
    "layout1": "1",
    "layout2": "2",
    "layout3": "3",
    "layout4": "4",
    "crosshairs": "C",
    "roi_add": "A",
    "roi_remove": "R",
    "save_images": "Ctrl+S",
    "save_gifs": "Ctrl+G",
}
