"""Viewing session: loaded volumes, display options and interactive state."""

import logging
from dataclasses import dataclass, fields
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

import config
from tools.segment_tool import SegmentTool
from .colormap import ColorSpec, colormap_name, get_colormap
from .compositor import composite, paint_roi
from .roi import ROISet
from .volume import FIXED_AXIS, IN_PLANE_AXES, VolumeData

logger = logging.getLogger(__name__)

RANGE_KINDS = ("background", "overlay", "mask")

# Option names accepted in camelCase as well
_OPTION_ALIASES = {
    "backRange": "back_range",
    "overRange": "over_range",
    "backMap": "back_map",
    "overMap": "over_map",
    "maskRange": "mask_range",
    "pixelSize": "pixel_size",
}


def _check_range(name: str, value) -> Optional[Tuple[float, float]]:
    if value is None:
        return None
    values = np.asarray(value, dtype=np.float64).ravel()
    if values.size != 2 or np.isnan(values).any() or not values[0] < values[1]:
        raise ValueError(f"{name} must be [lower, upper] with lower < upper, got {value!r}")
    return (float(values[0]), float(values[1]))


@dataclass
class ViewerOptions:
    """Display settings given when a viewer is opened.

    Ranges left as None are estimated from the data. `pixel_size` is the
    voxel size as (x, y, z); None uses the file spacing when known.
    `time` is the initial phase as a fraction of a full cycle.
    """

    back_range: Optional[Tuple[float, float]] = None
    over_range: Optional[Tuple[float, float]] = None
    back_map: ColorSpec = config.DEFAULT_BACK_MAP
    over_map: ColorSpec = config.DEFAULT_OVER_MAP
    mask_range: Tuple[float, float] = config.DEFAULT_MASK_RANGE
    alpha: float = config.DEFAULT_ALPHA
    pixel_size: Optional[Tuple[float, float, float]] = None
    title: str = config.WINDOW_TITLE
    time: float = config.DEFAULT_TIME

    @classmethod
    def from_kwargs(cls, **kwargs) -> "ViewerOptions":
        """Build options from keyword arguments, accepting camelCase names.

        Raises:
            ValueError: on unknown options or invalid values
        """
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in kwargs.items():
            key = _OPTION_ALIASES.get(key, key)
            if key not in known:
                raise ValueError(f"Unknown option: {key}")
            values[key] = value
        return cls(**values).validate()

    def validate(self) -> "ViewerOptions":
        """Check and normalize all values; returns self."""
        self.back_range = _check_range("back_range", self.back_range)
        self.over_range = _check_range("over_range", self.over_range)
        self.mask_range = _check_range("mask_range", self.mask_range)
        if not 0.0 <= float(self.alpha) <= 1.0:
            raise ValueError(f"alpha must lie in [0, 1], got {self.alpha}")
        self.alpha = float(self.alpha)
        if not 0.0 <= float(self.time) <= 1.0:
            raise ValueError(f"time must lie in [0, 1], got {self.time}")
        self.time = float(self.time)
        if self.pixel_size is not None:
            self.pixel_size = check_pixel_size(self.pixel_size)
        if not isinstance(self.title, str):
            raise ValueError("title must be a string")
        return self


def check_pixel_size(pixel_size: Sequence[float]) -> Tuple[float, float, float]:
    values = np.asarray(pixel_size, dtype=np.float64).ravel()
    if values.size != 3 or not np.all(np.isfinite(values)) or np.any(values <= 0):
        raise ValueError(f"pixel_size must be three positive numbers, got {pixel_size!r}")
    return tuple(float(v) for v in values)


def _as_volume(data, name: str) -> VolumeData:
    if isinstance(data, VolumeData):
        return data
    return VolumeData(np.asarray(data), name=name)


class Session:
    """Everything a viewer window displays, independent of the GUI toolkit.

    Holds the background and optional overlay volumes, display settings,
    the shared cursor, the active view, the phase, and the ROI set. Methods
    that change what is shown report which views need redrawing.
    """

    def __init__(
        self,
        background: Union[np.ndarray, VolumeData],
        overlay: Optional[Union[np.ndarray, VolumeData]] = None,
        options: Optional[ViewerOptions] = None,
    ):
        options = (options or ViewerOptions()).validate()
        self.options = options

        self.background = _as_volume(background, "background")
        if self.background.is_complex:
            self.background = self.background.real_part()
        self.overlay: Optional[VolumeData] = None
        if overlay is not None:
            self.overlay = _as_volume(overlay, "overlay")
            if self.overlay.shape != self.background.shape:
                raise ValueError(
                    f"Overlay shape {self.overlay.shape} does not match "
                    f"background shape {self.background.shape}"
                )

        self.back_range = options.back_range or self.background.get_value_range()
        self.over_range = None
        if self.overlay is not None:
            self.over_range = options.over_range or self.overlay.get_value_range()
        self.mask_range = options.mask_range

        self.back_map_name = colormap_name(options.back_map, config.DEFAULT_BACK_MAP)
        self.back_map = get_colormap(options.back_map, default=config.DEFAULT_BACK_MAP)
        self.over_map_name = colormap_name(options.over_map, config.FALLBACK_OVER_MAP)
        self.over_map = get_colormap(options.over_map, default=config.FALLBACK_OVER_MAP)

        self.alpha = options.alpha
        self.phase = 2 * np.pi * options.time
        self.title = options.title

        if options.pixel_size is not None:
            self.pixel_size = options.pixel_size
        elif self.background.spacing is not None:
            sz, sy, sx = self.background.spacing
            self.pixel_size = check_pixel_size((sx, sy, sz))
        else:
            self.pixel_size = config.DEFAULT_PIXEL_SIZE

        self.cursor: Tuple[int, int, int] = tuple((s - 1) // 2 for s in self.background.shape)
        self.active_view = config.PLANES[0]
        self.layout = config.DEFAULT_LAYOUT
        self.show_crosshairs = True
        self.roi_mode = config.ROI_OFF
        self.rois = ROISet(shape=self.background.shape)

        logger.info(
            "Session opened: background %s, overlay %s, %d/%d frame(s)",
            self.background.shape,
            None if self.overlay is None else self.overlay.shape,
            self.background.num_frames,
            1 if self.overlay is None else self.overlay.num_frames,
        )

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.background.shape

    @property
    def has_overlay(self) -> bool:
        return self.overlay is not None

    @property
    def time(self) -> float:
        """Phase as a fraction of a full cycle."""
        return self.phase / (2 * np.pi)

    # Display settings

    def get_range(self, kind: str) -> Optional[Tuple[float, float]]:
        if kind == "background":
            return self.back_range
        elif kind == "overlay":
            return self.over_range
        elif kind == "mask":
            return self.mask_range
        raise ValueError(f"Unknown range: {kind}")

    def _store_range(self, kind: str, value: Tuple[float, float]) -> None:
        if kind == "background":
            self.back_range = value
        elif kind == "overlay":
            self.over_range = value
        else:
            self.mask_range = value

    def set_range(self, kind: str, end: int, value: float) -> float:
        """Change the lower (end 0) or upper (end 1) limit of a range.

        The change is ignored if it would break lo < hi or the value is NaN.

        Returns:
            The effective value of that limit
        """
        current = self.get_range(kind)
        if current is None:
            raise ValueError(f"No {kind} range without an overlay")
        lo, hi = current
        if not np.isnan(value):
            if end == 1 and value > lo:
                hi = float(value)
            elif end == 0 and value < hi:
                lo = float(value)
        self._store_range(kind, (lo, hi))
        return (lo, hi)[end]

    def drag_contrast(self, kind: str, dx: float, dy: float) -> bool:
        """Shift a display range by a mouse drag.

        Horizontal motion moves the lower limit, vertical motion the upper
        one, each by a fraction of the current range width per pixel.

        Returns:
            True if the range changed
        """
        current = self.get_range(kind)
        if current is None:
            return False
        lo, hi = current
        width = hi - lo
        new_lo = lo + dx * config.CONTRAST_DRAG_GAIN * width
        new_hi = hi + dy * config.CONTRAST_DRAG_GAIN * width
        if not new_lo < new_hi or (new_lo, new_hi) == (lo, hi):
            return False
        self._store_range(kind, (new_lo, new_hi))
        return True

    def set_colormap(self, kind: str, cmap: ColorSpec) -> None:
        """Change the background or overlay colormap."""
        if kind == "background":
            self.back_map = get_colormap(cmap, default=config.DEFAULT_BACK_MAP)
            self.back_map_name = colormap_name(cmap, config.DEFAULT_BACK_MAP)
        elif kind == "overlay":
            self.over_map = get_colormap(cmap, default=config.FALLBACK_OVER_MAP)
            self.over_map_name = colormap_name(cmap, config.FALLBACK_OVER_MAP)
        else:
            raise ValueError(f"Unknown colormap target: {kind}")

    def set_alpha(self, alpha: float) -> None:
        self.alpha = float(min(max(alpha, 0.0), 1.0))

    def set_time(self, fraction: float) -> None:
        """Set the phase from a fraction of a full cycle."""
        fraction = float(min(max(fraction, 0.0), 1.0))
        self.phase = 2 * np.pi * fraction

    def set_pixel_size(self, pixel_size: Sequence[float]) -> None:
        self.pixel_size = check_pixel_size(pixel_size)

    @property
    def aspect_ratio(self) -> Tuple[float, float, float]:
        """Relative display size per voxel along (x, y, z)."""
        inverse = 1.0 / np.asarray(self.pixel_size)
        inverse = inverse / inverse.min()
        return tuple(float(v) for v in inverse)

    def slice_aspect(self, plane: str) -> Tuple[float, float]:
        """Display (column, row) scale of a plane's pixels."""
        col_axis, row_axis = IN_PLANE_AXES[plane]
        # Array axes are (z, y, x); pixel sizes are (x, y, z)
        ratio = self.aspect_ratio
        return ratio[2 - col_axis], ratio[2 - row_axis]

    # Navigation

    def slice_index(self, plane: str) -> int:
        return self.cursor[FIXED_AXIS[plane]]

    def _clamp(self, axis: int, value: float) -> int:
        return int(max(0, min(self.shape[axis] - 1, value)))

    def scroll(self, count: int) -> bool:
        """Move the active view's slice by `count`.

        Returns:
            True if the slice changed
        """
        axis = FIXED_AXIS[self.active_view]
        cursor = list(self.cursor)
        cursor[axis] = self._clamp(axis, cursor[axis] + count)
        changed = tuple(cursor) != self.cursor
        self.cursor = tuple(cursor)
        return changed

    def activate(self, plane: str) -> bool:
        """Make a view active. Returns True if it was not active before."""
        if plane not in FIXED_AXIS:
            raise ValueError(f"Unknown plane: {plane}")
        changed = plane != self.active_view
        self.active_view = plane
        return changed

    def move_cursor(self, plane: str, col: float, row: float) -> List[str]:
        """Move the cursor to a position within a view.

        Args:
            plane: View that was clicked
            col, row: Position in slice pixel coordinates

        Returns:
            Planes whose slice changed and need redrawing
        """
        col_axis, row_axis = IN_PLANE_AXES[plane]
        cursor = list(self.cursor)
        cursor[col_axis] = self._clamp(col_axis, np.floor(col))
        cursor[row_axis] = self._clamp(row_axis, np.floor(row))
        previous = self.cursor
        self.cursor = tuple(cursor)
        return [p for p in config.PLANES if previous[FIXED_AXIS[p]] != self.cursor[FIXED_AXIS[p]]]

    def click(self, plane: str, col: float, row: float) -> List[str]:
        """Handle a plain click in a view.

        A click on an inactive view only activates it. A click on the active
        view moves the cursor there.

        Returns:
            Planes that need redrawing
        """
        if self.activate(plane):
            logger.debug("Activated %s view", plane)
            return list(config.PLANES)
        return self.move_cursor(plane, col, row)

    def change_frame(self, kind: str, delta: float) -> bool:
        """Step the current frame of the background or overlay."""
        volume = self.background if kind == "background" else self.overlay
        if volume is None:
            return False
        return volume.change_frame(delta)

    def background_value(self):
        return self.background.value_at(self.cursor)

    def overlay_value(self):
        if self.overlay is None:
            return None
        return self.overlay.value_at(self.cursor)

    # Rendering

    def render(self, plane: str) -> np.ndarray:
        """Composite RGB image of a view at the current state."""
        index = self.slice_index(plane)
        background = self.background.get_slice(plane, index)
        overlay = None
        if self.overlay is not None:
            overlay = self.overlay.get_slice(plane, index)
        image = composite(
            background, self.back_range, self.back_map,
            overlay=overlay,
            over_range=self.over_range,
            over_map=self.over_map,
            mask_range=self.mask_range,
            alpha=self.alpha,
            phase=self.phase,
        )
        roi = self.rois.current
        if roi is not None:
            image = paint_roi(image, roi.get_2d_slice(plane, index))
        return image

    def render_all(self) -> Dict[str, np.ndarray]:
        return {plane: self.render(plane) for plane in config.PLANES}

    def render_at_time(self, fraction: float) -> Dict[str, np.ndarray]:
        """Render all views at a phase fraction, leaving the phase unchanged."""
        saved = self.phase
        try:
            self.set_time(fraction)
            return self.render_all()
        finally:
            self.phase = saved

    # ROI editing

    def set_roi_mode(self, mode: int) -> int:
        """Switch ROI editing mode.

        Adding without a selected ROI creates a new one; removing requires a
        selected ROI.

        Returns:
            The effective mode
        """
        if mode == config.ROI_ADD and self.rois.current is None:
            self.rois.new_roi()
        elif mode == config.ROI_REMOVE and self.rois.current is None:
            mode = config.ROI_OFF
        self.roi_mode = mode
        return mode

    def finish_roi(self, plane: str, points: Sequence[Tuple[float, float]]) -> bool:
        """Apply a drawn polygon on a view's current slice to the selected ROI.

        Returns:
            True if the ROI changed
        """
        roi = self.rois.current
        if self.roi_mode == config.ROI_OFF or roi is None or len(points) == 0:
            return False
        SegmentTool.apply_segment_to_mask(
            roi.mask,
            plane,
            self.slice_index(plane),
            points,
            self.background.get_slice_shape(plane),
            erase=self.roi_mode == config.ROI_REMOVE,
        )
        self.rois.modified = True
        return True

    def select_roi(self, index: int) -> None:
        """Select an ROI (-1 for none) and leave ROI editing mode."""
        self.roi_mode = config.ROI_OFF
        self.rois.select(index)

    def delete_roi(self) -> bool:
        """Delete the selected ROI. Returns True if one was deleted."""
        if self.rois.current is None:
            return False
        self.roi_mode = config.ROI_OFF
        self.rois.delete()
        return True

    def roi_curves(self):
        """Per-frame ROI statistics of the overlay, or the background without one."""
        volume = self.overlay if self.overlay is not None else self.background
        return self.rois.time_curves(volume)
