"""Region-of-interest data structures."""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
from matplotlib.colors import hsv_to_rgb

import config
from .volume import VolumeData

logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^ROI (\d+)$")


@dataclass
class ROI:
    """Named 3D boolean mask matching the volume's spatial shape (z, y, x)."""

    name: str
    mask: np.ndarray

    def get_2d_slice(self, plane: str, slice_index: int) -> np.ndarray:
        """Get 2D mask slice for given plane.

        Args:
            plane: One of 'axial', 'coronal', 'sagittal'
            slice_index: Slice index

        Returns:
            2D boolean array
        """
        if plane == "axial":
            return self.mask[slice_index, :, :]
        elif plane == "coronal":
            return self.mask[:, slice_index, :]
        elif plane == "sagittal":
            return self.mask[:, :, slice_index]
        else:
            raise ValueError(f"Unknown plane: {plane}")

    def has_data(self) -> bool:
        """Check if the mask contains any voxels."""
        return bool(np.any(self.mask))


@dataclass
class ROISet:
    """User-managed list of ROIs for one viewing session.

    Tracks the selected ROI (-1 when none is selected) and whether the set
    changed since it was last exported.
    """

    shape: Tuple[int, int, int]
    rois: List[ROI] = field(default_factory=list)
    selected: int = -1
    modified: bool = False

    def __len__(self) -> int:
        return len(self.rois)

    def __iter__(self):
        return iter(self.rois)

    def __getitem__(self, index: int) -> ROI:
        return self.rois[index]

    @property
    def names(self) -> List[str]:
        return [roi.name for roi in self.rois]

    @property
    def current(self) -> Optional[ROI]:
        """The selected ROI, or None."""
        if 0 <= self.selected < len(self.rois):
            return self.rois[self.selected]
        return None

    def next_name(self) -> str:
        """Smallest 'ROI k' name not used yet."""
        used = set()
        for name in self.names:
            match = _NAME_PATTERN.match(name)
            if match:
                used.add(int(match.group(1)))
        k = 1
        while k in used:
            k += 1
        return config.ROI_NAME_FORMAT.format(k)

    def new_roi(self, name: Optional[str] = None) -> ROI:
        """Append an empty ROI and select it."""
        roi = ROI(name=name or self.next_name(), mask=np.zeros(self.shape, dtype=bool))
        self.rois.append(roi)
        self.selected = len(self.rois) - 1
        self.modified = True
        logger.debug("Created %s", roi.name)
        return roi

    def select(self, index: int) -> None:
        """Select ROI by index; -1 deselects."""
        if index < -1 or index >= len(self.rois):
            raise IndexError(f"No ROI at index {index}")
        self.selected = index

    def delete(self, index: Optional[int] = None) -> None:
        """Remove an ROI (the selected one by default) and select the previous."""
        if index is None:
            index = self.selected
        if not 0 <= index < len(self.rois):
            return
        removed = self.rois.pop(index)
        self.selected = index - 1
        self.modified = True
        logger.debug("Deleted %s", removed.name)

    def stack(self) -> np.ndarray:
        """All ROI masks stacked along a trailing axis: (z, y, x, n)."""
        if not self.rois:
            return np.zeros(self.shape + (0,), dtype=bool)
        return np.stack([roi.mask for roi in self.rois], axis=-1)

    def accepts(self, array) -> bool:
        """Whether an array can be imported as ROI masks."""
        return (
            isinstance(array, np.ndarray)
            and array.dtype == bool
            and array.ndim in (3, 4)
            and tuple(array.shape[:3]) == tuple(self.shape)
        )

    def extend(self, array: np.ndarray) -> List[ROI]:
        """Import a 3D mask or a 4D stack of masks as new ROIs.

        The last imported ROI becomes the selection.

        Raises:
            ValueError: if the array is not boolean or its shape does not match
        """
        if not self.accepts(array):
            raise ValueError(
                f"Expected a boolean array with spatial shape {self.shape}, got "
                f"{getattr(array, 'dtype', type(array))} {getattr(array, 'shape', '')}"
            )
        if array.ndim == 3:
            array = array[..., np.newaxis]
        added = []
        for i in range(array.shape[3]):
            roi = ROI(name=self.next_name(), mask=array[..., i].copy())
            self.rois.append(roi)
            added.append(roi)
        if added:
            self.selected = len(self.rois) - 1
            self.modified = True
        return added

    def time_curves(self, volume: VolumeData) -> List[Tuple[np.ndarray, np.ndarray]]:
        """Mean and standard deviation inside each ROI for every frame.

        Complex data contribute their magnitude. A single-voxel ROI has zero
        deviation; an empty ROI yields NaN means.

        Returns:
            List of (mean, std) arrays of length `volume.num_frames`
        """
        data = volume.array
        if np.iscomplexobj(data):
            data = np.abs(data)
        curves = []
        for roi in self.rois:
            values = data[roi.mask].reshape(-1, volume.num_frames)
            if values.shape[0] > 1:
                mean = values.mean(axis=0)
                std = values.std(axis=0, ddof=1)
            elif values.shape[0] == 1:
                mean = values[0].astype(np.float64)
                std = np.zeros(volume.num_frames)
            else:
                mean = np.full(volume.num_frames, np.nan)
                std = np.zeros(volume.num_frames)
            curves.append((mean, std))
        return curves


def roi_colors(n: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Distinct plot colors: evenly spread hues, random saturation and value."""
    if n <= 0:
        return np.zeros((0, 3))
    rng = rng or np.random.default_rng()
    hsv = np.stack([
        np.arange(n) / n,
        rng.integers(40, 101, size=n) / 100,
        rng.integers(40, 101, size=n) / 100,
    ], axis=1)
    return hsv_to_rgb(hsv)
