"""Volume data handling for background and overlay volumes."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import SimpleITK as sitk

import config

logger = logging.getLogger(__name__)

# Array axis held fixed by each plane, and the (column, row) axes it shows
FIXED_AXIS = {"axial": 0, "coronal": 1, "sagittal": 2}
IN_PLANE_AXES = {"axial": (2, 1), "coronal": (2, 0), "sagittal": (1, 0)}


@dataclass
class VolumeData:
    """3D or 4D volume with a current frame.

    Arrays are stored in (z, y, x) order, with an optional trailing
    time/frame axis: (z, y, x, t). 2D input is promoted to a single-slice
    volume. The current frame starts at the last frame.
    """

    array: np.ndarray = field(repr=False)
    name: str = ""
    # Voxel spacing (z, y, x) when loaded from a file
    spacing: Optional[Tuple[float, float, float]] = None
    current_frame: int = -1

    def __post_init__(self):
        arr = np.asarray(self.array)
        if arr.ndim < 2 or arr.ndim > 4:
            raise ValueError(
                f"Volume '{self.name}' must have 2 to 4 dimensions, got {arr.ndim}"
            )
        if arr.ndim == 2:
            arr = arr[np.newaxis, :, :]
        if np.issubdtype(arr.dtype, np.integer) or arr.dtype == bool:
            arr = arr.astype(np.float64)
        self.array = arr
        if self.current_frame < 0 or self.current_frame >= self.num_frames:
            self.current_frame = self.num_frames - 1

    @classmethod
    def from_file(cls, filepath: str, name: str = "") -> "VolumeData":
        """Load a volume from disk.

        `.npy` files are read with numpy, everything else through SimpleITK.
        4D images are reordered to (z, y, x, t).
        """
        path = Path(filepath)
        name = name or path.name
        if path.suffix == ".npy":
            return cls(np.load(str(path)), name=name)

        image = sitk.ReadImage(str(path))
        array = sitk.GetArrayFromImage(image)
        if image.GetDimension() == 4:
            array = np.moveaxis(array, 0, -1)
        sitk_spacing = image.GetSpacing()
        spacing = None
        if len(sitk_spacing) >= 3:
            # SimpleITK spacing is (x, y, z), convert to (z, y, x) to match array
            spacing = (sitk_spacing[2], sitk_spacing[1], sitk_spacing[0])
        logger.info("Loaded %s with shape %s", path, array.shape)
        return cls(array, name=name, spacing=spacing)

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Spatial shape (z, y, x)."""
        return tuple(self.array.shape[:3])

    @property
    def num_frames(self) -> int:
        return self.array.shape[3] if self.array.ndim == 4 else 1

    @property
    def is_complex(self) -> bool:
        return np.iscomplexobj(self.array)

    def real_part(self) -> "VolumeData":
        """Copy of this volume holding only real values."""
        return VolumeData(
            np.real(self.array), name=self.name, spacing=self.spacing,
            current_frame=self.current_frame,
        )

    def frame(self, frame: Optional[int] = None) -> np.ndarray:
        """Return the 3D array of a frame (current frame by default)."""
        if self.array.ndim == 3:
            return self.array
        if frame is None:
            frame = self.current_frame
        return self.array[..., frame]

    def change_frame(self, delta: float) -> bool:
        """Move the current frame by `delta`, clamped to valid frames.

        Infinite deltas jump to the first or last frame.

        Returns:
            True if the current frame changed
        """
        previous = self.current_frame
        if delta == np.inf:
            target = self.num_frames - 1
        elif delta == -np.inf:
            target = 0
        else:
            target = self.current_frame + int(delta)
        self.current_frame = max(0, min(target, self.num_frames - 1))
        return self.current_frame != previous

    def get_axial_slice(self, z: int, frame: Optional[int] = None) -> np.ndarray:
        """Get axial slice (XY plane at given Z index).

        Returns:
            2D array of shape (height, width) = (Y, X)
        """
        z = max(0, min(z, self.shape[0] - 1))
        return self.frame(frame)[z, :, :]

    def get_coronal_slice(self, y: int, frame: Optional[int] = None) -> np.ndarray:
        """Get coronal slice (XZ plane at given Y index).

        Returns:
            2D array of shape (height, width) = (Z, X)
        """
        y = max(0, min(y, self.shape[1] - 1))
        return self.frame(frame)[:, y, :]

    def get_sagittal_slice(self, x: int, frame: Optional[int] = None) -> np.ndarray:
        """Get sagittal slice (YZ plane at given X index).

        Returns:
            2D array of shape (height, width) = (Z, Y)
        """
        x = max(0, min(x, self.shape[2] - 1))
        return self.frame(frame)[:, :, x]

    def get_slice(self, plane: str, index: int, frame: Optional[int] = None) -> np.ndarray:
        """Get slice for specified plane.

        Args:
            plane: One of 'axial', 'coronal', 'sagittal'
            index: Slice index
            frame: Frame index, current frame if None

        Returns:
            2D numpy array
        """
        if plane == "axial":
            return self.get_axial_slice(index, frame)
        elif plane == "coronal":
            return self.get_coronal_slice(index, frame)
        elif plane == "sagittal":
            return self.get_sagittal_slice(index, frame)
        else:
            raise ValueError(f"Unknown plane: {plane}")

    def get_max_index(self, plane: str) -> int:
        """Get maximum valid slice index for given plane."""
        if plane not in FIXED_AXIS:
            raise ValueError(f"Unknown plane: {plane}")
        return self.shape[FIXED_AXIS[plane]] - 1

    def get_slice_shape(self, plane: str) -> Tuple[int, int]:
        """Get (height, width) of slices for given plane."""
        if plane not in IN_PLANE_AXES:
            raise ValueError(f"Unknown plane: {plane}")
        col_axis, row_axis = IN_PLANE_AXES[plane]
        return (self.shape[row_axis], self.shape[col_axis])

    def get_value_range(self) -> Tuple[float, float]:
        """Display range covering all finite values.

        NaNs and Infs are ignored and complex values contribute their real
        part. Equal extremes are widened by one on either side; a volume
        without finite values gets a very wide default range.

        Returns:
            Tuple of (min_value, max_value)
        """
        values = self.array[np.isfinite(self.array)]
        if values.size == 0:
            return config.EMPTY_VOLUME_RANGE
        values = np.real(values)
        lo, hi = float(values.min()), float(values.max())
        if lo == hi:
            lo, hi = lo - 1.0, hi + 1.0
        return (lo, hi)

    def value_at(self, point: Tuple[int, int, int], frame: Optional[int] = None):
        """Sample value at voxel (z, y, x) of a frame."""
        z, y, x = point
        return self.frame(frame)[z, y, x]
