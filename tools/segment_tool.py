"""Segment tool for contour-based ROI editing."""

from typing import Sequence, Tuple

import cv2
import numpy as np


class SegmentTool:
    """Static methods for segment/contour operations.

    Converts a drawn contour (a list of scene points) into a binary mask
    that can be applied to a 3D ROI volume.
    """

    @staticmethod
    def points_to_mask(
        points: Sequence[Tuple[float, float]], width: int, height: int
    ) -> np.ndarray:
        """Rasterize a closed polygon into a boolean mask.

        Scene coordinates place pixel (col, row) on [col, col + 1) x
        [row, row + 1). Each vertex snaps to the pixel containing it and the
        polygon is filled including its outline.

        Args:
            points: Polygon vertices as (x, y) scene coordinates
            width: Image width (slice width)
            height: Image height (slice height)

        Returns:
            2D boolean array of shape (height, width)
        """
        mask = np.zeros((height, width), dtype=np.uint8)
        if len(points) == 0:
            return mask.astype(bool)

        vertices = np.floor(np.asarray(points, dtype=np.float64).reshape(-1, 2))
        vertices = vertices.astype(np.int32)
        cv2.fillPoly(mask, [vertices.reshape(-1, 1, 2)], 1)
        return mask.astype(bool)

    @staticmethod
    def apply_segment_to_mask(
        mask_3d: np.ndarray,
        plane: str,
        slice_idx: int,
        points: Sequence[Tuple[float, float]],
        slice_shape: Tuple[int, int],
        erase: bool = False
    ) -> np.ndarray:
        """Apply segment polygon to 3D boolean mask array in-place.

        Args:
            mask_3d: 3D boolean array (z, y, x) to modify
            plane: The anatomical plane ('axial', 'coronal', 'sagittal')
            slice_idx: Index of the slice being modified
            points: Polygon vertices in scene coordinates
            slice_shape: (height, width) of the 2D slice
            erase: If True, subtract from mask; if False, add to mask

        Returns:
            The rasterized 2D segment
        """
        height, width = slice_shape
        segment_mask = SegmentTool.points_to_mask(points, width, height)

        # Get 2D slice view from 3D mask (modifying in-place)
        if plane == "axial":
            slice_2d = mask_3d[slice_idx, :, :]
        elif plane == "coronal":
            slice_2d = mask_3d[:, slice_idx, :]
        elif plane == "sagittal":
            slice_2d = mask_3d[:, :, slice_idx]
        else:
            raise ValueError(f"Unknown plane: {plane}")

        # Apply operation
        if erase:
            slice_2d[segment_mask] = False
        else:
            slice_2d[segment_mask] = True
        return segment_mask
