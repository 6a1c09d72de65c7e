"""Save and load ROI sets."""

import json
import logging
from pathlib import Path
from typing import Tuple

import numpy as np

from .roi import ROI, ROISet

logger = logging.getLogger(__name__)


def save_rois(rois: ROISet, path: Path) -> Tuple[Path, Path]:
    """Save an ROI set as `<path>.json` and `<path>.npz`.

    Saves:
    - JSON file with ROI names and the volume shape
    - NPZ file with compressed mask arrays

    Args:
        rois: ROI set to save
        path: Destination path; any extension is replaced

    Returns:
        Paths of the JSON and NPZ files
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    json_file = path.with_suffix(".json")
    masks_file = path.with_suffix(".npz")

    json_data = {
        "shape": list(rois.shape),
        "rois": [],
    }
    mask_arrays = {}
    for i, roi in enumerate(rois):
        key = f"roi_{i}"
        mask_arrays[key] = roi.mask
        json_data["rois"].append({"name": roi.name, "key": key})

    np.savez_compressed(str(masks_file), **mask_arrays)
    with open(json_file, "w") as f:
        json.dump(json_data, f, indent=2)

    rois.modified = False
    logger.info("Saved %d ROI(s) to %s", len(rois), masks_file)
    return json_file, masks_file


def load_rois(path: Path, rois: ROISet) -> int:
    """Append ROIs saved with `save_rois` to an existing set.

    Masks whose shape does not match the set are skipped with a warning.

    Returns:
        Number of ROIs loaded
    """
    path = Path(path)
    json_file = path.with_suffix(".json")
    masks_file = path.with_suffix(".npz")

    with open(json_file) as f:
        data = json.load(f)

    loaded = 0
    with np.load(str(masks_file)) as mask_data:
        for info in data.get("rois", []):
            key = info["key"]
            if key not in mask_data:
                logger.warning("Mask '%s' missing from %s", key, masks_file)
                continue
            mask = mask_data[key].astype(bool)
            if mask.shape != tuple(rois.shape):
                logger.warning(
                    "Skipping '%s': shape %s does not match %s",
                    info["name"], mask.shape, rois.shape,
                )
                continue
            name = info["name"]
            if name in rois.names:
                name = rois.next_name()
            rois.rois.append(ROI(name=name, mask=mask))
            loaded += 1

    if loaded:
        rois.selected = len(rois) - 1
        rois.modified = True
    logger.info("Loaded %d ROI(s) from %s", loaded, masks_file)
    return loaded
