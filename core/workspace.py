"""Exchange ROI masks with a host variable namespace.

The namespace is any mutable mapping of variable names to values, usually
the globals of the interactive session that launched the viewer.
"""

import keyword
import logging
import re
from typing import List, MutableMapping, Sequence

import numpy as np

from .roi import ROISet

logger = logging.getLogger(__name__)


def make_valid_name(text: str) -> str:
    """Turn arbitrary text into a valid Python identifier."""
    name = re.sub(r"\W", "_", text.strip())
    if not name:
        return "x"
    if name[0].isdigit():
        name = "x" + name
    if keyword.iskeyword(name):
        name += "_"
    return name


def roi_candidates(namespace: MutableMapping, shape: Sequence[int]) -> List[str]:
    """Names of boolean 3D/4D arrays whose spatial shape equals `shape`."""
    names = []
    for name, value in namespace.items():
        if name.startswith("_") or not isinstance(value, np.ndarray):
            continue
        if value.dtype == bool and value.ndim in (3, 4) and tuple(value.shape[:3]) == tuple(shape):
            names.append(name)
    return sorted(names)


def export_rois(
    namespace: MutableMapping, name: str, rois: ROISet, overwrite: bool = False
) -> str:
    """Store the stacked ROI masks in the namespace.

    Returns:
        The variable name actually used

    Raises:
        ValueError: if the set is empty, or the variable exists and
            `overwrite` is false
    """
    if len(rois) == 0:
        raise ValueError("There are no ROIs to export")
    name = make_valid_name(name)
    if name in namespace and not overwrite:
        raise ValueError(f"The variable '{name}' already exists")
    namespace[name] = rois.stack()
    rois.modified = False
    logger.info("Exported %d ROI(s) to variable '%s'", len(rois), name)
    return name


def import_rois(namespace: MutableMapping, names: Sequence[str], rois: ROISet) -> int:
    """Import the named namespace variables as ROIs.

    Variables that do not qualify are skipped with a warning.

    Returns:
        Number of ROIs added
    """
    added = 0
    for name in names:
        value = namespace.get(name)
        if not rois.accepts(value):
            logger.warning("Skipping '%s': not a boolean mask of shape %s", name, rois.shape)
            continue
        added += len(rois.extend(value))
    logger.info("Imported %d ROI(s)", added)
    return added
