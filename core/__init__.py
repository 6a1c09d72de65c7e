"""Core data handling modules."""

from .volume import VolumeData
from .roi import ROI, ROISet
from .session import Session, ViewerOptions
from .persistence import save_rois, load_rois
from .export import save_view_images, save_phase_gifs

__all__ = [
    "VolumeData",
    "ROI",
    "ROISet",
    "Session",
    "ViewerOptions",
    "save_rois",
    "load_rois",
    "save_view_images",
    "save_phase_gifs",
]
