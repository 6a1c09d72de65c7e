#!/usr/bin/env python
"""Overlay Displacement - viewer for complex displacement phasors on anatomy.

Shows a 3D/4D background volume in three orthogonal views with a complex
overlay whose real projection rotates with the time slider.

Usage:
    python main.py BACKGROUND [OVERLAY] [options]

From Python:
    from main import overlay_displacement
    overlay_displacement(magnitude, phasor, over_range=(-5, 5), time=0.2)

Controls:
    - Left click: Activate a view / move the cursor
    - Mouse wheel: Scroll the active view
    - Ctrl + Mouse wheel: Zoom
    - Right drag: Background contrast
    - Middle drag: Overlay contrast
    - 1-4: Layouts
    - C: Toggle crosshairs
    - A / R: Draw regions into / erase regions from the selected ROI
    - Ctrl+S: Save view images
    - Ctrl+G: Save phase animations
"""

import argparse
import logging
import sys
from typing import MutableMapping, Optional

import numpy as np

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt

import config
from core.session import Session, ViewerOptions
from core.volume import VolumeData
from ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def _application() -> QApplication:
    app = QApplication.instance()
    if app is None:
        # Enable high DPI scaling
        QApplication.setHighDpiScaleFactorRoundingPolicy(
            Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
        )
        app = QApplication(sys.argv)
        app.setApplicationName(config.WINDOW_TITLE)
        app.setApplicationVersion("1.0.0")
    return app


def overlay_displacement(
    background,
    overlay=None,
    namespace: Optional[MutableMapping] = None,
    block: bool = True,
    **options,
) -> MainWindow:
    """Open a viewer window.

    Args:
        background: Real 2D/3D/4D array (z, y, x[, t]) or VolumeData
        overlay: Complex array of the same spatial shape, or None
        namespace: Variables used for ROI import/export; defaults to the
            globals of `__main__`
        block: Run the Qt event loop until the window closes. Pass False
            when a loop is already running, e.g. IPython with `%gui qt`.
        **options: ViewerOptions fields, e.g. back_range, over_map, alpha,
            pixel_size, time (camelCase names such as backRange also work)

    Returns:
        The viewer window

    Raises:
        ValueError: on invalid options or mismatched volumes
    """
    viewer_options = ViewerOptions.from_kwargs(**options)
    session = Session(background, overlay, viewer_options)

    if namespace is None:
        namespace = vars(sys.modules["__main__"])

    app = _application()
    window = MainWindow(session, namespace)
    window.show()

    if block:
        app.exec()
    return window


def load_overlay(path: str, imag_path: Optional[str] = None) -> VolumeData:
    """Load an overlay volume, optionally combining real and imaginary files."""
    overlay = VolumeData.from_file(path)
    if imag_path is None:
        return overlay
    imaginary = VolumeData.from_file(imag_path)
    if imaginary.array.shape != overlay.array.shape:
        raise ValueError(
            f"Imaginary part shape {imaginary.array.shape} does not match {overlay.array.shape}"
        )
    array = np.real(overlay.array) + 1j * np.real(imaginary.array)
    return VolumeData(array, name=overlay.name, spacing=overlay.spacing)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="View a complex displacement overlay on a background volume.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Volumes are read with SimpleITK (NIfTI, MHA, NRRD, ...) or numpy (.npy).\n"
            "Complex overlays can be given as one complex .npy file or as\n"
            "separate real and imaginary images (--overlay-imag)."
        ),
    )
    parser.add_argument("background", help="Background volume file")
    parser.add_argument("overlay", nargs="?", help="Overlay volume file (complex .npy or real part)")
    parser.add_argument("--overlay-imag", metavar="FILE", help="Imaginary part of the overlay")
    parser.add_argument("--back-range", nargs=2, type=float, metavar=("LO", "HI"))
    parser.add_argument("--over-range", nargs=2, type=float, metavar=("LO", "HI"))
    parser.add_argument("--mask-range", nargs=2, type=float, metavar=("LO", "HI"))
    parser.add_argument("--back-map", default=config.DEFAULT_BACK_MAP, metavar="NAME")
    parser.add_argument("--over-map", default=config.DEFAULT_OVER_MAP, metavar="NAME")
    parser.add_argument("--alpha", type=float, default=config.DEFAULT_ALPHA)
    parser.add_argument("--pixel-size", nargs=3, type=float, metavar=("X", "Y", "Z"))
    parser.add_argument("--title", default=config.WINDOW_TITLE)
    parser.add_argument("--time", type=float, default=config.DEFAULT_TIME,
                        help="Initial phase as a fraction of a cycle (0-1)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def options_from_args(args: argparse.Namespace) -> ViewerOptions:
    """Viewer options from parsed command-line arguments."""
    options = ViewerOptions(
        back_range=args.back_range,
        over_range=args.over_range,
        back_map=args.back_map,
        over_map=args.over_map,
        alpha=args.alpha,
        pixel_size=args.pixel_size,
        title=args.title,
        time=args.time,
    )
    if args.mask_range is not None:
        options.mask_range = tuple(args.mask_range)
    return options.validate()


def main(argv=None) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.overlay_imag and not args.overlay:
        parser.error("--overlay-imag needs an OVERLAY file")

    try:
        options = options_from_args(args)
        background = VolumeData.from_file(args.background)
        overlay = load_overlay(args.overlay, args.overlay_imag) if args.overlay else None
        session = Session(background, overlay, options)
    except (OSError, RuntimeError, ValueError) as e:
        logger.error("%s", e)
        return 1

    app = _application()
    # Without a host session ROIs are saved to files instead
    window = MainWindow(session, namespace=None)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
