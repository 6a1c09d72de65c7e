"""Toolbar for layouts, ROI drawing modes and export actions."""

from PySide6.QtWidgets import (
    QToolBar, QWidget, QPushButton, QButtonGroup, QLabel, QSizePolicy
)
from PySide6.QtCore import Signal

import config


class ToolBar(QToolBar):
    """Main toolbar with layout selection and action buttons.

    Provides:
    - Layout selection (1-4)
    - Crosshair toggle and pixel size
    - Snapshot and animation export
    - ROI add/remove mode toggles
    - Current mode indicator
    """

    # Signals
    layout_changed = Signal(int)
    crosshairs_toggled = Signal(bool)
    pixel_size_requested = Signal()
    save_images_requested = Signal()
    save_gifs_requested = Signal()
    roi_mode_changed = Signal(int)

    def __init__(self, parent=None):
        super().__init__("Main Toolbar", parent)
        self.setMovable(False)
        self._setup_ui()

    def _setup_ui(self):
        """Create the toolbar UI."""
        self.addWidget(QLabel("Layout:"))

        self.layout_button_group = QButtonGroup(self)
        self.layout_button_group.setExclusive(True)
        for number in sorted(config.LAYOUTS):
            button = QPushButton(str(number))
            button.setCheckable(True)
            button.setMaximumWidth(32)
            button.setToolTip(f"Layout {number} ({config.SHORTCUTS[f'layout{number}']})")
            self.layout_button_group.addButton(button, number)
            self.addWidget(button)
        self.layout_button_group.button(config.DEFAULT_LAYOUT).setChecked(True)
        self.layout_button_group.idClicked.connect(self.layout_changed.emit)

        self.crosshair_button = QPushButton("Crosshairs")
        self.crosshair_button.setCheckable(True)
        self.crosshair_button.setChecked(True)
        self.crosshair_button.setToolTip(f"Show crosshairs ({config.SHORTCUTS['crosshairs']})")
        self.crosshair_button.toggled.connect(self.crosshairs_toggled.emit)
        self.addWidget(self.crosshair_button)

        self.pixel_size_button = QPushButton("Pixel Size...")
        self.pixel_size_button.clicked.connect(self.pixel_size_requested.emit)
        self.addWidget(self.pixel_size_button)

        self.addSeparator()

        self.save_images_button = QPushButton("Snapshot")
        self.save_images_button.setToolTip(f"Save view images ({config.SHORTCUTS['save_images']})")
        self.save_images_button.clicked.connect(self.save_images_requested.emit)
        self.addWidget(self.save_images_button)

        self.save_gifs_button = QPushButton("Animate")
        self.save_gifs_button.setToolTip(
            f"Save phase animations as GIF ({config.SHORTCUTS['save_gifs']})"
        )
        self.save_gifs_button.clicked.connect(self.save_gifs_requested.emit)
        self.addWidget(self.save_gifs_button)

        self.addSeparator()

        self.addWidget(QLabel("ROI:"))

        self.roi_add_button = QPushButton("Add")
        self.roi_add_button.setCheckable(True)
        self.roi_add_button.setToolTip(f"Draw regions into the ROI ({config.SHORTCUTS['roi_add']})")
        self.roi_add_button.clicked.connect(lambda checked: self._on_roi_button(config.ROI_ADD, checked))
        self.addWidget(self.roi_add_button)

        self.roi_remove_button = QPushButton("Remove")
        self.roi_remove_button.setCheckable(True)
        self.roi_remove_button.setToolTip(
            f"Erase regions from the ROI ({config.SHORTCUTS['roi_remove']})"
        )
        self.roi_remove_button.clicked.connect(
            lambda checked: self._on_roi_button(config.ROI_REMOVE, checked)
        )
        self.addWidget(self.roi_remove_button)

        # Spacer to push status to right
        spacer = QWidget()
        spacer.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.addWidget(spacer)

        self.mode_indicator = QLabel("Mode: View")
        self.mode_indicator.setStyleSheet("font-weight: bold; padding: 0 10px;")
        self.addWidget(self.mode_indicator)

    def _on_roi_button(self, mode: int, checked: bool):
        """Handle ROI mode button click."""
        self.roi_mode_changed.emit(mode if checked else config.ROI_OFF)

    def set_roi_mode(self, mode: int):
        """Show the effective ROI mode without emitting signals."""
        self.roi_add_button.setChecked(mode == config.ROI_ADD)
        self.roi_remove_button.setChecked(mode == config.ROI_REMOVE)
        names = {config.ROI_OFF: "View", config.ROI_ADD: "ROI Add", config.ROI_REMOVE: "ROI Remove"}
        self.mode_indicator.setText(f"Mode: {names[mode]}")

    def set_layout(self, number: int):
        self.layout_button_group.button(number).setChecked(True)

    def set_crosshairs(self, visible: bool):
        self.crosshair_button.blockSignals(True)
        self.crosshair_button.setChecked(visible)
        self.crosshair_button.blockSignals(False)
