"""Control panel with colormap, range, phase and ROI settings."""

import math
from typing import Dict, List, Optional, Tuple

import numpy as np

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QSlider, QLineEdit,
    QComboBox, QGroupBox, QFormLayout, QPushButton
)
from PySide6.QtCore import Qt, Signal

import config

SLIDER_STEPS = 100


def parse_float(text: str) -> float:
    """Parse a range field; unreadable text gives NaN."""
    try:
        return float(text.strip())
    except ValueError:
        return math.nan


def format_value(value) -> str:
    """Format a sampled voxel value for display."""
    if value is None:
        return "-"
    if np.iscomplexobj(value):
        return f"{value.real:.4g} {'+' if value.imag >= 0 else '-'} {abs(value.imag):.4g}i"
    return f"{float(value.real):.4g}"


class ControlsWidget(QWidget):
    """Control panel for display and ROI settings.

    Provides controls for:
    - Background and overlay colormaps and display ranges
    - Overlay mask range, opacity and phase
    - Frame selection for 4D volumes
    - ROI selection, plotting, import/export and file persistence
    """

    # Signals
    colormap_changed = Signal(str, str)  # kind, colormap name
    range_edited = Signal(str, int, float)  # kind, end (0 lower, 1 upper), value
    alpha_changed = Signal(float)
    time_changed = Signal(float)
    frame_step = Signal(str, float)  # kind, delta
    roi_selected = Signal(int)  # index, len(rois) for a new ROI
    roi_delete_requested = Signal()
    roi_plot_requested = Signal()
    roi_export_requested = Signal()
    roi_import_requested = Signal()
    roi_save_requested = Signal()
    roi_load_requested = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.range_fields: Dict[str, Tuple[QLineEdit, QLineEdit]] = {}
        self.colormap_combos: Dict[str, QComboBox] = {}
        self.frame_labels: Dict[str, QLabel] = {}
        self.value_labels: Dict[str, QLabel] = {}
        self._setup_ui()

    def _setup_ui(self):
        """Create the UI layout."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)
        self.setMaximumWidth(config.MENU_WIDTH * 2)

        # Background group
        self.background_group = QGroupBox("Background")
        back_layout = QFormLayout(self.background_group)
        back_layout.addRow("Value:", self._value_label("background"))
        back_layout.addRow("Colormap:", self._colormap_combo("background"))
        back_layout.addRow("Range:", self._range_row("background"))
        back_layout.addRow("Frame:", self._frame_row("background"))

        # Overlay group
        self.overlay_group = QGroupBox("Overlay")
        over_layout = QFormLayout(self.overlay_group)
        over_layout.addRow("Value:", self._value_label("overlay"))
        over_layout.addRow("Colormap:", self._colormap_combo("overlay"))
        over_layout.addRow("Range:", self._range_row("overlay"))
        over_layout.addRow("Mask:", self._range_row("mask"))

        self.alpha_slider = QSlider(Qt.Horizontal)
        self.alpha_slider.setRange(0, SLIDER_STEPS)
        self.alpha_slider.valueChanged.connect(
            lambda v: self.alpha_changed.emit(v / SLIDER_STEPS)
        )
        over_layout.addRow("Alpha:", self.alpha_slider)

        self.time_slider = QSlider(Qt.Horizontal)
        self.time_slider.setRange(0, SLIDER_STEPS)
        self.time_slider.valueChanged.connect(
            lambda v: self.time_changed.emit(v / SLIDER_STEPS)
        )
        over_layout.addRow("Time:", self.time_slider)
        over_layout.addRow("Frame:", self._frame_row("overlay"))

        # ROI group
        roi_group = QGroupBox("ROI")
        roi_layout = QVBoxLayout(roi_group)

        self.roi_combo = QComboBox()
        self.roi_combo.activated.connect(self.roi_selected.emit)
        roi_layout.addWidget(self.roi_combo)

        roi_buttons = QHBoxLayout()
        self.roi_delete_button = self._button("Delete", self.roi_delete_requested, "Delete the selected ROI")
        self.roi_plot_button = self._button("Plot", self.roi_plot_requested, "Plot mean and std per frame")
        roi_buttons.addWidget(self.roi_delete_button)
        roi_buttons.addWidget(self.roi_plot_button)
        roi_layout.addLayout(roi_buttons)

        workspace_buttons = QHBoxLayout()
        workspace_buttons.addWidget(
            self._button("Export", self.roi_export_requested, "Export ROIs to a workspace variable")
        )
        workspace_buttons.addWidget(
            self._button("Import", self.roi_import_requested, "Import ROIs from workspace variables")
        )
        roi_layout.addLayout(workspace_buttons)

        file_buttons = QHBoxLayout()
        file_buttons.addWidget(self._button("Save...", self.roi_save_requested, "Save ROIs to a file"))
        file_buttons.addWidget(self._button("Load...", self.roi_load_requested, "Load ROIs from a file"))
        roi_layout.addLayout(file_buttons)

        layout.addWidget(self.background_group)
        layout.addWidget(self.overlay_group)
        layout.addWidget(roi_group)
        layout.addStretch()

        self.set_rois([], -1)

    def _button(self, text: str, signal, tooltip: str) -> QPushButton:
        button = QPushButton(text)
        button.setToolTip(tooltip)
        button.clicked.connect(signal.emit)
        return button

    def _value_label(self, kind: str) -> QLabel:
        label = QLabel("-")
        label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self.value_labels[kind] = label
        return label

    def _colormap_combo(self, kind: str) -> QComboBox:
        combo = QComboBox()
        combo.addItems(config.COLORMAP_NAMES)
        combo.currentTextChanged.connect(lambda name: self.colormap_changed.emit(kind, name))
        self.colormap_combos[kind] = combo
        return combo

    def _range_row(self, kind: str) -> QHBoxLayout:
        row = QHBoxLayout()
        fields = (QLineEdit(), QLineEdit())
        for end, field in enumerate(fields):
            field.editingFinished.connect(
                lambda e=end, f=field: self.range_edited.emit(kind, e, parse_float(f.text()))
            )
            row.addWidget(field)
        self.range_fields[kind] = fields
        return row

    def _frame_row(self, kind: str) -> QHBoxLayout:
        row = QHBoxLayout()
        for text, delta in (("|<", -math.inf), ("<", -1), (">", 1), (">|", math.inf)):
            button = QPushButton(text)
            button.setMaximumWidth(32)
            button.clicked.connect(lambda checked=False, d=delta: self.frame_step.emit(kind, d))
            row.addWidget(button)
        label = QLabel("1 / 1")
        row.addWidget(label)
        self.frame_labels[kind] = label
        return row

    def set_overlay_enabled(self, enabled: bool):
        """Enable the overlay controls only when an overlay is loaded."""
        self.overlay_group.setEnabled(enabled)

    def set_colormap(self, kind: str, name: str):
        """Select a colormap name without emitting signals."""
        combo = self.colormap_combos[kind]
        combo.blockSignals(True)
        if combo.findText(name) < 0:
            combo.addItem(name)
        combo.setCurrentText(name)
        combo.blockSignals(False)

    def set_range(self, kind: str, display_range: Optional[Tuple[float, float]]):
        """Show a display range in the text fields."""
        for field, value in zip(self.range_fields[kind], display_range or ("", "")):
            field.blockSignals(True)
            field.setText(value if isinstance(value, str) else f"{value:.6g}")
            field.blockSignals(False)

    def set_alpha(self, alpha: float):
        self.alpha_slider.blockSignals(True)
        self.alpha_slider.setValue(round(alpha * SLIDER_STEPS))
        self.alpha_slider.blockSignals(False)

    def set_time(self, fraction: float):
        self.time_slider.blockSignals(True)
        self.time_slider.setValue(round(fraction * SLIDER_STEPS))
        self.time_slider.blockSignals(False)

    def set_frame(self, kind: str, current: int, total: int):
        """Show the current frame (1-based) of a volume."""
        self.frame_labels[kind].setText(f"{current + 1} / {total}")

    def set_value(self, kind: str, value):
        self.value_labels[kind].setText(format_value(value))

    def set_rois(self, names: List[str], selected: int):
        """Fill the ROI list; the last entry stands for no selected ROI."""
        self.roi_combo.blockSignals(True)
        self.roi_combo.clear()
        self.roi_combo.addItems(names + [config.ROI_NEW_ENTRY])
        self.roi_combo.setCurrentIndex(selected if selected >= 0 else len(names))
        self.roi_combo.blockSignals(False)
        self.roi_delete_button.setEnabled(selected >= 0)
        self.roi_plot_button.setEnabled(bool(names))
