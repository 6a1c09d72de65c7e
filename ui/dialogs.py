"""Small modal dialogs: pixel size, ROI variable name and variable selection."""

from typing import List, Optional, Sequence, Tuple

from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QDoubleSpinBox, QFormLayout, QInputDialog,
    QListWidget, QAbstractItemView, QMessageBox, QVBoxLayout, QLabel
)

import config
from core.workspace import make_valid_name


class PixelSizeDialog(QDialog):
    """Edit the voxel size along x, y and z."""

    def __init__(self, pixel_size: Sequence[float], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Pixel Size")
        layout = QFormLayout(self)

        self.spins = []
        for axis, value in zip("xyz", pixel_size):
            spin = QDoubleSpinBox()
            spin.setDecimals(4)
            spin.setRange(1e-4, 1e4)
            spin.setValue(value)
            layout.addRow(f"{axis}:", spin)
            self.spins.append(spin)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)

    def pixel_size(self) -> Tuple[float, float, float]:
        return tuple(spin.value() for spin in self.spins)

    @staticmethod
    def get_pixel_size(pixel_size: Sequence[float], parent=None) -> Optional[Tuple[float, float, float]]:
        """Show the dialog; returns the new size, or None if cancelled."""
        dialog = PixelSizeDialog(pixel_size, parent)
        if dialog.exec() == QDialog.Accepted:
            return dialog.pixel_size()
        return None


class VariableSelectDialog(QDialog):
    """Pick one or more workspace variables to import as ROIs."""

    def __init__(self, names: List[str], parent=None):
        super().__init__(parent)
        self.setWindowTitle("Import ROIs")
        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Select variables:"))

        self.list_widget = QListWidget()
        self.list_widget.setSelectionMode(QAbstractItemView.ExtendedSelection)
        self.list_widget.addItems(names)
        layout.addWidget(self.list_widget)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def selected_names(self) -> List[str]:
        return [item.text() for item in self.list_widget.selectedItems()]

    @staticmethod
    def get_names(names: List[str], parent=None) -> List[str]:
        """Show the dialog; returns the selected names (empty if cancelled)."""
        dialog = VariableSelectDialog(names, parent)
        if dialog.exec() == QDialog.Accepted:
            return dialog.selected_names()
        return []


def ask_variable_name(parent=None, default: str = config.DEFAULT_ROI_VARIABLE) -> Optional[str]:
    """Ask for the workspace variable name to export ROIs to."""
    text, ok = QInputDialog.getText(parent, "Export ROIs", "Variable name:", text=default)
    if not ok or not text.strip():
        return None
    return make_valid_name(text)


def confirm_overwrite(parent, name: str) -> bool:
    """Ask whether an existing workspace variable may be replaced."""
    reply = QMessageBox.question(
        parent,
        "Variable Exists",
        f"The variable '{name}' already exists. Overwrite it?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No
    )
    return reply == QMessageBox.Yes
