"""Main application window."""

import logging
from typing import Dict, Iterable, List, MutableMapping, Optional, Tuple

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QGridLayout, QSplitter, QStatusBar,
    QMessageBox, QFileDialog, QApplication
)
from PySide6.QtCore import Qt, QPointF
from PySide6.QtGui import QKeySequence, QShortcut

import config
from core.export import save_phase_gifs, save_view_images
from core.persistence import load_rois, save_rois
from core.session import RANGE_KINDS, Session
from core.volume import IN_PLANE_AXES
from core.workspace import export_rois, import_rois, roi_candidates
from .controls import ControlsWidget
from .cursors import make_cursor
from .dialogs import PixelSizeDialog, VariableSelectDialog, ask_variable_name, confirm_overwrite
from .roi_plot import ROIPlotWindow
from .slice_view import SliceView
from .toolbar import ToolBar

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window coordinating all views and controls.

    Manages:
    - Three orthogonal slice views sharing one cursor
    - Display controls (colormaps, ranges, alpha, phase, frames)
    - ROI drawing, import/export and persistence
    - Snapshot and animation export
    """

    def __init__(self, session: Session, namespace: Optional[MutableMapping] = None):
        """Initialize the window.

        Args:
            session: Viewing session to display
            namespace: Variable namespace for ROI import/export, or None
        """
        super().__init__()
        self.session = session
        self.namespace = namespace
        self.setWindowTitle(session.title)
        self.resize(*config.WINDOW_SIZE)

        # Mouse drag state
        self._drag_mode: Optional[str] = None  # "cursor", "contrast" or "roi"
        self._drag_plane: Optional[str] = None
        self._drag_kind: Optional[str] = None
        self._drag_last: Optional[QPointF] = None
        self._roi_points: List[Tuple[float, float]] = []

        self._plot_window: Optional[ROIPlotWindow] = None

        self._setup_ui()
        self._setup_shortcuts()
        self._connect_signals()
        self._initialize_views()

    def _setup_ui(self):
        """Create the main layout."""
        self.toolbar = ToolBar()
        self.addToolBar(self.toolbar)

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(5, 5, 5, 5)

        # Left panel - controls
        self.controls = ControlsWidget()

        # Right panel - views on a 2x3 grid
        self.view_container = QWidget()
        self.view_layout = QGridLayout(self.view_container)
        self.view_layout.setSpacing(5)
        for column in range(3):
            self.view_layout.setColumnStretch(column, 1)
        for row in range(2):
            self.view_layout.setRowStretch(row, 1)

        self.views: Dict[str, SliceView] = {plane: SliceView(plane) for plane in config.PLANES}

        splitter = QSplitter(Qt.Horizontal)
        splitter.addWidget(self.controls)
        splitter.addWidget(self.view_container)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        main_layout.addWidget(splitter)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Ready")

    def _setup_shortcuts(self):
        """Set up keyboard shortcuts."""
        for number in config.LAYOUTS:
            QShortcut(
                QKeySequence(config.SHORTCUTS[f"layout{number}"]), self,
                lambda n=number: self._on_layout_changed(n)
            )
        QShortcut(
            QKeySequence(config.SHORTCUTS["crosshairs"]), self,
            lambda: self._on_crosshairs_toggled(not self.session.show_crosshairs)
        )
        QShortcut(
            QKeySequence(config.SHORTCUTS["roi_add"]), self,
            lambda: self._toggle_roi_mode(config.ROI_ADD)
        )
        QShortcut(
            QKeySequence(config.SHORTCUTS["roi_remove"]), self,
            lambda: self._toggle_roi_mode(config.ROI_REMOVE)
        )
        QShortcut(QKeySequence(config.SHORTCUTS["save_images"]), self, self._save_images)
        QShortcut(QKeySequence(config.SHORTCUTS["save_gifs"]), self, self._save_gifs)

    def _connect_signals(self):
        """Connect signals between components."""
        # Toolbar signals
        self.toolbar.layout_changed.connect(self._on_layout_changed)
        self.toolbar.crosshairs_toggled.connect(self._on_crosshairs_toggled)
        self.toolbar.pixel_size_requested.connect(self._edit_pixel_size)
        self.toolbar.save_images_requested.connect(self._save_images)
        self.toolbar.save_gifs_requested.connect(self._save_gifs)
        self.toolbar.roi_mode_changed.connect(self._on_roi_mode_changed)

        # Control signals
        self.controls.colormap_changed.connect(self._on_colormap_changed)
        self.controls.range_edited.connect(self._on_range_edited)
        self.controls.alpha_changed.connect(self._on_alpha_changed)
        self.controls.time_changed.connect(self._on_time_changed)
        self.controls.frame_step.connect(self._on_frame_step)
        self.controls.roi_selected.connect(self._on_roi_selected)
        self.controls.roi_delete_requested.connect(self._delete_roi)
        self.controls.roi_plot_requested.connect(self._plot_rois)
        self.controls.roi_export_requested.connect(self._export_rois)
        self.controls.roi_import_requested.connect(self._import_rois)
        self.controls.roi_save_requested.connect(self._save_rois)
        self.controls.roi_load_requested.connect(self._load_rois)

        # View signals
        for view in self.views.values():
            view.slice_changed.connect(self._on_slice_changed)
            view.scrolled.connect(self._on_scrolled)
            view.mouse_pressed.connect(self._on_view_mouse_pressed)
            view.mouse_moved.connect(self._on_view_mouse_moved)
            view.mouse_released.connect(self._on_view_mouse_released)

    def _initialize_views(self):
        """Push the session state into all widgets."""
        session = self.session
        for plane, view in self.views.items():
            view.set_slice_range(session.background.get_max_index(plane))
        self._apply_aspect()
        self._apply_layout(session.layout)
        self._update_view_cursor()

        self.controls.set_overlay_enabled(session.has_overlay)
        self.controls.set_colormap("background", session.back_map_name)
        if session.has_overlay:
            self.controls.set_colormap("overlay", session.over_map_name)
        self._sync_ranges()
        self.controls.set_alpha(session.alpha)
        self.controls.set_time(session.time)
        self._sync_frames()
        self._sync_rois()
        self._update_views()

    # Display updates

    def _update_views(self, planes: Optional[Iterable[str]] = None):
        """Re-render the given views (all by default) and refresh crosshairs everywhere."""
        for plane in config.PLANES if planes is None else planes:
            view = self.views[plane]
            view.set_slice_index(self.session.slice_index(plane))
            view.set_image(self.session.render(plane))
        self._update_crosshairs()
        self._sync_values()

    def _update_crosshairs(self):
        cursor = self.session.cursor
        for plane, view in self.views.items():
            col_axis, row_axis = IN_PLANE_AXES[plane]
            view.set_crosshair(cursor[col_axis], cursor[row_axis], self.session.show_crosshairs)
            view.set_active(plane == self.session.active_view)

    def _apply_aspect(self):
        for plane, view in self.views.items():
            view.set_aspect(*self.session.slice_aspect(plane))

    def _apply_layout(self, number: int):
        """Place the views on the grid according to a layout."""
        for view in self.views.values():
            self.view_layout.removeWidget(view)
        for plane, (row, column, row_span, column_span) in config.LAYOUTS[number].items():
            self.view_layout.addWidget(self.views[plane], row, column, row_span, column_span)
        self.session.layout = number
        self.toolbar.set_layout(number)
        for view in self.views.values():
            view.fit_view()

    def _update_view_cursor(self):
        if self.session.roi_mode == config.ROI_ADD:
            cursor = make_cursor("pencil")
        elif self.session.roi_mode == config.ROI_REMOVE:
            cursor = make_cursor("eraser")
        else:
            cursor = make_cursor("cross")
        for view in self.views.values():
            view.view.viewport().setCursor(cursor)

    def _sync_ranges(self):
        for kind in RANGE_KINDS:
            self.controls.set_range(kind, self.session.get_range(kind))

    def _sync_frames(self):
        self.controls.set_frame(
            "background", self.session.background.current_frame, self.session.background.num_frames
        )
        if self.session.overlay is not None:
            self.controls.set_frame(
                "overlay", self.session.overlay.current_frame, self.session.overlay.num_frames
            )

    def _sync_values(self):
        self.controls.set_value("background", self.session.background_value())
        self.controls.set_value("overlay", self.session.overlay_value())

    def _sync_rois(self):
        rois = self.session.rois
        self.controls.set_rois(rois.names, rois.selected)
        self.toolbar.set_roi_mode(self.session.roi_mode)
        self._update_view_cursor()

    # Toolbar handlers

    def _on_layout_changed(self, number: int):
        self._apply_layout(number)
        self.status_bar.showMessage(f"Layout {number}")

    def _on_crosshairs_toggled(self, visible: bool):
        self.session.show_crosshairs = visible
        self.toolbar.set_crosshairs(visible)
        self._update_crosshairs()

    def _edit_pixel_size(self):
        pixel_size = PixelSizeDialog.get_pixel_size(self.session.pixel_size, self)
        if pixel_size is None:
            return
        try:
            self.session.set_pixel_size(pixel_size)
        except ValueError as e:
            self.status_bar.showMessage(str(e))
            return
        self._apply_aspect()
        self.status_bar.showMessage(
            "Pixel size: " + " x ".join(f"{v:g}" for v in self.session.pixel_size)
        )

    def _on_roi_mode_changed(self, mode: int):
        effective = self.session.set_roi_mode(mode)
        if mode == config.ROI_REMOVE and effective != mode:
            self.status_bar.showMessage("Select an ROI before removing regions")
        self._sync_rois()
        self._update_views()

    def _toggle_roi_mode(self, mode: int):
        self._on_roi_mode_changed(config.ROI_OFF if self.session.roi_mode == mode else mode)

    # Control handlers

    def _on_colormap_changed(self, kind: str, name: str):
        self.session.set_colormap(kind, name)
        self._update_views()

    def _on_range_edited(self, kind: str, end: int, value: float):
        if self.session.get_range(kind) is None:
            return
        self.session.set_range(kind, end, value)
        self.controls.set_range(kind, self.session.get_range(kind))
        self._update_views()

    def _on_alpha_changed(self, alpha: float):
        self.session.set_alpha(alpha)
        self._update_views()

    def _on_time_changed(self, fraction: float):
        self.session.set_time(fraction)
        self._update_views()

    def _on_frame_step(self, kind: str, delta: float):
        if self.session.change_frame(kind, delta):
            self._sync_frames()
            self._update_views()

    # View handlers

    def _on_slice_changed(self, plane: str, index: int):
        """Handle a view's slider moving."""
        self.session.activate(plane)
        self.session.scroll(index - self.session.slice_index(plane))
        self._update_views([plane])

    def _on_scrolled(self, plane: str, steps: int):
        if self.session.scroll(steps):
            self._update_views([self.session.active_view])

    def _on_view_mouse_pressed(self, plane: str, slice_idx: int, pos: QPointF, event):
        """Handle mouse press on a view."""
        if self._drag_mode is not None:
            return

        if event.button() == Qt.LeftButton:
            if self.session.roi_mode != config.ROI_OFF and plane == self.session.active_view:
                self._start_roi(plane, pos)
                return
            was_active = plane == self.session.active_view
            self._update_views(self.session.click(plane, pos.x(), pos.y()))
            if was_active:
                self._start_drag("cursor", plane, event)
        elif event.button() == Qt.RightButton:
            self._start_drag("contrast", plane, event, "background")
        elif event.button() == Qt.MiddleButton and self.session.has_overlay:
            self._start_drag("contrast", plane, event, "overlay")

    def _on_view_mouse_moved(self, plane: str, slice_idx: int, pos: QPointF, event):
        """Handle mouse move on a view."""
        if self._drag_mode is None or plane != self._drag_plane:
            return

        if self._drag_mode == "cursor":
            self._update_views(self.session.move_cursor(plane, pos.x(), pos.y()))
        elif self._drag_mode == "contrast":
            current = event.position()
            dx = current.x() - self._drag_last.x()
            # Screen y grows downwards
            dy = self._drag_last.y() - current.y()
            self._drag_last = current
            if self.session.drag_contrast(self._drag_kind, dx, dy):
                self.controls.set_range(self._drag_kind, self.session.get_range(self._drag_kind))
                self._update_views()
        elif self._drag_mode == "roi":
            self._roi_points.append((pos.x(), pos.y()))
            self.views[plane].set_roi_preview(self._roi_points)

    def _on_view_mouse_released(self, plane: str, slice_idx: int, pos: QPointF, event):
        """Handle mouse release on a view."""
        if self._drag_mode == "roi":
            self._end_roi()
        elif self._drag_mode == "contrast":
            logger.debug("%s range: %s", self._drag_kind, self.session.get_range(self._drag_kind))
        self._drag_mode = None
        self._drag_plane = None
        self._update_view_cursor()

    def _start_drag(self, mode: str, plane: str, event, kind: Optional[str] = None):
        self._drag_mode = mode
        self._drag_plane = plane
        self._drag_kind = kind
        self._drag_last = event.position()
        if mode == "contrast":
            self.views[plane].view.viewport().setCursor(make_cursor("contrast"))

    def _start_roi(self, plane: str, pos: QPointF):
        """Start a new ROI polygon."""
        self._drag_mode = "roi"
        self._drag_plane = plane
        self._roi_points = [(pos.x(), pos.y())]
        self.views[plane].set_roi_preview(self._roi_points)

    def _end_roi(self):
        """Close the ROI polygon and apply it to the selected ROI."""
        plane = self._drag_plane
        try:
            if self.session.finish_roi(plane, self._roi_points):
                action = "Added to" if self.session.roi_mode == config.ROI_ADD else "Removed from"
                self.status_bar.showMessage(f"{action} {self.session.rois.current.name}")
        finally:
            self.views[plane].clear_roi_preview()
            self._roi_points = []
            self._update_views([plane])

    # ROI handlers

    def _on_roi_selected(self, index: int):
        # The <NEW> entry shows no ROI; Add creates one
        self.session.select_roi(-1 if index >= len(self.session.rois) else index)
        self._sync_rois()
        self._update_views()

    def _delete_roi(self):
        name = self.session.rois.current.name if self.session.rois.current else None
        if self.session.delete_roi():
            self.status_bar.showMessage(f"Deleted {name}")
            self._sync_rois()
            self._update_views()

    def _plot_rois(self):
        if len(self.session.rois) == 0:
            self.status_bar.showMessage("No ROIs to plot")
            return
        if self._plot_window is None:
            self._plot_window = ROIPlotWindow()
        self._plot_window.plot(self.session.rois.names, self.session.roi_curves())
        self._plot_window.show()
        self._plot_window.raise_()

    def _export_rois(self) -> bool:
        """Export ROIs to a workspace variable. Returns True on success."""
        if self.namespace is None:
            self.status_bar.showMessage("No workspace available; use Save... instead")
            return False
        if len(self.session.rois) == 0:
            self.status_bar.showMessage("No ROIs to export")
            return False
        name = ask_variable_name(self)
        if name is None:
            return False
        overwrite = name in self.namespace and confirm_overwrite(self, name)
        if name in self.namespace and not overwrite:
            return False
        try:
            name = export_rois(self.namespace, name, self.session.rois, overwrite=overwrite)
        except ValueError as e:
            logger.exception("ROI export failed")
            self.status_bar.showMessage(f"Export failed: {e}")
            return False
        self.status_bar.showMessage(f"Exported {len(self.session.rois)} ROI(s) to '{name}'")
        return True

    def _import_rois(self):
        if self.namespace is None:
            self.status_bar.showMessage("No workspace available; use Load... instead")
            return
        candidates = roi_candidates(self.namespace, self.session.shape)
        if not candidates:
            self.status_bar.showMessage("No matching boolean arrays in the workspace")
            return
        names = VariableSelectDialog.get_names(candidates, self)
        if not names:
            return
        count = import_rois(self.namespace, names, self.session.rois)
        self.status_bar.showMessage(f"Imported {count} ROI(s)")
        self._sync_rois()
        self._update_views()

    def _save_rois(self) -> bool:
        """Save ROIs to a file. Returns True on success."""
        if len(self.session.rois) == 0:
            self.status_bar.showMessage("No ROIs to save")
            return False
        path, _ = QFileDialog.getSaveFileName(self, "Save ROIs", "", "ROI sets (*.npz)")
        if not path:
            return False
        try:
            _, masks_file = save_rois(self.session.rois, path)
        except OSError as e:
            logger.exception("ROI save failed")
            self.status_bar.showMessage(f"Save failed: {e}")
            return False
        self.status_bar.showMessage(f"Saved ROIs to {masks_file}")
        return True

    def _load_rois(self):
        path, _ = QFileDialog.getOpenFileName(self, "Load ROIs", "", "ROI sets (*.npz *.json)")
        if not path:
            return
        try:
            count = load_rois(path, self.session.rois)
        except (OSError, ValueError, KeyError) as e:
            logger.exception("ROI load failed")
            self.status_bar.showMessage(f"Load failed: {e}")
            return
        self.status_bar.showMessage(f"Loaded {count} ROI(s)")
        self._sync_rois()
        self._update_views()

    # Export

    def _save_images(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Save View Images", "", "Images (*.png *.bmp *.jpg)"
        )
        if not path:
            return
        try:
            written = save_view_images(self.session.render_all(), path)
        except (OSError, ValueError) as e:
            logger.exception("Image export failed")
            self.status_bar.showMessage(f"Image export failed: {e}")
            return
        self.status_bar.showMessage(f"Saved {len(written)} image(s)")

    def _save_gifs(self):
        if not self.session.has_overlay:
            self.status_bar.showMessage("Animation needs an overlay")
            return
        path, _ = QFileDialog.getSaveFileName(self, "Save Animations", "", "GIF (*.gif)")
        if not path:
            return
        self.status_bar.showMessage("Writing animations...")
        QApplication.setOverrideCursor(Qt.WaitCursor)
        try:
            written = save_phase_gifs(self.session.render_at_time, path)
        except (OSError, ValueError) as e:
            logger.exception("Animation export failed")
            self.status_bar.showMessage(f"Animation export failed: {e}")
            return
        finally:
            QApplication.restoreOverrideCursor()
        self.status_bar.showMessage(f"Saved {len(written)} animation(s)")

    def closeEvent(self, event):
        """Handle window close with unsaved ROI check."""
        rois = self.session.rois
        if rois.modified and len(rois) > 0:
            reply = QMessageBox.question(
                self,
                "Unsaved ROIs",
                "The ROIs have changed since they were last exported.\n\nSave before closing?",
                QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel,
                QMessageBox.Save
            )

            if reply == QMessageBox.Save:
                saved = self._export_rois() if self.namespace is not None else self._save_rois()
                if saved:
                    event.accept()
                else:
                    event.ignore()
            elif reply == QMessageBox.Discard:
                event.accept()
            else:
                event.ignore()
        else:
            event.accept()
        if event.isAccepted() and self._plot_window is not None:
            self._plot_window.close()
