"""Single plane slice viewer showing a composite image."""

from typing import Sequence, Tuple

import numpy as np

from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGraphicsView, QGraphicsScene,
    QGraphicsPixmapItem, QGraphicsLineItem, QGraphicsPathItem, QSlider,
    QLabel, QSizePolicy
)
from PySide6.QtGui import (
    QImage, QPixmap, QPainter, QColor, QPen, QBrush, QPainterPath,
    QTransform, QWheelEvent, QMouseEvent
)
from PySide6.QtCore import Qt, Signal, QPointF, QRectF

import config
from core.export import to_uint8


class SliceView(QWidget):
    """Single plane viewer with slice slider, crosshairs and ROI preview.

    Displays one plane (axial, coronal or sagittal) as an RGB composite
    rendered elsewhere. Pixels are scaled by the voxel aspect ratio. Mouse
    positions are reported in slice pixel coordinates (column, row).
    """

    # Signals
    slice_changed = Signal(str, int)  # plane, index
    scrolled = Signal(str, int)  # plane, wheel steps
    mouse_pressed = Signal(str, int, QPointF, object)  # plane, slice_idx, image_pos, event
    mouse_moved = Signal(str, int, QPointF, object)  # plane, slice_idx, image_pos, event
    mouse_released = Signal(str, int, QPointF, object)  # plane, slice_idx, image_pos, event

    def __init__(self, plane: str, parent=None):
        """Initialize slice view.

        Args:
            plane: One of 'axial', 'coronal', 'sagittal'
        """
        super().__init__(parent)
        self.plane = plane
        self.current_slice = 0
        self.max_slice = 0
        self.active = False
        self._image_shape: Tuple[int, int] = (0, 0)

        self._setup_ui()

    def _setup_ui(self):
        """Create the UI layout."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(2, 2, 2, 2)
        layout.setSpacing(2)

        self.title_label = QLabel(config.PLANE_TITLES.get(self.plane, self.plane.upper()))
        self.title_label.setAlignment(Qt.AlignCenter)
        self.title_label.setStyleSheet("font-weight: bold;")

        self.scene = QGraphicsScene()
        self.view = QGraphicsView(self.scene)
        self.view.setRenderHint(QPainter.Antialiasing)
        self.view.setDragMode(QGraphicsView.NoDrag)
        self.view.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.view.setResizeAnchor(QGraphicsView.AnchorViewCenter)
        self.view.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.view.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.view.setBackgroundBrush(QBrush(QColor(*config.VIEW_BACKGROUND_COLOR)))
        self.view.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.view.setMouseTracking(True)
        self.view.viewport().installEventFilter(self)
        self._update_border()

        # Crosshairs and ROI preview are children of the image so they share
        # its pixel coordinates and aspect scaling
        self.image_item = QGraphicsPixmapItem()
        self.scene.addItem(self.image_item)

        crosshair_pen = QPen(QColor(*config.CROSSHAIR_COLOR), 1)
        crosshair_pen.setCosmetic(True)
        self.h_line = QGraphicsLineItem(self.image_item)
        self.v_line = QGraphicsLineItem(self.image_item)
        for line in (self.h_line, self.v_line):
            line.setPen(crosshair_pen)
            line.setZValue(1)

        preview_pen = QPen(QColor(*config.ROI_CURVE_COLOR), 1)
        preview_pen.setCosmetic(True)
        self.roi_preview_item = QGraphicsPathItem(self.image_item)
        self.roi_preview_item.setPen(preview_pen)
        self.roi_preview_item.setZValue(2)

        slider_layout = QHBoxLayout()
        self.slider = QSlider(Qt.Horizontal)
        self.slider.setMinimum(0)
        self.slider.valueChanged.connect(self._on_slider_changed)

        self.slice_label = QLabel("0 / 0")
        self.slice_label.setMinimumWidth(60)

        slider_layout.addWidget(self.slider)
        slider_layout.addWidget(self.slice_label)

        layout.addWidget(self.title_label)
        layout.addWidget(self.view, stretch=1)
        layout.addLayout(slider_layout)

    def eventFilter(self, obj, event):
        """Handle mouse events on the viewport."""
        if obj == self.view.viewport():
            if event.type() == event.Type.MouseButtonPress:
                self._handle_mouse_press(event)
                return True
            elif event.type() == event.Type.MouseMove:
                self._handle_mouse_move(event)
                return True
            elif event.type() == event.Type.MouseButtonRelease:
                self._handle_mouse_release(event)
                return True
            elif event.type() == event.Type.Wheel:
                self._handle_wheel(event)
                return True
        return super().eventFilter(obj, event)

    def _image_pos(self, event: QMouseEvent) -> QPointF:
        """Map a viewport event position to slice pixel coordinates."""
        scene_pos = self.view.mapToScene(event.position().toPoint())
        return self.image_item.mapFromScene(scene_pos)

    def _handle_mouse_press(self, event: QMouseEvent):
        pos = self._image_pos(event)
        if event.button() != Qt.LeftButton or self.is_in_image_bounds(pos):
            self.mouse_pressed.emit(self.plane, self.current_slice, pos, event)

    def _handle_mouse_move(self, event: QMouseEvent):
        self.mouse_moved.emit(self.plane, self.current_slice, self._image_pos(event), event)

    def _handle_mouse_release(self, event: QMouseEvent):
        self.mouse_released.emit(self.plane, self.current_slice, self._image_pos(event), event)

    def _handle_wheel(self, event: QWheelEvent):
        """Zoom with Ctrl+Wheel, otherwise scroll slices."""
        if event.modifiers() == Qt.ControlModifier:
            factor = 1.15 if event.angleDelta().y() > 0 else 1 / 1.15
            self.view.scale(factor, factor)
        elif event.angleDelta().y() != 0:
            # Scrolling down (towards the user) moves to higher slice indices
            steps = -1 if event.angleDelta().y() > 0 else 1
            self.scrolled.emit(self.plane, steps)

    def is_in_image_bounds(self, pos: QPointF) -> bool:
        """Check if an image position lies on the slice."""
        height, width = self._image_shape
        return QRectF(0, 0, width, height).contains(pos)

    def _on_slider_changed(self, value: int):
        self.current_slice = value
        self.slice_label.setText(f"{value} / {self.max_slice}")
        self.slice_changed.emit(self.plane, value)

    def set_slice_range(self, max_slice: int):
        """Set the highest slice index offered by the slider."""
        self.max_slice = max_slice
        self.slider.blockSignals(True)
        self.slider.setMaximum(max_slice)
        self.slider.blockSignals(False)

    def set_slice_index(self, index: int):
        """Set slice index without emitting `slice_changed`."""
        self.current_slice = index
        self.slider.blockSignals(True)
        self.slider.setValue(index)
        self.slider.blockSignals(False)
        self.slice_label.setText(f"{index} / {self.max_slice}")

    def get_slice_index(self) -> int:
        return self.current_slice

    def set_aspect(self, col_scale: float, row_scale: float):
        """Scale displayed pixels to the voxel aspect ratio."""
        self.image_item.setTransform(QTransform.fromScale(col_scale, row_scale))
        self.scene.setSceneRect(self.image_item.sceneBoundingRect())
        self.fit_view()

    def set_image(self, image: np.ndarray):
        """Display an (H, W, 3) float RGB composite."""
        rgb = np.ascontiguousarray(to_uint8(image))
        h, w = rgb.shape[:2]
        first_image = self._image_shape != (h, w)
        self._image_shape = (h, w)
        qimage = QImage(rgb.data, w, h, w * 3, QImage.Format_RGB888)
        self.image_item.setPixmap(QPixmap.fromImage(qimage.copy()))
        if first_image:
            self.scene.setSceneRect(self.image_item.sceneBoundingRect())
            self.fit_view()

    def set_crosshair(self, col: int, row: int, visible: bool = True):
        """Draw crosshairs through the centre of pixel (col, row)."""
        height, width = self._image_shape
        self.v_line.setLine(col + 0.5, 0, col + 0.5, height)
        self.h_line.setLine(0, row + 0.5, width, row + 0.5)
        self.v_line.setVisible(visible)
        self.h_line.setVisible(visible)

    def set_active(self, active: bool):
        """Highlight the view border when active."""
        self.active = active
        self._update_border()

    def _update_border(self):
        color = config.ACTIVE_BORDER_COLOR if self.active else config.VIEW_BORDER_COLOR
        self.view.setStyleSheet(f"border: 2px solid rgb{tuple(color)};")

    def set_roi_preview(self, points: Sequence[Tuple[float, float]]):
        """Show the polygon being drawn."""
        path = QPainterPath()
        if points:
            path.moveTo(QPointF(*points[0]))
            for pt in points[1:]:
                path.lineTo(QPointF(*pt))
        self.roi_preview_item.setPath(path)

    def clear_roi_preview(self):
        self.roi_preview_item.setPath(QPainterPath())

    def fit_view(self):
        """Fit the image to the view."""
        if not self.image_item.pixmap().isNull():
            self.view.fitInView(self.image_item, Qt.KeepAspectRatio)

    def resizeEvent(self, event):
        """Handle resize to maintain fit."""
        super().resizeEvent(event)
        self.fit_view()
