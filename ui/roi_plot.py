"""Window plotting ROI mean and standard deviation per frame."""

from typing import List, Optional, Sequence, Tuple

import numpy as np
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.backends.backend_qtagg import NavigationToolbar2QT as NavigationToolbar
from matplotlib.figure import Figure

from PySide6.QtWidgets import QVBoxLayout, QWidget

from core.roi import roi_colors


class ROIPlotWindow(QWidget):
    """Separate window with one error-bar curve per ROI."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("ROI Curves")
        self.resize(600, 400)

        layout = QVBoxLayout(self)
        self.figure = Figure(figsize=(6, 4), dpi=100)
        self.canvas = FigureCanvas(self.figure)
        self.toolbar = NavigationToolbar(self.canvas, self)
        layout.addWidget(self.toolbar)
        layout.addWidget(self.canvas)

        self.ax = self.figure.add_subplot(111)

    def plot(
        self,
        names: Sequence[str],
        curves: List[Tuple[np.ndarray, np.ndarray]],
        rng: Optional[np.random.Generator] = None,
    ):
        """Draw mean +/- std against frame number for each ROI.

        Args:
            names: ROI names, in the order of `curves`
            curves: (mean, std) arrays per ROI
            rng: Random generator for the curve colors
        """
        self.ax.clear()
        colors = roi_colors(len(curves), rng)
        for name, (mean, std), color in zip(names, curves, colors):
            frames = np.arange(1, len(mean) + 1)
            self.ax.errorbar(frames, mean, yerr=std, color=color, marker="o", capsize=3, label=name)
        self.ax.set_xlabel("Frame")
        self.ax.set_ylabel("Mean")
        if curves:
            self.ax.legend()
        self.ax.grid(True, alpha=0.3)
        self.canvas.draw_idle()
