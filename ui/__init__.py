"""User interface components."""

from .slice_view import SliceView
from .controls import ControlsWidget
from .toolbar import ToolBar
from .roi_plot import ROIPlotWindow
from .main_window import MainWindow

__all__ = ["SliceView", "ControlsWidget", "ToolBar", "ROIPlotWindow", "MainWindow"]
