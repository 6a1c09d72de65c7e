import os

import numpy as np
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def app():
    """Fixture for QApplication."""
    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])


@pytest.fixture
def background():
    """4x5x6 ramp volume with 3 frames, shape (z, y, x, t)."""
    base = np.arange(4 * 5 * 6, dtype=np.float64).reshape(4, 5, 6)
    return np.stack([base, base + 1, base + 2], axis=-1)


@pytest.fixture
def overlay(background):
    """Complex overlay with magnitude 2 and zero phase everywhere."""
    return np.full(background.shape, 2.0 + 0.0j)
