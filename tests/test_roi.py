import numpy as np
import pytest

from core.roi import ROISet, roi_colors
from core.volume import VolumeData


@pytest.fixture
def rois():
    return ROISet(shape=(4, 5, 6))


def test_new_roi_names_fill_gaps(rois):
    rois.new_roi()
    rois.new_roi()
    rois.new_roi()
    rois.delete(1)
    assert rois.names == ["ROI 1", "ROI 3"]
    assert rois.new_roi().name == "ROI 2"


def test_new_roi_is_selected_and_empty(rois):
    roi = rois.new_roi()
    assert rois.current is roi
    assert roi.mask.shape == (4, 5, 6)
    assert not roi.has_data()
    assert rois.modified


def test_delete_selects_previous(rois):
    rois.new_roi()
    rois.new_roi()
    rois.delete()
    assert rois.selected == 0
    rois.delete()
    assert rois.selected == -1
    assert rois.current is None


def test_select_out_of_range(rois):
    rois.new_roi()
    with pytest.raises(IndexError):
        rois.select(1)
    rois.select(-1)
    assert rois.current is None


def test_stack_has_trailing_roi_axis(rois):
    assert rois.stack().shape == (4, 5, 6, 0)
    rois.new_roi().mask[0, 0, 0] = True
    rois.new_roi()
    stacked = rois.stack()
    assert stacked.shape == (4, 5, 6, 2)
    assert stacked.dtype == bool
    assert stacked[0, 0, 0, 0] and not stacked[0, 0, 0, 1]


def test_extend_with_3d_and_4d_masks(rois):
    rois.extend(np.ones((4, 5, 6), dtype=bool))
    rois.extend(np.zeros((4, 5, 6, 2), dtype=bool))
    assert rois.names == ["ROI 1", "ROI 2", "ROI 3"]
    assert rois.selected == 2


@pytest.mark.parametrize("array", [
    np.ones((4, 5, 6)),
    np.ones((4, 5, 7), dtype=bool),
    np.ones((4, 5), dtype=bool),
    [[True]],
])
def test_extend_rejects_unsuitable_arrays(rois, array):
    assert not rois.accepts(array)
    with pytest.raises(ValueError):
        rois.extend(array)


def test_2d_slices_follow_planes(rois):
    roi = rois.new_roi()
    roi.mask[1, 2, 3] = True
    assert roi.get_2d_slice("axial", 1)[2, 3]
    assert roi.get_2d_slice("coronal", 2)[1, 3]
    assert roi.get_2d_slice("sagittal", 3)[1, 2]


def test_time_curves_per_frame(rois, background):
    roi = rois.new_roi()
    roi.mask[0, 0, 0:2] = True
    curves = rois.time_curves(VolumeData(background))
    mean, std = curves[0]
    # Voxels hold 0 and 1 in frame 0, shifted by one per frame
    np.testing.assert_allclose(mean, [0.5, 1.5, 2.5])
    np.testing.assert_allclose(std, np.full(3, np.std([0, 1], ddof=1)))


def test_single_voxel_has_zero_deviation(rois, background):
    rois.new_roi().mask[1, 1, 1] = True
    mean, std = rois.time_curves(VolumeData(background))[0]
    assert mean.shape == (3,)
    assert not std.any()


def test_complex_curves_use_magnitude(rois, overlay):
    rois.new_roi().mask[0, 0, 0:3] = True
    mean, _ = rois.time_curves(VolumeData(-overlay))[0]
    np.testing.assert_allclose(mean, [2.0, 2.0, 2.0])


def test_roi_colors_are_valid_rgb():
    colors = roi_colors(5, np.random.default_rng(1))
    assert colors.shape == (5, 3)
    assert colors.min() >= 0 and colors.max() <= 1
    assert roi_colors(0).shape == (0, 3)
