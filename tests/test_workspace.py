import numpy as np
import pytest

from core.roi import ROISet
from core.workspace import export_rois, import_rois, make_valid_name, roi_candidates

SHAPE = (4, 5, 6)


@pytest.fixture
def rois():
    rois = ROISet(shape=SHAPE)
    rois.new_roi().mask[0, 0, 0] = True
    rois.new_roi()
    return rois


@pytest.mark.parametrize("text,expected", [
    ("VOIs", "VOIs"),
    ("my rois", "my_rois"),
    ("2nd", "x2nd"),
    ("class", "class_"),
    ("   ", "x"),
])
def test_make_valid_name(text, expected):
    assert make_valid_name(text) == expected


def test_candidates_filter_by_dtype_and_shape():
    namespace = {
        "good3d": np.zeros(SHAPE, dtype=bool),
        "good4d": np.zeros(SHAPE + (2,), dtype=bool),
        "floats": np.zeros(SHAPE),
        "wrong_shape": np.zeros((4, 5, 7), dtype=bool),
        "_hidden": np.zeros(SHAPE, dtype=bool),
        "not_array": [1, 2, 3],
    }
    assert roi_candidates(namespace, SHAPE) == ["good3d", "good4d"]


def test_export_stores_stack(rois):
    namespace = {}
    name = export_rois(namespace, "VOIs", rois)
    assert name == "VOIs"
    assert namespace["VOIs"].shape == SHAPE + (2,)
    assert namespace["VOIs"][0, 0, 0, 0]
    assert not rois.modified


def test_export_refuses_to_overwrite(rois):
    namespace = {"VOIs": 1}
    with pytest.raises(ValueError):
        export_rois(namespace, "VOIs", rois)
    assert namespace["VOIs"] == 1
    export_rois(namespace, "VOIs", rois, overwrite=True)
    assert namespace["VOIs"].shape == SHAPE + (2,)


def test_export_empty_set():
    with pytest.raises(ValueError):
        export_rois({}, "VOIs", ROISet(shape=SHAPE))


def test_import_skips_unsuitable_variables(rois, caplog):
    namespace = {
        "masks": np.ones(SHAPE + (2,), dtype=bool),
        "floats": np.ones(SHAPE),
    }
    added = import_rois(namespace, ["masks", "floats", "missing"], rois)
    assert added == 2
    assert len(rois) == 4
    assert rois.names[2:] == ["ROI 3", "ROI 4"]
    assert "Skipping 'floats'" in caplog.text
