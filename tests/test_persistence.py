import json

import numpy as np

from core.persistence import load_rois, save_rois
from core.roi import ROISet

SHAPE = (4, 5, 6)


def test_save_and_load(tmp_path):
    rois = ROISet(shape=SHAPE)
    rois.new_roi().mask[1, 2, 3] = True
    rois.new_roi(name="liver")

    json_file, masks_file = save_rois(rois, tmp_path / "session" / "rois.npz")
    assert json_file.name == "rois.json"
    assert masks_file.exists()
    assert not rois.modified
    assert json.loads(json_file.read_text())["shape"] == list(SHAPE)

    restored = ROISet(shape=SHAPE)
    assert load_rois(tmp_path / "session" / "rois", restored) == 2
    assert restored.names == ["ROI 1", "liver"]
    assert restored[0].mask[1, 2, 3]
    assert restored[0].mask.sum() == 1
    assert restored.selected == 1


def test_loaded_duplicates_are_renamed(tmp_path):
    rois = ROISet(shape=SHAPE)
    rois.new_roi()
    save_rois(rois, tmp_path / "rois")

    assert load_rois(tmp_path / "rois", rois) == 1
    assert rois.names == ["ROI 1", "ROI 2"]


def test_mismatched_shapes_are_skipped(tmp_path):
    rois = ROISet(shape=SHAPE)
    rois.new_roi()
    save_rois(rois, tmp_path / "rois")

    other = ROISet(shape=(2, 2, 2))
    assert load_rois(tmp_path / "rois", other) == 0
    assert len(other) == 0
    assert not other.modified
