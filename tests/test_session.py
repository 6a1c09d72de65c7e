import numpy as np
import pytest

import config
from core.session import Session, ViewerOptions
from core.volume import VolumeData


@pytest.fixture
def session(background, overlay):
    return Session(background, overlay, ViewerOptions(over_range=(-2.0, 2.0)))


class TestViewerOptions:

    def test_defaults(self):
        options = ViewerOptions.from_kwargs()
        assert options.alpha == config.DEFAULT_ALPHA
        assert options.back_map == "gray"
        assert options.over_map == "hot"
        assert options.mask_range == (-np.inf, np.inf)

    def test_camel_case_aliases(self):
        options = ViewerOptions.from_kwargs(backRange=[0, 10], pixelSize=[1, 1, 2])
        assert options.back_range == (0.0, 10.0)
        assert options.pixel_size == (1.0, 1.0, 2.0)

    @pytest.mark.parametrize("kwargs", [
        {"back_range": (5, 5)},
        {"over_range": (2, 1)},
        {"mask_range": (0, 1, 2)},
        {"alpha": 1.5},
        {"time": -0.1},
        {"pixel_size": (1, 0, 1)},
        {"pixel_size": (1, 1)},
        {"colour": "red"},
    ])
    def test_invalid_options(self, kwargs):
        with pytest.raises(ValueError):
            ViewerOptions.from_kwargs(**kwargs)


class TestSessionSetup:

    def test_cursor_starts_at_centre(self, session):
        assert session.cursor == (1, 2, 2)
        assert session.active_view == "axial"

    def test_ranges_estimated_from_data(self, background):
        session = Session(background)
        assert session.back_range == (0.0, float(background.max()))
        assert session.over_range is None
        assert not session.has_overlay

    def test_overlay_shape_must_match(self, background):
        with pytest.raises(ValueError):
            Session(background, np.zeros((4, 5, 7), dtype=complex))

    def test_complex_background_uses_real_part(self, overlay):
        session = Session(overlay * (1 + 1j))
        assert not session.background.is_complex

    def test_pixel_size_from_file_spacing(self, background):
        volume = VolumeData(background, spacing=(3.0, 2.0, 1.0))
        assert Session(volume).pixel_size == (1.0, 2.0, 3.0)

    def test_explicit_pixel_size_wins(self, background):
        volume = VolumeData(background, spacing=(3.0, 2.0, 1.0))
        session = Session(volume, options=ViewerOptions(pixel_size=(1, 1, 1)))
        assert session.pixel_size == (1.0, 1.0, 1.0)

    def test_initial_time_sets_phase(self, background, overlay):
        session = Session(background, overlay, ViewerOptions(time=0.25))
        assert session.phase == pytest.approx(np.pi / 2)


class TestRanges:

    def test_upper_limit_must_stay_above_lower(self, session):
        lo, hi = session.back_range
        assert session.set_range("background", 1, lo - 1) == hi
        assert session.set_range("background", 1, hi + 10) == hi + 10

    def test_lower_limit_must_stay_below_upper(self, session):
        assert session.set_range("overlay", 0, 3.0) == -2.0
        assert session.set_range("overlay", 0, -1.0) == -1.0
        assert session.over_range == (-1.0, 2.0)

    def test_nan_is_ignored(self, session):
        before = session.mask_range
        session.set_range("mask", 0, float("nan"))
        assert session.mask_range == before

    def test_unknown_range(self, session):
        with pytest.raises(ValueError):
            session.set_range("gamma", 0, 1.0)

    def test_drag_contrast_moves_range(self, session):
        assert session.drag_contrast("overlay", 10, -5)
        # width 4: 10 px -> +0.4 on lo, -5 px -> -0.2 on hi
        np.testing.assert_allclose(session.over_range, (-1.6, 1.8))

    def test_drag_contrast_cannot_invert_range(self, session):
        assert not session.drag_contrast("overlay", 200, 0)
        assert session.over_range == (-2.0, 2.0)


class TestNavigation:

    def test_scroll_clamps(self, session):
        assert session.scroll(1)
        assert session.cursor[0] == 2
        assert session.scroll(10)
        assert session.cursor[0] == 3
        assert not session.scroll(1)

    def test_first_click_only_activates(self, session):
        planes = session.click("coronal", 5, 0)
        assert session.active_view == "coronal"
        assert set(planes) == set(config.PLANES)
        assert session.cursor == (1, 2, 2)

    def test_click_on_active_view_moves_cursor(self, session):
        session.click("coronal", 0, 0)
        planes = session.click("coronal", 5.7, 0.2)
        # Coronal shows x along columns and z along rows
        assert session.cursor == (0, 2, 5)
        # The coronal slice itself is unchanged, only its crosshair moves
        assert set(planes) == {"axial", "sagittal"}

    def test_click_on_same_voxel_redraws_nothing(self, session):
        session.click("coronal", 0, 0)
        session.click("coronal", 3, 1)
        assert session.click("coronal", 3.4, 1.9) == []

    def test_cursor_is_clamped(self, session):
        session.move_cursor("axial", 100, -3)
        assert session.cursor == (1, 0, 5)

    def test_move_cursor_reports_changed_slices(self, session):
        # Moving along x only changes the sagittal slice
        assert session.move_cursor("axial", 4, 2) == ["sagittal"]

    def test_change_frame(self, session):
        assert session.change_frame("overlay", -np.inf)
        assert session.overlay.current_frame == 0
        assert session.background.current_frame == 2

    def test_aspect_ratio(self, session):
        session.set_pixel_size((1.0, 1.0, 2.0))
        assert session.aspect_ratio == (2.0, 2.0, 1.0)
        assert session.slice_aspect("axial") == (2.0, 2.0)
        assert session.slice_aspect("coronal") == (2.0, 1.0)
        assert session.slice_aspect("sagittal") == (2.0, 1.0)


class TestRendering:

    def test_render_shapes(self, session):
        images = session.render_all()
        assert images["axial"].shape == (5, 6, 3)
        assert images["coronal"].shape == (4, 6, 3)
        assert images["sagittal"].shape == (4, 5, 3)

    def test_render_at_time_keeps_phase(self, session):
        session.set_time(0.1)
        phase = session.phase
        session.render_at_time(0.5)
        assert session.phase == phase

    def test_full_cycle_renders_like_start(self, session):
        np.testing.assert_allclose(
            session.render_at_time(1.0)["axial"], session.render_at_time(0.0)["axial"]
        )

    def test_unknown_colormap_falls_back(self, session):
        session.set_colormap("overlay", "no-such-map")
        assert session.over_map_name == config.FALLBACK_OVER_MAP
        session.set_colormap("background", "jet")
        assert session.back_map_name == "jet"

    def test_selected_roi_is_painted(self, session):
        session.set_alpha(0.0)
        session.set_roi_mode(config.ROI_ADD)
        session.rois.current.mask[1, :, :] = True
        image = session.render("axial")
        assert (image[1:-1, 1:-1, 0] == 1.0).all()
        np.testing.assert_array_equal(image[0, 0], config.ROI_PERIMETER_COLOR)


class TestROIEditing:

    def test_add_mode_creates_roi(self, session):
        assert session.set_roi_mode(config.ROI_ADD) == config.ROI_ADD
        assert session.rois.names == ["ROI 1"]

    def test_remove_mode_needs_selection(self, session):
        assert session.set_roi_mode(config.ROI_REMOVE) == config.ROI_OFF

    def test_finish_roi_adds_then_removes(self, session):
        session.set_roi_mode(config.ROI_ADD)
        square = [(0, 0), (2, 0), (2, 2), (0, 2)]
        assert session.finish_roi("axial", square)
        mask = session.rois.current.mask
        assert mask[1, 0:3, 0:3].all()
        assert mask.sum() == 9

        session.set_roi_mode(config.ROI_REMOVE)
        session.finish_roi("axial", square)
        assert not mask.any()

    def test_finish_roi_does_nothing_when_off(self, session):
        assert not session.finish_roi("axial", [(0, 0), (2, 0), (2, 2)])

    def test_select_and_delete(self, session):
        session.set_roi_mode(config.ROI_ADD)
        session.rois.new_roi()
        session.select_roi(0)
        assert session.roi_mode == config.ROI_OFF
        assert session.delete_roi()
        assert session.rois.names == ["ROI 2"]
        assert session.rois.selected == -1
        assert not session.delete_roi()

    def test_roi_curves_use_overlay(self, session):
        session.set_roi_mode(config.ROI_ADD)
        session.rois.current.mask[0, 0, 0] = True
        (mean, std), = session.roi_curves()
        np.testing.assert_allclose(mean, [2.0, 2.0, 2.0])
