import numpy as np
import pytest

from core.compositor import (
    apply_colormap,
    composite,
    paint_roi,
    project_phasor,
    region_perimeter,
    to_color_index,
    visibility_mask,
)

GRAY2 = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])
RED = np.array([[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
BLUE = np.array([[0.0, 0.0, 1.0], [0.0, 0.0, 1.0]])


def test_range_ends_map_to_first_and_last_color():
    index = to_color_index(np.array([[-3.0, 7.0]]), (-3.0, 7.0), 256)
    assert index[0, 0] == 0
    assert index[0, 1] == 255


def test_values_outside_range_are_clamped():
    index = to_color_index(np.array([-100.0, 100.0]), (0.0, 1.0), 10)
    assert list(index) == [0, 9]


def test_non_finite_values_map_to_index_zero():
    index = to_color_index(np.array([np.nan, np.inf, -np.inf]), (0.0, 1.0), 10)
    assert list(index) == [0, 0, 0]


def test_index_rounds_half_up():
    # 0.5 of the way between two entries of a 3-entry table
    index = to_color_index(np.array([0.25, 0.24]), (0.0, 1.0), 3)
    assert list(index) == [1, 0]


def test_two_entry_colormap_example():
    image = apply_colormap(np.array([[0.0, 10.0], [20.0, 30.0]]), (0.0, 30.0), GRAY2)
    np.testing.assert_array_equal(image[0, 0], [0, 0, 0])
    np.testing.assert_array_equal(image[0, 1], [0, 0, 0])
    np.testing.assert_array_equal(image[1, 0], [1, 1, 1])
    np.testing.assert_array_equal(image[1, 1], [1, 1, 1])


def test_projection_at_zero_phase_is_real_part():
    overlay = np.array([[1 + 1j, -2 + 0.5j]])
    np.testing.assert_allclose(project_phasor(overlay, 0.0), overlay.real)


def test_projection_repeats_after_full_cycle():
    overlay = np.array([[3 * np.exp(0.7j), 1 - 2j]])
    np.testing.assert_allclose(project_phasor(overlay, 2 * np.pi), project_phasor(overlay, 0.0), atol=1e-12)


def test_projection_rotates_five_times_per_cycle():
    overlay = np.array([1.0 + 0j])
    # 5 * (2*pi / 10) = pi, so the projection flips sign
    np.testing.assert_allclose(project_phasor(overlay, 2 * np.pi / 10), [-1.0], atol=1e-12)


def test_visibility_depends_on_magnitude_only():
    overlay = np.array([2.0 + 0j, -2.0 + 0j, 0 + 2j, 5.0 + 0j])
    mask = visibility_mask(overlay, (1.0, 3.0))
    assert list(mask) == [True, True, True, False]


def test_without_overlay_composite_is_background():
    background = np.array([[0.0, 30.0]])
    image = composite(background, (0.0, 30.0), GRAY2)
    np.testing.assert_array_equal(image, apply_colormap(background, (0.0, 30.0), GRAY2))


def test_zero_alpha_shows_background_only():
    background = np.array([[0.0, 30.0]])
    overlay = np.array([[1 + 1j, 2 - 1j]])
    image = composite(background, (0.0, 30.0), GRAY2, overlay, (-1.0, 1.0), RED, alpha=0.0)
    np.testing.assert_array_equal(image, apply_colormap(background, (0.0, 30.0), GRAY2))


def test_full_alpha_shows_overlay_only():
    background = np.array([[0.0, 30.0]])
    overlay = np.array([[1 + 1j, 2 - 1j]])
    image = composite(background, (0.0, 30.0), GRAY2, overlay, (-1.0, 1.0), BLUE, alpha=1.0)
    np.testing.assert_array_equal(image, np.broadcast_to([0.0, 0.0, 1.0], image.shape))


def test_masked_out_pixels_keep_background():
    background = np.array([[30.0, 30.0]])
    overlay = np.array([[0.5 + 0j, 2.0 + 0j]])
    image = composite(
        background, (0.0, 30.0), GRAY2, overlay, (-1.0, 1.0), BLUE,
        mask_range=(1.0, 3.0), alpha=1.0,
    )
    np.testing.assert_array_equal(image[0, 0], [1, 1, 1])
    np.testing.assert_array_equal(image[0, 1], [0, 0, 1])


def test_non_finite_overlay_is_transparent():
    background = np.array([[30.0]])
    overlay = np.array([[complex(np.nan, 0)]])
    image = composite(background, (0.0, 30.0), GRAY2, overlay, (-1.0, 1.0), BLUE, alpha=1.0)
    np.testing.assert_array_equal(image[0, 0], [1, 1, 1])


def test_half_alpha_blends_linearly():
    background = np.array([[30.0]])
    overlay = np.array([[1.0 + 0j]])
    image = composite(background, (0.0, 30.0), GRAY2, overlay, (-1.0, 1.0), BLUE, alpha=0.5)
    np.testing.assert_allclose(image[0, 0], [0.5, 0.5, 1.0])


def test_perimeter_of_square():
    region = np.zeros((5, 5), dtype=bool)
    region[1:4, 1:4] = True
    perimeter = region_perimeter(region)
    assert perimeter.sum() == 8
    assert not perimeter[2, 2]


def test_region_touching_border_is_perimeter():
    region = np.ones((3, 3), dtype=bool)
    perimeter = region_perimeter(region)
    assert perimeter.sum() == 8
    assert not perimeter[1, 1]


def test_empty_region_has_no_perimeter():
    assert not region_perimeter(np.zeros((4, 4), dtype=bool)).any()


def test_paint_roi_marks_inside_red_and_edge_green():
    image = np.zeros((5, 5, 3))
    region = np.zeros((5, 5), dtype=bool)
    region[1:4, 1:4] = True
    painted = paint_roi(image, region)
    np.testing.assert_array_equal(painted[2, 2], [1, 0, 0])
    np.testing.assert_array_equal(painted[1, 1], [0, 1, 0])
    np.testing.assert_array_equal(painted[0, 0], [0, 0, 0])
    # Input is left untouched
    assert not image.any()


@pytest.mark.parametrize("phase", [0.0, 0.3, np.pi])
def test_composite_values_stay_in_unit_range(phase):
    rng = np.random.default_rng(0)
    background = rng.normal(size=(8, 8))
    overlay = rng.normal(size=(8, 8)) + 1j * rng.normal(size=(8, 8))
    table = rng.random((16, 3))
    image = composite(background, (-1.0, 1.0), table, overlay, (-1.0, 1.0), table, alpha=0.7, phase=phase)
    assert image.shape == (8, 8, 3)
    assert image.min() >= 0.0 and image.max() <= 1.0
