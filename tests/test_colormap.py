import logging

import numpy as np
import pytest

import config
from core.colormap import colormap_name, get_colormap, make_complex_map, make_map, validate_table


def test_make_map_is_linear_ramp():
    cmap = make_map((0, 0, 0), (1, 0.5, 0), 3)
    np.testing.assert_allclose(cmap, [[0, 0, 0], [0.5, 0.25, 0], [1, 0.5, 0]])


def test_doppler_map_runs_cyan_to_yellow_through_black():
    cmap = make_complex_map(10, 256)
    assert cmap.shape == (256, 3)
    np.testing.assert_array_equal(cmap[0], [0, 1, 1])
    np.testing.assert_array_equal(cmap[-1], [1, 1, 0])
    np.testing.assert_array_equal(cmap[127], [0, 0, 0])


def test_mayo_map_starts_purple_and_ends_red():
    cmap = make_complex_map(2, 256)
    np.testing.assert_array_equal(cmap[0], [0.5, 0, 0.5])
    np.testing.assert_array_equal(cmap[-1], [1, 0, 0])


def test_unknown_complex_mode_is_clipped_sinusoid():
    cmap = make_complex_map(99, 64)
    assert cmap.shape == (64, 3)
    assert cmap.min() >= 0.0 and cmap.max() <= 1.0


def test_named_matplotlib_colormap():
    cmap = get_colormap("gray", 256)
    assert cmap.shape == (256, 3)
    np.testing.assert_allclose(cmap[0], [0, 0, 0])
    np.testing.assert_allclose(cmap[-1], [1, 1, 1])


def test_names_are_case_insensitive():
    np.testing.assert_array_equal(get_colormap("Mayo"), get_colormap("mayo"))


def test_unknown_name_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="core.colormap"):
        cmap = get_colormap("no-such-map", default="custom")
    np.testing.assert_array_equal(cmap, make_complex_map(config.COMPLEX_MAP_MODES["custom"]))
    assert "not a valid colormap" in caplog.text


def test_explicit_table_is_used_as_is():
    table = [[0, 0, 0], [0.2, 0.4, 0.6], [1, 1, 1]]
    np.testing.assert_array_equal(get_colormap(table), np.asarray(table, dtype=float))


@pytest.mark.parametrize("table", [
    [[0, 0], [1, 1]],
    [[0, 0, 2]],
    [[0, 0, -0.1]],
    np.zeros((0, 3)),
])
def test_invalid_tables_are_rejected(table):
    with pytest.raises(ValueError):
        validate_table(table)


def test_colormap_name():
    assert colormap_name("Jet") == "jet"
    assert colormap_name(np.zeros((4, 3))) == "custom"
    assert colormap_name("bogus", default="gray") == "gray"
