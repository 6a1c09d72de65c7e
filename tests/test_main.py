import numpy as np
import pytest

import config
from main import build_parser, load_overlay, main, options_from_args, overlay_displacement


def test_parser_defaults():
    args = build_parser().parse_args(["scan.nii.gz"])
    options = options_from_args(args)
    assert args.overlay is None
    assert options.over_map == config.DEFAULT_OVER_MAP
    assert options.mask_range == config.DEFAULT_MASK_RANGE
    assert options.pixel_size is None


def test_parser_options():
    args = build_parser().parse_args([
        "bg.npy", "ov.npy", "--back-range", "0", "100", "--mask-range", "1", "5",
        "--pixel-size", "1", "1", "2.5", "--alpha", "0.3", "--time", "0.5",
    ])
    options = options_from_args(args)
    assert options.back_range == (0.0, 100.0)
    assert options.mask_range == (1.0, 5.0)
    assert options.pixel_size == (1.0, 1.0, 2.5)
    assert options.alpha == 0.3


def test_invalid_range_is_rejected():
    args = build_parser().parse_args(["bg.npy", "--over-range", "3", "1"])
    with pytest.raises(ValueError):
        options_from_args(args)


def test_missing_file_exits_non_zero(tmp_path):
    assert main([str(tmp_path / "missing.nii.gz")]) == 1


def test_load_overlay_combines_real_and_imaginary(tmp_path):
    real = np.ones((2, 3, 4))
    np.save(tmp_path / "re.npy", real)
    np.save(tmp_path / "im.npy", 2 * real)
    overlay = load_overlay(str(tmp_path / "re.npy"), str(tmp_path / "im.npy"))
    assert overlay.is_complex
    assert overlay.array[0, 0, 0] == 1 + 2j


def test_overlay_displacement_opens_window(app, background, overlay):
    namespace = {}
    window = overlay_displacement(
        background, overlay, namespace=namespace, block=False, overRange=[-1, 1], title="Phasor"
    )
    try:
        assert window.windowTitle() == "Phasor"
        assert window.namespace is namespace
        assert window.session.over_range == (-1.0, 1.0)
    finally:
        window.close()


def test_overlay_displacement_rejects_bad_options(background):
    with pytest.raises(ValueError):
        overlay_displacement(background, alpha=2.0, block=False)
