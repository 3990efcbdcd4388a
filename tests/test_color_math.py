"""Tests for color conversions."""

import numpy as np
import pytest

from color_math import (
    lab_distance, lab_distance_sq, lab_f, rgb_to_hex, rgb_to_hsv,
    rgb_to_lab, rgb_to_lab_tuple, srgb_to_linear,
)


def test_rgb_to_hex_extremes():
    assert rgb_to_hex(0, 0, 0) == "#000000"
    assert rgb_to_hex(255, 255, 255) == "#FFFFFF"


def test_rgb_to_hex_clamps_out_of_range():
    assert rgb_to_hex(300, -10, 128) == "#FF0080"


def test_rgb_to_hex_rounds_half_up():
    assert rgb_to_hex(0.5, 1.49, 254.5) == "#0101FF"


def test_srgb_to_linear_piecewise():
    assert srgb_to_linear(0.04045) == pytest.approx(0.04045 / 12.92)
    assert srgb_to_linear(1.0) == pytest.approx(1.0)
    assert srgb_to_linear(0.5) == pytest.approx(((0.5 + 0.055) / 1.055) ** 2.4)


def test_lab_f_linear_segment():
    delta = 6 / 29
    t = delta ** 3 / 2
    assert lab_f(t) == pytest.approx(t / (3 * delta * delta) + 4 / 29)
    assert lab_f(0.125) == pytest.approx(0.5)


def test_rgb_to_lab_reference_points():
    lab = rgb_to_lab(np.array([[0, 0, 0], [255, 255, 255]]))
    np.testing.assert_allclose(lab[0], [0.0, 0.0, 0.0], atol=1e-6)
    np.testing.assert_allclose(lab[1], [100.0, 0.0, 0.0], atol=0.1)


def test_rgb_to_lab_red():
    L, a, b = rgb_to_lab_tuple((255, 0, 0))
    assert L == pytest.approx(53.24, abs=0.05)
    assert a == pytest.approx(80.09, abs=0.1)
    assert b == pytest.approx(67.20, abs=0.1)


def test_rgb_to_lab_is_pure():
    assert rgb_to_lab_tuple((12, 200, 99)) == rgb_to_lab_tuple((12, 200, 99))


def test_lab_distance_sq():
    x = (53.2, 80.1, 67.2)
    assert lab_distance_sq(x, x) == 0
    assert lab_distance_sq((0, 0, 0), (1, 2, 2)) == 9
    assert lab_distance((0, 0, 0), (1, 2, 2)) == 3


def test_rgb_to_hsv_primaries():
    assert rgb_to_hsv((255, 0, 0)) == (0.0, 1.0, 1.0)
    h, s, v = rgb_to_hsv((0, 255, 0))
    assert h == pytest.approx(120)
    h, s, v = rgb_to_hsv((0, 0, 255))
    assert h == pytest.approx(240)


def test_rgb_to_hsv_wraps_negative_hue():
    h, s, v = rgb_to_hsv((255, 0, 128))
    assert 300 < h < 360
    assert s == 1.0


def test_rgb_to_hsv_achromatic():
    assert rgb_to_hsv((128, 128, 128))[:2] == (0.0, 0.0)
    assert rgb_to_hsv((0, 0, 0)) == (0.0, 0.0, 0.0)
