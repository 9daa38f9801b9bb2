# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import numpy as np
import pytest

from swatch_colorengine import (
    REF_WHITE_C,
    REF_WHITE_D65,
    XY_WHITE_C,
    ChromaticAdaptation,
    ColorMetrics,
    ColorSpaceEngine,
    set_strict_ieee,
    white_from_xy,
)


class TestColorSpaceEngine:
    def test_srgb_white(self):
        np.testing.assert_allclose(ColorSpaceEngine.srgb_to_xyz(np.ones(3)), REF_WHITE_D65, atol=1e-4)

    def test_batch_shape(self):
        rgb = np.random.default_rng(7).random((5, 3))
        assert ColorSpaceEngine.srgb_to_xyz(rgb).shape == (5, 3)

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            ColorSpaceEngine.xyz_to_lab(np.ones(2))

    def test_lab_of_white(self):
        np.testing.assert_allclose(ColorSpaceEngine.xyz_to_lab(REF_WHITE_D65), [100.0, 0.0, 0.0], atol=1e-6)

    def test_black_chromaticity(self):
        x, y, Y = ColorSpaceEngine.xyz_to_xyY(np.zeros(3))
        assert (x, y, Y) == pytest.approx((*XY_WHITE_C, 0.0))
        x, y, _ = ColorSpaceEngine.xyz_to_xyY(np.zeros(3), (0.3127, 0.3290))
        assert (x, y) == pytest.approx((0.3127, 0.3290))

    def test_xyY_inverse(self):
        xyz = np.array([0.2, 0.3, 0.4])
        np.testing.assert_allclose(ColorSpaceEngine.xyY_to_xyz(ColorSpaceEngine.xyz_to_xyY(xyz)), xyz)

    def test_lch(self):
        L, C, h = ColorSpaceEngine.lab_to_lch(np.array([50.0, 0.0, 20.0]))
        assert (L, C, h) == pytest.approx((50.0, 20.0, 90.0))
        np.testing.assert_allclose(ColorSpaceEngine.lch_to_lab(np.array([50.0, 20.0, 90.0])),
                                   [50.0, 0.0, 20.0], atol=1e-9)

    def test_srgb_gamut(self):
        assert ColorSpaceEngine.srgb_in_gamut(0.5 * REF_WHITE_D65)
        assert not ColorSpaceEngine.srgb_in_gamut(np.array([0.0, 1.0, 0.0]))


class TestAdaptation:
    def test_white_maps_to_white(self):
        np.testing.assert_allclose(
            ChromaticAdaptation.adapt(REF_WHITE_D65, REF_WHITE_D65, REF_WHITE_C), REF_WHITE_C, atol=1e-9)

    def test_round_trip_is_identity(self):
        xyz = np.array([0.3, 0.25, 0.1])
        there = ChromaticAdaptation.adapt(xyz, REF_WHITE_C, REF_WHITE_D65, clip_negative=False)
        back = ChromaticAdaptation.adapt(there, REF_WHITE_D65, REF_WHITE_C, clip_negative=False)
        np.testing.assert_allclose(back, xyz, atol=1e-9)

    def test_white_from_xy(self):
        np.testing.assert_allclose(white_from_xy(*XY_WHITE_C), REF_WHITE_C)
        with pytest.raises(ValueError):
            white_from_xy(0.3, 0.0)


class TestMetrics:
    def test_delta_e_2000_reference_pair(self):
        de = ColorMetrics.delta_E_2000(np.array([50.0, 2.6772, -79.7751]),
                                       np.array([50.0, 0.0, -82.7485]))
        assert de == pytest.approx(2.0425, abs=1e-4)

    def test_identical(self):
        lab = np.array([[60.0, 10.0, -5.0], [20.0, 0.0, 0.0]])
        np.testing.assert_allclose(ColorMetrics.delta_E_2000(lab, lab), 0.0, atol=1e-9)

    def test_broadcast(self):
        res = ColorMetrics.delta_E_2000(np.array([50.0, 0.0, 0.0]), np.array([[50.0, 0.0, 0.0], [60.0, 0.0, 0.0]]))
        assert res.shape == (2,)
        assert res[0] == pytest.approx(0.0, abs=1e-9)

    def test_textiles_weights_lightness(self):
        a, b = np.array([50.0, 0.0, 0.0]), np.array([60.0, 0.0, 0.0])
        assert ColorMetrics.delta_E_2000(a, b, textiles=True) == pytest.approx(
            0.5 * ColorMetrics.delta_E_2000(a, b))

    def test_xyY_variant(self):
        white = white_from_xy(*XY_WHITE_C, 100.0)
        de = ColorMetrics.delta_E_2000_xyY(np.array([0.31, 0.32, 20.0]), np.array([0.31, 0.32, 20.0]), white)
        assert de == pytest.approx(0.0, abs=1e-9)


def test_lab_inverse():
    xyz = np.array([[0.2, 0.3, 0.4], [0.001, 0.002, 0.001]])
    lab = ColorSpaceEngine.xyz_to_lab(xyz, REF_WHITE_C)
    np.testing.assert_allclose(ColorSpaceEngine.lab_to_xyz(lab, REF_WHITE_C), xyz, atol=1e-9)


def test_srgb_to_xyY():
    x, y, Y = ColorSpaceEngine.srgb_to_xyY(np.ones(3))
    assert (x, y) == pytest.approx((0.3127, 0.3290), abs=1e-4)
    assert Y == pytest.approx(1.0, abs=1e-4)


def test_strict_ieee_matches_fast_build():
    rgb = np.array([[0.02, 0.5, 0.9], [1.0, 0.0, 0.3]])
    fast = ColorSpaceEngine.srgb_to_xyz(rgb)
    set_strict_ieee(True)
    try:
        strict = ColorSpaceEngine.srgb_to_xyz(rgb)
    finally:
        set_strict_ieee(False)
    np.testing.assert_allclose(strict, fast, atol=1e-12)
