# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import io
import warnings

import numpy as np
import pytest

from swatch_colorengine import XY_WHITE_C
from swatch_gamut import (
    OPTIMAL_COLOURS_SENTINEL,
    GamutBoundary,
    GamutSettings,
    MacAdamLimits,
    OptimalColours,
    macadam_limits,
)
from swatch_notation import HueFamily, MunsellSpec
from swatch_status import DataUnavailableError, InvalidSpecificationError

LISTING = f"""Optimal colours for a test illuminant.
Three colours at Y = 50.
{OPTIMAL_COLOURS_SENTINEL}
x y Y
0.50 0.35 50.0
0.20 0.50 50.0
0.20 0.15 50.0
0.30 0.30 50.0
"""


class TestOptimalColours:
    def test_from_text(self):
        colours = OptimalColours.from_text(io.StringIO(LISTING), "C")
        assert colours.xyY.shape == (4, 3)
        assert colours.xyY[0].tolist() == [0.50, 0.35, 50.0]
        assert not colours.xyY.flags.writeable

    def test_from_text_file(self, tmp_path):
        path = tmp_path / "optimal.txt"
        path.write_text(LISTING, encoding="utf-8")
        assert OptimalColours.from_text(path, "C").xyY.shape == (4, 3)

    def test_missing_sentinel(self):
        with pytest.raises(ValueError):
            OptimalColours.from_text(io.StringIO("x y Y\n0.3 0.3 50\n"), "C")

    def test_partial_triple(self):
        with pytest.raises(ValueError):
            OptimalColours.from_text(io.StringIO(LISTING + "0.3 0.3\n"), "C")

    def test_unknown_illuminant(self):
        with pytest.raises(DataUnavailableError):
            OptimalColours.from_colour_science("F2")


class TestMacAdamLimits:
    def test_synthetic_solid(self):
        limits = MacAdamLimits(OptimalColours.from_text(io.StringIO(LISTING), "C"))
        assert limits.contains(0.33, 0.33, 45.0)
        assert not limits.contains(0.70, 0.25, 45.0)
        assert not limits.contains(0.50, 0.35, 99.0)
        assert limits.points.shape == (6, 3)

    def test_illuminant_c(self):
        limits = macadam_limits("C")
        assert limits.contains(XY_WHITE_C[0], XY_WHITE_C[1], 50.0)
        assert not limits.contains(0.05, 0.05, 50.0)
        assert not limits.contains(0.6, 0.35, 90.0)
        assert not limits.contains(0.3, 0.0, 10.0)

    def test_contains_many(self):
        mask = macadam_limits("C").contains_many(
            np.array([[XY_WHITE_C[0], XY_WHITE_C[1], 50.0], [0.05, 0.05, 50.0]]))
        assert mask.tolist() == [True, False]

    def test_cached(self):
        assert macadam_limits("C") is macadam_limits("C")


class TestGamutBoundary:
    def test_lighter_reds_are_less_saturated(self, engine):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", RuntimeWarning)
            light = engine.gamut.max_chroma(5.0, HueFamily.R, 9)
            mid = engine.gamut.max_chroma(5.0, HueFamily.R, 5)
        assert 0.0 < light < mid

    @pytest.mark.parametrize("hue, family", [
        (5.0, HueFamily.R),
        (5.0, HueFamily.Y),
        (5.0, HueFamily.G),
        (5.0, HueFamily.BG),
        (5.0, HueFamily.PB),
        (5.0, HueFamily.P),
    ])
    def test_max_chroma_is_unimodal_in_value(self, engine, hue, family):
        chromas = [engine.gamut.search(hue, family, value).max_chroma for value in range(1, 10)]
        assert all(c > 0.0 for c in chromas)
        peak = int(np.argmax(chromas))
        slack = 0.5
        assert all(b >= a - slack for a, b in zip(chromas[:peak], chromas[1:peak + 1]))
        assert all(b <= a + slack for a, b in zip(chromas[peak:], chromas[peak + 1:]))

    @pytest.mark.parametrize("family", [HueFamily.R, HueFamily.G, HueFamily.P])
    def test_max_chroma_peaks_at_middle_values(self, engine, family):
        chromas = [engine.gamut.search(5.0, family, value).max_chroma for value in range(1, 10)]
        assert 0 < int(np.argmax(chromas)) < 8

    def test_boundary_brackets_the_limits(self, engine):
        outcome = engine.gamut.search(5.0, HueFamily.PB, 4)
        assert outcome.iterations > 0
        assert outcome.forward_failures >= 0
        x, y, Y = engine.forward.convert_or_raise(MunsellSpec(4.0, 5.0, HueFamily.PB, outcome.max_chroma))
        assert engine.limits.contains(x, y, Y)

    @pytest.mark.parametrize("hue, value", [(5.0, 0.5), (5.0, 9.5), (11.0, 5.0)])
    def test_invalid_input(self, engine, hue, value):
        with pytest.raises(InvalidSpecificationError):
            engine.gamut.search(hue, HueFamily.R, value)

    def test_settings_validation(self):
        with pytest.raises(ValueError):
            GamutSettings(tolerance=0.0)
        with pytest.raises(ValueError):
            GamutSettings(upper=-1.0)

    def test_load_matrix(self, engine, tmp_path):
        boundary = GamutBoundary(engine.forward, engine.limits)
        path = tmp_path / "max_chroma.npz"
        np.savez(path, max_chroma=np.full((40, 9), 3.0), illuminant=np.array("C"))
        boundary.load_matrix(path)
        assert boundary.max_chroma_matrix()[12, 4] == 3.0

        boundary.save_matrix(tmp_path / "copy.npz")
        again = GamutBoundary(engine.forward, engine.limits)
        np.testing.assert_array_equal(again.load_matrix(tmp_path / "copy.npz"), np.full((40, 9), 3.0))

    def test_computed_matrix_survives_save_and_load(self, engine, tmp_path):
        boundary = GamutBoundary(engine.forward, engine.limits, GamutSettings(tolerance=0.5))
        computed = boundary.max_chroma_matrix()
        assert computed.shape == (40, 9)
        assert not computed.flags.writeable
        assert (computed > 0.0).all()
        path = tmp_path / "computed.npz"
        boundary.save_matrix(path)
        again = GamutBoundary(engine.forward, engine.limits)
        np.testing.assert_array_equal(again.load_matrix(path), computed)
        np.testing.assert_array_equal(again.max_chroma_matrix(), computed)

    def test_load_matrix_checks(self, engine, tmp_path):
        boundary = GamutBoundary(engine.forward, engine.limits)
        path = tmp_path / "bad.npz"
        np.savez(path, max_chroma=np.ones((40, 8)), illuminant=np.array("C"))
        with pytest.raises(ValueError):
            boundary.load_matrix(path)
        np.savez(path, max_chroma=np.ones((40, 9)), illuminant=np.array("D65"))
        with pytest.raises(ValueError):
            boundary.load_matrix(path)
