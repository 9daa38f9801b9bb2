# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import numpy as np
import pytest

from swatch_illuminants import (
    C_2,
    Illuminant,
    IlluminantObserver,
    Observer,
    chromaticity_of_white_point,
    colour_matching_functions,
    illuminant_spd,
    reflectances_to_cie_with_white_y100,
    spectral_power_to_xyz,
    white_point_with_y100,
)


class TestKeys:
    @pytest.mark.parametrize("text, illuminant, observer", [
        ("C/2", Illuminant.C, Observer.CIE_1931_2),
        ("d65_10", Illuminant.D65, Observer.CIE_1964_10),
        ("FL11/2", Illuminant.F11, Observer.CIE_1931_2),
        ("f2/10", Illuminant.F2, Observer.CIE_1964_10),
    ])
    def test_parse(self, text, illuminant, observer):
        assert IlluminantObserver.parse(text) == IlluminantObserver(illuminant, observer)

    @pytest.mark.parametrize("text", ["Q/2", "C/5", "C", "C/2/10"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            IlluminantObserver.parse(text)

    def test_str(self):
        assert str(C_2) == "C/2"
        assert str(IlluminantObserver.parse("d65_10")) == "D65/10"


class TestSpectralData:
    def test_shapes(self, wavelengths):
        assert illuminant_spd(Illuminant.D65, wavelengths).shape == wavelengths.shape
        assert colour_matching_functions(Observer.CIE_1931_2, wavelengths).shape == (wavelengths.size, 3)

    def test_read_only(self, wavelengths):
        with pytest.raises(ValueError):
            illuminant_spd(Illuminant.C, wavelengths)[0] = 1.0

    def test_wavelengths_must_increase(self):
        with pytest.raises(ValueError):
            illuminant_spd(Illuminant.C, np.array([500.0, 490.0, 480.0]))

    def test_equal_energy_emission(self, wavelengths):
        X, Y, Z = spectral_power_to_xyz(wavelengths, np.ones(wavelengths.size))
        assert X / Y == pytest.approx(1.0, abs=0.01)
        assert Z / Y == pytest.approx(1.0, abs=0.01)


class TestWhitePoints:
    def test_white_has_y100(self):
        assert white_point_with_y100("C/2")[1] == pytest.approx(100.0)
        assert white_point_with_y100("D50/10")[1] == pytest.approx(100.0)

    @pytest.mark.parametrize("key, xy", [
        ("C/2", (0.3101, 0.3162)),
        ("D65/2", (0.3127, 0.3290)),
        ("A/2", (0.4476, 0.4074)),
        ("E/2", (1.0 / 3.0, 1.0 / 3.0)),
    ])
    def test_chromaticity(self, key, xy):
        assert chromaticity_of_white_point(key) == pytest.approx(xy, abs=2e-3)


class TestReflectances:
    def test_flat_grey(self, wavelengths):
        cie = reflectances_to_cie_with_white_y100(wavelengths, np.full(wavelengths.size, 0.5))
        assert cie.shape == (6,)
        assert cie[1] == pytest.approx(50.0)
        assert cie[5] == pytest.approx(50.0)
        assert tuple(cie[3:5]) == pytest.approx(chromaticity_of_white_point(C_2, wavelengths))

    def test_batch(self, wavelengths):
        refl = np.vstack([np.full(wavelengths.size, 0.2), np.linspace(0.0, 1.0, wavelengths.size)])
        cie = reflectances_to_cie_with_white_y100(wavelengths, refl, "D65/10")
        assert cie.shape == (2, 6)
        # rising reflectance is reddish
        assert cie[1, 3] > cie[0, 3]

    def test_black_reports_white_chromaticity(self, wavelengths):
        cie = reflectances_to_cie_with_white_y100(wavelengths, np.zeros(wavelengths.size))
        assert cie[5] == 0.0
        assert tuple(cie[3:5]) == pytest.approx(chromaticity_of_white_point(C_2, wavelengths))

    def test_out_of_range(self, wavelengths):
        with pytest.raises(ValueError):
            reflectances_to_cie_with_white_y100(wavelengths, np.full(wavelengths.size, 1.2))

    def test_sample_count_mismatch(self, wavelengths):
        with pytest.raises(ValueError):
            reflectances_to_cie_with_white_y100(wavelengths, np.full(10, 0.5))
