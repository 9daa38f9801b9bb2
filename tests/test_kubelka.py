# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import numpy as np
import pytest

from swatch_kubelka import (
    KSMethod,
    compare_reflectance_spectra,
    k1_from_refractive_indices,
    k_and_s_from_mixtures,
    k_over_s_from_masstone,
    masstone_reflectance,
    mixture_reflectance,
    saunderson_correction,
    saunderson_correction_inverse,
)

# Two paints at five wavelengths: a dark absorber and a light scatterer.
PAINT_K = np.array([[0.9, 0.7, 0.5, 0.4, 0.3],
                    [0.05, 0.08, 0.1, 0.2, 0.4]])
PAINT_S = np.array([[0.2, 0.25, 0.3, 0.3, 0.35],
                    [0.9, 0.8, 0.85, 0.7, 0.6]])
MIXTURES = np.array([[1.0, 0.0], [0.0, 1.0], [0.5, 0.5], [0.2, 0.8], [0.75, 0.25]])


class TestMasstone:
    def test_known_ratio(self):
        assert k_over_s_from_masstone(0.5) == pytest.approx(0.25)
        assert type(k_over_s_from_masstone(0.5)) is float

    def test_limits(self):
        assert k_over_s_from_masstone(1.0) == 0.0
        assert k_over_s_from_masstone(0.0) == np.inf
        assert masstone_reflectance(0.3, 0.0) == 0.0
        assert masstone_reflectance(0.0, 0.3) == pytest.approx(1.0)

    def test_inverse(self):
        r = np.linspace(0.01, 1.0, 25)
        np.testing.assert_allclose(masstone_reflectance(k_over_s_from_masstone(r), 1.0), r, atol=1e-12)

    def test_scale_invariance(self):
        assert masstone_reflectance(0.4, 0.8) == pytest.approx(masstone_reflectance(0.1, 0.2))

    @pytest.mark.parametrize("r", [-0.1, 1.2])
    def test_reflectance_out_of_range(self, r):
        with pytest.raises(ValueError):
            k_over_s_from_masstone(r)

    def test_negative_coefficients(self):
        with pytest.raises(ValueError):
            masstone_reflectance(-0.1, 0.5)


class TestSaunderson:
    def test_no_surface_is_identity(self):
        r = np.array([0.1, 0.5, 0.9])
        np.testing.assert_allclose(saunderson_correction(r, 0.0, 0.0), r)

    def test_black_reflects_k1(self):
        assert saunderson_correction(0.0, 0.04, 0.6) == pytest.approx(0.04)

    def test_inverse(self):
        r = np.linspace(0.0, 1.0, 11)
        measured = saunderson_correction(r, 0.04, 0.6)
        np.testing.assert_allclose(saunderson_correction_inverse(measured, 0.04, 0.6), r, atol=1e-12)

    def test_k1_of_air_and_binder(self):
        assert k1_from_refractive_indices(1.0, 1.5) == pytest.approx(0.04)
        assert k1_from_refractive_indices(1.5, 1.5) == 0.0


class TestMixtures:
    def test_pure_paint_is_its_masstone(self):
        res = mixture_reflectance(np.array([0.0, 3.0]), PAINT_K, PAINT_S)
        np.testing.assert_allclose(res, masstone_reflectance(PAINT_K[1], PAINT_S[1]))

    def test_shape_and_range(self):
        res = mixture_reflectance(MIXTURES, PAINT_K, PAINT_S, k2=np.array([0.6, 0.5]))
        assert res.shape == (5, 5)
        assert ((res >= 0.0) & (res <= 1.0)).all()

    def test_surface_reflection_darkens(self):
        bare = mixture_reflectance(MIXTURES, PAINT_K, PAINT_S)
        coated = mixture_reflectance(MIXTURES, PAINT_K, PAINT_S, k2=0.6)
        assert (coated < bare).all()

    def test_mixture_lies_between_paints(self):
        res = mixture_reflectance(MIXTURES, PAINT_K, PAINT_S)
        low = np.minimum(res[0], res[1])
        high = np.maximum(res[0], res[1])
        assert ((res[2] >= low) & (res[2] <= high)).all()

    @pytest.mark.parametrize("conc", [np.array([[0.0, 0.0]]), np.array([[-0.5, 1.5]]),
                                      np.array([[0.3, 0.3, 0.4]])])
    def test_bad_concentrations(self, conc):
        with pytest.raises(ValueError):
            mixture_reflectance(conc, PAINT_K, PAINT_S)


@pytest.mark.parametrize("method", list(KSMethod))
def test_coefficients_reproduce_mixtures(method):
    measured = mixture_reflectance(MIXTURES, PAINT_K, PAINT_S)
    fit = k_and_s_from_mixtures(measured, MIXTURES, method)
    assert fit.n_paints == 2
    assert fit.K.shape == fit.S.shape == (2, 5)
    assert (fit.K >= 0.0).all() and (fit.S >= 0.0).all()
    np.testing.assert_allclose(fit.K.sum(axis=0) + fit.S.sum(axis=0), 1.0, atol=1e-6)
    np.testing.assert_allclose(mixture_reflectance(MIXTURES, fit.K, fit.S), measured, atol=1e-6)
    np.testing.assert_allclose(fit.K / fit.S, PAINT_K / PAINT_S, rtol=1e-5)


def test_coefficients_reject_bad_input():
    measured = mixture_reflectance(MIXTURES, PAINT_K, PAINT_S)
    with pytest.raises(ValueError):
        k_and_s_from_mixtures(measured[:3], MIXTURES)
    with pytest.raises(ValueError):
        k_and_s_from_mixtures(np.zeros_like(measured), MIXTURES)


def test_compare_reflectance_spectra(wavelengths):
    flat = np.full((2, wavelengths.size), 0.4)
    rms, de = compare_reflectance_spectra(wavelengths, flat, flat)
    assert rms == 0.0
    np.testing.assert_allclose(de, 0.0, atol=1e-9)

    lighter = flat + np.array([[0.0], [0.1]])
    rms, de = compare_reflectance_spectra(wavelengths, flat, lighter)
    assert rms == pytest.approx(np.sqrt(0.5 * 0.01))
    assert de.shape == (2,)
    assert de[0] == pytest.approx(0.0, abs=1e-9)
    assert de[1] > 1.0


def test_compare_rejects_mismatched_shapes(wavelengths):
    with pytest.raises(ValueError):
        compare_reflectance_spectra(wavelengths, np.full((2, wavelengths.size), 0.4),
                                    np.full((1, wavelengths.size), 0.4))
