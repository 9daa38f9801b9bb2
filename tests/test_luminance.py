# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later
"""

import numpy as np
import pytest

from swatch_luminance import (
    LuminanceFunction,
    luminance_factor_to_munsell_value,
    munsell_value_to_luminance_factor,
    munsell_value_to_optical_density,
)


def test_newhall_matches_renotation_neutrals():
    assert munsell_value_to_luminance_factor(5.0) == pytest.approx(19.77, abs=0.01)
    assert munsell_value_to_luminance_factor(4.0) == pytest.approx(12.00, abs=2e-3)


def test_astm_is_scaled_newhall():
    astm = munsell_value_to_luminance_factor(5.0, LuminanceFunction.ASTM_D1535)
    newhall = munsell_value_to_luminance_factor(5.0, LuminanceFunction.NEWHALL_1943)
    assert astm == pytest.approx(0.975 * newhall, rel=1e-3)
    assert munsell_value_to_luminance_factor(10.0, LuminanceFunction.ASTM_D1535) == pytest.approx(100.0, abs=0.01)


def test_cielab_relation():
    assert munsell_value_to_luminance_factor(5.0, LuminanceFunction.CIELAB) == pytest.approx(18.42, abs=0.01)


def test_array_shape_is_preserved():
    values = np.linspace(0.0, 10.0, 12).reshape(3, 4)
    assert munsell_value_to_luminance_factor(values).shape == (3, 4)


@pytest.mark.parametrize("method", list(LuminanceFunction))
def test_inverse(method):
    values = np.linspace(0.0, 10.0, 11)
    Y = munsell_value_to_luminance_factor(values, method)
    np.testing.assert_allclose(luminance_factor_to_munsell_value(Y, method), values, atol=1e-6)


def test_inverse_out_of_range():
    with pytest.raises(ValueError):
        luminance_factor_to_munsell_value(150.0)
    res = luminance_factor_to_munsell_value(np.array([19.77, 150.0, -1.0]))
    assert res[0] == pytest.approx(5.0, abs=1e-3)
    assert np.isnan(res[1:]).all()


def test_optical_density():
    assert munsell_value_to_optical_density(10.0) == pytest.approx(0.0, abs=1e-3)
    assert munsell_value_to_optical_density(5.0) == pytest.approx(
        -np.log10(munsell_value_to_luminance_factor(5.0, LuminanceFunction.ASTM_D1535) / 100.0))
    assert np.isinf(munsell_value_to_optical_density(0.0))


@pytest.mark.parametrize("method", list(LuminanceFunction))
def test_scalar_input_gives_python_float(method):
    Y = munsell_value_to_luminance_factor(4.0, method)
    assert type(Y) is float
    value = luminance_factor_to_munsell_value(Y, method)
    assert type(value) is float
    assert round(value) == 4


def test_zero_dimensional_array_is_scalar():
    assert type(luminance_factor_to_munsell_value(np.float64(12.0))) is float
    with pytest.raises(ValueError):
        luminance_factor_to_munsell_value(np.array(150.0))
