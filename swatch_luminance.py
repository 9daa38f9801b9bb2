# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Munsell value <-> luminance factor.

Three relations are provided:
    - NEWHALL_1943: the quintic of Newhall, Nickerson & Judd (1943), which
      reproduces the luminance factors of the renotation tables (MgO = 100).
    - ASTM_D1535: the ASTM D1535-08 quintic, 0.975 x Newhall, referred to the
      perfect reflecting diffuser.
    - CIELAB: Y from L* = 10 V, kept for cross-checks.

The forward relations are closed form; the inverse is a vectorised bisection
compiled with Numba (all three relations are strictly increasing on [0, 10]).
"""

from enum import Enum
from typing import Final, Union

import numpy as np
from numba import njit

from swatch_colorengine import ArrayFloat

__all__ = [
    "LuminanceFunction",
    "DEFAULT_LUMINANCE_FUNCTION",
    "munsell_value_to_luminance_factor",
    "luminance_factor_to_munsell_value",
    "munsell_value_to_optical_density",
]

ScalarOrArray = Union[float, ArrayFloat]

# Polynomial coefficients of V^1 .. V^5.
_NEWHALL_COEFFS: Final[np.ndarray] = np.array([1.2219, -0.23111, 0.23951, -0.021009, 0.0008404])
_ASTM_COEFFS: Final[np.ndarray] = np.array([1.1914, -0.22533, 0.23352, -0.020484, 0.00081939])

_BISECTION_TOLERANCE: Final[float] = 1e-10
_BISECTION_MAX_ITER: Final[int] = 100


class LuminanceFunction(Enum):
    NEWHALL_1943 = 0
    ASTM_D1535 = 1
    CIELAB = 2


DEFAULT_LUMINANCE_FUNCTION: Final[LuminanceFunction] = LuminanceFunction.NEWHALL_1943


@njit(cache=True, fastmath=True)
def _value_to_y_scalar(v: float, method: int, c: np.ndarray) -> float:
    """Luminance factor (0..~100) of Munsell value ``v``."""
    if method == 2:
        fy = (10.0 * v + 16.0) / 116.0
        delta = 6.0 / 29.0
        if fy > delta:
            return 100.0 * fy * fy * fy
        return 100.0 * 3.0 * (fy - 16.0 / 116.0) * delta * delta
    # Horner form of c0 v + c1 v^2 + ... + c4 v^5
    acc = c[4]
    for k in range(3, -1, -1):
        acc = acc * v + c[k]
    return acc * v

@njit(cache=True, fastmath=True)
def _value_to_y_kernel(values: np.ndarray, method: int, c: np.ndarray) -> np.ndarray:
    out = np.empty_like(values)
    v_flat = values.ravel()
    out_flat = out.ravel()
    for i in range(values.size):
        out_flat[i] = _value_to_y_scalar(v_flat[i], method, c)
    return out

@njit(cache=True, fastmath=False)
def _y_to_value_kernel(ys: np.ndarray, method: int, c: np.ndarray,
                       tol: float, max_iter: int) -> np.ndarray:
    """
    Bisection on [0, 10] for each luminance factor.

    Factors outside [Y(0), Y(10)] give NaN.
    """
    out = np.empty_like(ys)
    y_flat = ys.ravel()
    out_flat = out.ravel()
    y_lo = _value_to_y_scalar(0.0, method, c)
    y_hi = _value_to_y_scalar(10.0, method, c)
    for i in range(ys.size):
        target = y_flat[i]
        if target < y_lo or target > y_hi or target != target:
            out_flat[i] = np.nan
            continue
        lo, hi = 0.0, 10.0
        for _ in range(max_iter):
            mid = 0.5 * (lo + hi)
            if _value_to_y_scalar(mid, method, c) < target:
                lo = mid
            else:
                hi = mid
            if hi - lo < tol:
                break
        out_flat[i] = 0.5 * (lo + hi)
    return out


def _coefficients(method: LuminanceFunction) -> np.ndarray:
    if method is LuminanceFunction.ASTM_D1535:
        return _ASTM_COEFFS
    return _NEWHALL_COEFFS


def munsell_value_to_luminance_factor(
    value: ScalarOrArray,
    method: LuminanceFunction = DEFAULT_LUMINANCE_FUNCTION,
) -> ScalarOrArray:
    """
    Luminance factor Y (0..~100) for Munsell value(s).

    Args:
        value: Munsell value(s) in [0, 10].
        method: Which value/luminance relation to apply.

    Returns:
        Scalar for scalar input, array otherwise.
    """
    arr = np.asarray(value, dtype=np.float64)
    res = _value_to_y_kernel(np.ascontiguousarray(np.atleast_1d(arr)), method.value,
                             _coefficients(method))
    if arr.ndim == 0:
        return float(res[0])
    return res.reshape(arr.shape)


def luminance_factor_to_munsell_value(
    Y: ScalarOrArray,
    method: LuminanceFunction = DEFAULT_LUMINANCE_FUNCTION,
) -> ScalarOrArray:
    """
    Munsell value(s) for luminance factor(s) Y.

    Raises:
        ValueError: For scalar input outside the range of the relation.
            Array inputs carry NaN for such entries instead.
    """
    arr = np.asarray(Y, dtype=np.float64)
    res = _y_to_value_kernel(np.ascontiguousarray(np.atleast_1d(arr)), method.value, _coefficients(method),
                             _BISECTION_TOLERANCE, _BISECTION_MAX_ITER)
    if arr.ndim == 0:
        out = float(res[0])
        if np.isnan(out):
            raise ValueError(
                f"Luminance factor {float(arr)} outside the range of {method.name}"
            )
        return out
    return res.reshape(arr.shape)


def munsell_value_to_optical_density(
    value: ScalarOrArray,
    method: LuminanceFunction = LuminanceFunction.ASTM_D1535,
) -> ScalarOrArray:
    """Optical density D = -log10(Y/100) of a Munsell value (Dmax/Dmin)."""
    y = np.asarray(munsell_value_to_luminance_factor(value, method), dtype=np.float64)
    with np.errstate(divide="ignore"):
        d = -np.log10(y / 100.0)
    if d.ndim == 0:
        return float(d)
    return d
