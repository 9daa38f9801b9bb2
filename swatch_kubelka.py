# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Kubelka-Munk Layer
==================
Two-constant Kubelka-Munk relations for opaque paint films.

A masstone (infinitely thick film) with absorption K and scattering S has
internal reflectance

    R_inf = 1 + K/S - sqrt((K/S)^2 + 2 K/S),      K/S = (1 - R_inf)^2 / (2 R_inf)

Mixtures add K and S in proportion to concentration.  The Saunderson
correction converts between the internal reflectance and what a
spectrophotometer measures at the air/binder surface:

    R_m = k1 + (1 - k1)(1 - k2) R_inf / (1 - k2 R_inf)

with k1 the external and k2 the internal surface reflection.

References:
    - Walowit, McCarthy & Berns (1987), "An Algorithm for the Optimization
      of Kubelka-Munk Absorption and Scattering Coefficients"
    - Centore (2015), "Enforcing Constraints in Kubelka-Munk Calculations"
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Tuple, Union

import numpy as np
from scipy.optimize import nnls

from swatch_colorengine import ArrayFloat, ColorMetrics
from swatch_illuminants import (
    C_2,
    IllumObsLike,
    reflectances_to_cie_with_white_y100,
    white_point_with_y100,
)

__all__ = [
    "KSMethod",
    "KSCoefficients",
    "k_over_s_from_masstone",
    "masstone_reflectance",
    "saunderson_correction",
    "saunderson_correction_inverse",
    "k1_from_refractive_indices",
    "mixture_reflectance",
    "k_and_s_from_mixtures",
    "compare_reflectance_spectra",
]

ScalarOrArray = Union[float, ArrayFloat]

# Weight of the sum-to-one row in the constrained fit, relative to the
# largest mixture equation.
_SUM_ROW_WEIGHT: Final[float] = 1e3


def _scalar_or_array(res: np.ndarray) -> ScalarOrArray:
    return float(res) if res.ndim == 0 else res


def k_over_s_from_masstone(reflectance: ScalarOrArray) -> ScalarOrArray:
    """
    K/S of a masstone from its internal reflectance; ``inf`` where R is 0.

    Raises:
        ValueError: A reflectance lies outside [0, 1].
    """
    r = np.asarray(reflectance, dtype=np.float64)
    if r.size and (r.min() < 0.0 or r.max() > 1.0):
        raise ValueError("Masstone reflectances must be between 0 and 1.")
    res = np.where(r > 0.0, (1.0 - r) ** 2 / (2.0 * np.where(r > 0.0, r, 1.0)), np.inf)
    return _scalar_or_array(res)


def masstone_reflectance(K: ScalarOrArray, S: ScalarOrArray) -> ScalarOrArray:
    """
    Internal reflectance of a masstone with coefficients ``K`` and ``S``.

    Zero scattering absorbs everything and reflects 0.

    Raises:
        ValueError: Negative coefficients.
    """
    k = np.asarray(K, dtype=np.float64)
    s = np.asarray(S, dtype=np.float64)
    if (k.size and k.min() < 0.0) or (s.size and s.min() < 0.0):
        raise ValueError("Kubelka-Munk coefficients must be non-negative.")
    ratio = k / np.where(s > 0.0, s, 1.0)
    res = np.where(s > 0.0, 1.0 + ratio - np.sqrt(ratio * ratio + 2.0 * ratio), 0.0)
    return _scalar_or_array(res)


def saunderson_correction(r_inf: ScalarOrArray, k1: float, k2: float) -> ScalarOrArray:
    """Measured reflectance of a film with internal reflectance ``r_inf``."""
    r = np.asarray(r_inf, dtype=np.float64)
    res = k1 + (1.0 - k1) * (1.0 - k2) * r / (1.0 - k2 * r)
    return _scalar_or_array(res)


def saunderson_correction_inverse(r_measured: ScalarOrArray, k1: float, k2: float) -> ScalarOrArray:
    """Internal reflectance behind a measured reflectance."""
    r = np.asarray(r_measured, dtype=np.float64)
    res = (r - k1) / (1.0 - k1 - k2 + k2 * r)
    return _scalar_or_array(res)


def k1_from_refractive_indices(n1: ScalarOrArray, n2: ScalarOrArray) -> ScalarOrArray:
    """Fresnel reflection at normal incidence between media of index n1 and n2."""
    a = np.asarray(n1, dtype=np.float64)
    b = np.asarray(n2, dtype=np.float64)
    return _scalar_or_array(((b - a) / (a + b)) ** 2)


def _concentration_rows(concentrations: ArrayFloat, n_paints: int) -> np.ndarray:
    c = np.atleast_2d(np.asarray(concentrations, dtype=np.float64))
    if c.shape[1] != n_paints:
        raise ValueError(f"Expected {n_paints} concentrations per mixture, got {c.shape[1]}")
    if c.min() < 0.0:
        raise ValueError("Concentrations must be non-negative.")
    totals = c.sum(axis=1)
    if (totals <= 0.0).any():
        raise ValueError("Every mixture needs a positive total concentration.")
    return c / totals[:, None]


def mixture_reflectance(concentrations: ArrayFloat, K: ArrayFloat, S: ArrayFloat,
                        k2: Union[float, ArrayFloat] = 0.0) -> ArrayFloat:
    """
    Measured reflectance spectra of paint mixtures.

    Args:
        concentrations: (M, P) concentrations of the P paints in M mixtures;
            each row is normalised to sum to 1.
        K, S: (P, W) coefficients of the paints at W wavelengths.
        k2: Internal surface reflection per paint (P,) or shared; a
            mixture uses the concentration-weighted mean.  The external
            reflection k1 is taken as 0.

    Returns:
        (M, W) reflectances, clipped to [0, 1].  A single mixture (P,) gives (W,).
    """
    k = np.atleast_2d(np.asarray(K, dtype=np.float64))
    s = np.atleast_2d(np.asarray(S, dtype=np.float64))
    if k.shape != s.shape:
        raise ValueError(f"K {k.shape} and S {s.shape} must have the same shape")
    c = _concentration_rows(concentrations, k.shape[0])
    k2_paints = np.broadcast_to(np.asarray(k2, dtype=np.float64), (k.shape[0],))
    k2_mix = (c @ k2_paints)[:, None]

    r_inf = np.asarray(masstone_reflectance(c @ k, c @ s))
    res = np.clip(saunderson_correction(r_inf, 0.0, k2_mix), 0.0, 1.0)
    return res[0] if np.ndim(concentrations) == 1 else res


# =============================================================================
# COEFFICIENT ESTIMATION
# =============================================================================

class KSMethod(Enum):
    """How :func:`k_and_s_from_mixtures` solves each wavelength."""
    # Walowit et al.: ordinary least squares, then clipped to [0, 1].
    LEAST_SQUARES = "least_squares"
    # Non-negative least squares (scipy nnls), no clipping needed.
    NON_NEGATIVE = "non_negative"


@dataclass(slots=True, frozen=True)
class KSCoefficients:
    """
    Estimated coefficients of P paints at W wavelengths.

    Only K/S ratios are determined by reflectance data, so each wavelength
    is scaled to make the coefficients of all paints sum to 1.
    """
    K: np.ndarray
    S: np.ndarray

    @property
    def n_paints(self) -> int:
        return int(self.K.shape[0])


def _mixture_equations(k_over_s: np.ndarray, c: np.ndarray) -> np.ndarray:
    # Each mixture obeys sum(c K) - (K/S)_mix sum(c S) = 0.
    return np.hstack([-c, k_over_s[:, None] * c])


def _solve_least_squares(A: np.ndarray) -> np.ndarray:
    n = A.shape[1]
    system = np.vstack([A, np.ones((1, n))])
    obs = np.zeros(system.shape[0])
    obs[-1] = 1.0
    x, *_ = np.linalg.lstsq(system, obs, rcond=None)
    return np.clip(x, 0.0, 1.0)


def _solve_non_negative(A: np.ndarray) -> np.ndarray:
    n = A.shape[1]
    weight = _SUM_ROW_WEIGHT * max(1.0, float(np.abs(A).max()))
    system = np.vstack([A, np.full((1, n), weight)])
    obs = np.zeros(system.shape[0])
    obs[-1] = weight
    x, _ = nnls(system, obs)
    total = x.sum()
    if total <= 0.0:
        raise ArithmeticError("Non-negative fit collapsed to zero coefficients")
    return x / total


def k_and_s_from_mixtures(reflectances: ArrayFloat, concentrations: ArrayFloat,
                          method: KSMethod = KSMethod.NON_NEGATIVE) -> KSCoefficients:
    """
    Estimate paint coefficients from measured mixtures, one wavelength at a time.

    Args:
        reflectances: (M, W) internal reflectances of M mixtures.  Apply
            :func:`saunderson_correction_inverse` to measured data first.
        concentrations: (M, P) concentrations of the paints in each mixture.
        method: Solver for each wavelength.

    Raises:
        ValueError: Mismatched shapes, or a reflectance outside (0, 1].
    """
    r = np.atleast_2d(np.asarray(reflectances, dtype=np.float64))
    c = np.atleast_2d(np.asarray(concentrations, dtype=np.float64))
    if r.shape[0] != c.shape[0]:
        raise ValueError(f"{r.shape[0]} reflectance spectra but {c.shape[0]} concentration rows")
    if r.min() <= 0.0 or r.max() > 1.0:
        raise ValueError("Mixture reflectances must lie in (0, 1].")
    c = _concentration_rows(c, c.shape[1])
    n_paints = c.shape[1]
    solve = _solve_non_negative if method is KSMethod.NON_NEGATIVE else _solve_least_squares

    K = np.empty((n_paints, r.shape[1]))
    S = np.empty((n_paints, r.shape[1]))
    for w in range(r.shape[1]):
        x = solve(_mixture_equations(np.asarray(k_over_s_from_masstone(r[:, w])), c))
        K[:, w] = x[:n_paints]
        S[:, w] = x[n_paints:]
    return KSCoefficients(K, S)


def compare_reflectance_spectra(wavelengths: ArrayFloat, targets: ArrayFloat, matches: ArrayFloat,
                                illum_obs: IllumObsLike = C_2) -> Tuple[float, ArrayFloat]:
    """
    How well attempted matches reproduce target spectra.

    Returns:
        The RMS reflectance difference over all spectra and wavelengths, and
        one CIEDE2000 per pair under ``illum_obs``.
    """
    t = np.atleast_2d(np.asarray(targets, dtype=np.float64))
    m = np.atleast_2d(np.asarray(matches, dtype=np.float64))
    if t.shape != m.shape:
        raise ValueError(f"Targets {t.shape} and matches {m.shape} must have the same shape")
    rms = float(np.sqrt(np.mean((t - m) ** 2)))
    white = white_point_with_y100(illum_obs, wavelengths)
    xyz_t = reflectances_to_cie_with_white_y100(wavelengths, t, illum_obs)[:, :3]
    xyz_m = reflectances_to_cie_with_white_y100(wavelengths, m, illum_obs)[:, :3]
    return rms, np.atleast_1d(ColorMetrics.delta_E_2000_xyz(xyz_t, xyz_m, white))
