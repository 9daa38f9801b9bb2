# -*- coding: utf-8 -*-
"""
Swatch: Munsell renotation and colorimetry for surface colours
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

xyY -> Munsell
==============
Iterative inversion of the forward renotation interpolation (Centore, 2012).

Value follows directly from Y.  Hue and chroma are then found by alternating
one-dimensional searches in polar coordinates about the grey of that value:

    hue step     trial hues are placed along the chromaticity-diagram hue
                 angle until the angular error changes sign; the hue angle
                 change that zeroes the error is interpolated (extrapolated
                 when the data run out after two trials).
    chroma step  trial chromas are scaled by powers of r_in / r_current until
                 they bracket the input radius; chroma is interpolated.

The loop ends once the xy distance to the input falls below the convergence
threshold.  Every trial is a full forward conversion, so the result is the
exact inverse of :class:`MunsellToChromaticity` to within that threshold.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from swatch_colorengine import RAD2DEG, XY_WHITE_C, ArrayFloat, ColorSpaceEngine, white_from_xy
from swatch_forward import MunsellToChromaticity
from swatch_gamut import MacAdamLimits
from swatch_luminance import luminance_factor_to_munsell_value
from swatch_notation import (
    HueFamily,
    MunsellSpec,
    approximate_munsell_from_lch,
    chromaticity_angle_to_munsell_hue,
    munsell_hue_to_chromaticity_angle,
)
from swatch_status import ConversionResult, ConversionStatus

__all__ = ["InverseSettings", "ChromaticityToMunsell"]


@dataclass(slots=True, frozen=True)
class InverseSettings:
    """
    Thresholds of the inverse search.

    Attributes:
        convergence_threshold: xy distance at which the search stops.
        grey_threshold: xy distance from the grey below which the input is
            reported as a neutral.
        max_iterations: Cap on hue plus chroma steps.
        max_bracket_attempts: Cap on trials per hue or chroma step.
        value_snap_tolerance: Values this close to an integer are rounded.
        initial_chroma_scale: Factor on the CIELAB-derived first chroma guess.
    """
    convergence_threshold: float = 1e-4
    grey_threshold: float = 1e-3
    max_iterations: int = 60
    max_bracket_attempts: int = 10
    value_snap_tolerance: float = 1e-3
    initial_chroma_scale: float = 5.0 / 5.5

    def __post_init__(self) -> None:
        if self.convergence_threshold <= 0.0 or self.grey_threshold <= 0.0:
            raise ValueError("Thresholds must be positive")
        if self.max_iterations < 1 or self.max_bracket_attempts < 1:
            raise ValueError("Iteration caps must be at least 1")


class _SearchAborted(Exception):
    """Internal early exit carrying the status to report."""

    def __init__(self, status: ConversionStatus, message: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def _polar(x: float, y: float, centre: Tuple[float, float]) -> Tuple[float, float]:
    """(angle in degrees [0, 360), radius) of xy about ``centre``."""
    dx, dy = x - centre[0], y - centre[1]
    return (math.atan2(dy, dx) * RAD2DEG) % 360.0, math.hypot(dx, dy)


def _signed_angle(diff: float) -> float:
    """Fold an angle difference into (-180, 180]."""
    diff = diff % 360.0
    return diff - 360.0 if diff > 180.0 else diff


def _interp_with_extrapolation(xs: Sequence[float], ys: Sequence[float], x0: float) -> float:
    """Linear interpolation at ``x0``, extrapolating from the end segments."""
    order = np.argsort(xs, kind="stable")
    xp = np.asarray(xs, dtype=np.float64)[order]
    fp = np.asarray(ys, dtype=np.float64)[order]
    if xp.size == 1 or xp[0] <= x0 <= xp[-1]:
        return float(np.interp(x0, xp, fp))
    if x0 < xp[0]:
        i, j = 0, int(np.searchsorted(xp, xp[0], side="right"))
    else:
        j = xp.size - 1
        i = int(np.searchsorted(xp, xp[-1], side="left")) - 1
    if i < 0 or j >= xp.size or xp[j] == xp[i]:
        return float(fp[0] if x0 < xp[0] else fp[-1])
    return float(fp[i] + (fp[j] - fp[i]) * (x0 - xp[i]) / (xp[j] - xp[i]))


class ChromaticityToMunsell:
    """
    Inverse conversion of CIE xyY (Illuminant C, Y on 0..100) to Munsell.

    Args:
        forward: The forward conversion being inverted.  Its renotation
            table also bounds the chroma of trial points.
        limits: MacAdam limits for Illuminant C.
        settings: Search thresholds.
    """
    __slots__ = ("_forward", "_limits", "_settings")

    def __init__(self, forward: MunsellToChromaticity, limits: MacAdamLimits,
                 settings: InverseSettings = InverseSettings()) -> None:
        self._forward = forward
        self._limits = limits
        self._settings = settings

    @property
    def settings(self) -> InverseSettings:
        return self._settings

    # -- public API --------------------------------------------------------
    def convert(self, x: float, y: float, Y: float) -> ConversionResult[MunsellSpec]:
        """
        Munsell specification of xyY.

        Returns:
            SUCCESS, OUTSIDE_GAMUT (beyond the MacAdam limits),
            DATA_UNAVAILABLE (a trial point fell beyond the extrapolated
            renotation) or NON_CONVERGENCE (iteration caps exhausted; also
            emitted as a ``RuntimeWarning``).
        """
        x, y, Y = float(x), float(y), float(Y)
        if Y == 0.0:
            return ConversionResult.success(MunsellSpec.neutral(0.0))
        if not self._limits.contains(x, y, Y):
            return ConversionResult.failure(
                ConversionStatus.OUTSIDE_GAMUT,
                f"{x:g}, {y:g}, {Y:g} outside MacAdam limits",
            )
        try:
            return self._search(x, y, Y)
        except _SearchAborted as exc:
            if exc.status is ConversionStatus.NON_CONVERGENCE:
                warnings.warn(
                    f"xyY ({x:g}, {y:g}, {Y:g}): {exc.message}",
                    RuntimeWarning,
                    stacklevel=2,
                )
            return ConversionResult.failure(exc.status, exc.message)

    def convert_or_raise(self, x: float, y: float, Y: float) -> MunsellSpec:
        return self.convert(x, y, Y).unwrap()

    def convert_many(self, xyY: ArrayFloat) -> List[ConversionResult[MunsellSpec]]:
        """Convert each row of an (N, 3) xyY array."""
        arr = np.atleast_2d(np.asarray(xyY, dtype=np.float64))
        if arr.shape[-1] != 3:
            raise ValueError(f"Expected last dimension size 3, got {arr.shape[-1]}")
        return [self.convert(*row) for row in arr]

    # -- search ------------------------------------------------------------
    def _xy(self, hue: float, family: HueFamily, value: float, chroma: float) -> Tuple[float, float]:
        result = self._forward.convert(MunsellSpec(value, hue, family, chroma))
        if not result.ok:
            raise _SearchAborted(ConversionStatus.DATA_UNAVAILABLE, result.message)
        return result.value.x, result.value.y  # type: ignore[union-attr]

    def _max_chroma(self, hue: float, family: HueFamily, value: float) -> float:
        limit = self._forward.table.max_chroma_for_extrapolated_renotation(
            hue, family, value, self._forward.luminance)
        if limit <= 0.0:
            raise _SearchAborted(
                ConversionStatus.DATA_UNAVAILABLE,
                f"no chromatic renotation data at value {value:g}",
            )
        return limit

    def _initial_guess(self, x: float, y: float, Y: float, value: float,
                       theta_input: float) -> Tuple[float, HueFamily, float]:
        xyz = ColorSpaceEngine.xyY_to_xyz(np.array([x, y, Y]))
        reference = white_from_xy(XY_WHITE_C[0], XY_WHITE_C[1], 100.0)
        L, C, h = ColorSpaceEngine.lab_to_lch(ColorSpaceEngine.xyz_to_lab(xyz, reference))
        guess = approximate_munsell_from_lch(L, C, h)
        if guess.is_neutral:
            hue, family = chromaticity_angle_to_munsell_hue(theta_input)
            return hue, family, 1.0
        return guess.hue, guess.family, self._settings.initial_chroma_scale * guess.chroma  # type: ignore[return-value]

    def _search(self, x: float, y: float, Y: float) -> ConversionResult[MunsellSpec]:
        s = self._settings
        value = luminance_factor_to_munsell_value(min(Y, 100.0), self._forward.luminance)
        if abs(value - round(value)) < s.value_snap_tolerance:
            value = float(round(value))

        grey = self._forward.convert(MunsellSpec.neutral(value))
        if not grey.ok:
            return ConversionResult.failure(grey.status, grey.message)
        centre = (grey.value.x, grey.value.y)  # type: ignore[union-attr]
        theta_input, r_input = _polar(x, y, centre)

        if r_input < s.grey_threshold:
            return ConversionResult.success(MunsellSpec.neutral(value))
        if value < 1.0:
            return ConversionResult.failure(
                ConversionStatus.DATA_UNAVAILABLE,
                f"no chromatic renotation data below value 1 (value {value:.3g})",
            )

        hue, family, chroma = self._initial_guess(x, y, Y, value, theta_input)
        distance = math.nan
        tries = 0
        while tries <= s.max_iterations:
            # Hue step
            tries += 1
            max_chroma = self._max_chroma(hue, family, value)
            chroma = min(chroma, max_chroma)
            hue, family = self._hue_step(hue, family, value, chroma, centre, theta_input)
            x_cur, y_cur = self._xy(hue, family, value, chroma)
            distance = math.hypot(x - x_cur, y - y_cur)
            if distance < s.convergence_threshold:
                return ConversionResult.success(MunsellSpec(value, hue, family, chroma),
                                                tries, distance)

            # Chroma step
            tries += 1
            max_chroma = self._max_chroma(hue, family, value)
            chroma = min(chroma, max_chroma)
            chroma = self._chroma_step(hue, family, value, chroma, max_chroma, centre, r_input)
            x_cur, y_cur = self._xy(hue, family, value, chroma)
            distance = math.hypot(x - x_cur, y - y_cur)
            if distance < s.convergence_threshold:
                return ConversionResult.success(MunsellSpec(value, hue, family, chroma),
                                                tries, distance)

        raise _SearchAborted(
            ConversionStatus.NON_CONVERGENCE,
            f"exceeded maximum number of iterations ({s.max_iterations}); "
            f"last distance {distance:.3g}",
        )

    def _hue_step(self, hue: float, family: HueFamily, value: float, chroma: float,
                  centre: Tuple[float, float], theta_input: float) -> Tuple[float, HueFamily]:
        current_angle = munsell_hue_to_chromaticity_angle(hue, family)
        theta_cur, _ = _polar(*self._xy(hue, family, value, chroma), centre)
        error = _signed_angle(theta_cur - theta_input)

        errors = [error]
        angle_changes = [0.0]
        attempt = 0
        while not (min(errors) <= 0.0 <= max(errors)):
            attempt += 1
            if attempt > self._settings.max_bracket_attempts:
                raise _SearchAborted(
                    ConversionStatus.NON_CONVERGENCE,
                    "could not bracket the hue angle",
                )
            change = _signed_angle(attempt * (theta_input - theta_cur))
            trial_hue, trial_family = chromaticity_angle_to_munsell_hue(current_angle + change)
            result = self._forward.convert(MunsellSpec(value, trial_hue, trial_family, chroma))
            if not result.ok:
                if len(errors) >= 2:
                    break
                raise _SearchAborted(ConversionStatus.DATA_UNAVAILABLE, result.message)
            theta_trial, _ = _polar(result.value.x, result.value.y, centre)  # type: ignore[union-attr]
            errors.append(_signed_angle(theta_trial - theta_input))
            angle_changes.append(change)

        new_change = _interp_with_extrapolation(errors, angle_changes, 0.0) % 360.0
        return chromaticity_angle_to_munsell_hue((current_angle + new_change) % 360.0)

    def _chroma_step(self, hue: float, family: HueFamily, value: float, chroma: float,
                     max_chroma: float, centre: Tuple[float, float], r_input: float) -> float:
        _, r_cur = _polar(*self._xy(hue, family, value, chroma), centre)
        radii = [r_cur]
        chromas = [chroma]
        attempt = 0
        while r_input < min(radii) or r_input > max(radii):
            attempt += 1
            if attempt > self._settings.max_bracket_attempts or r_cur <= 0.0:
                raise _SearchAborted(
                    ConversionStatus.NON_CONVERGENCE,
                    "could not bracket the chroma",
                )
            trial = min((r_input / r_cur) ** attempt * chroma, max_chroma)
            _, r_trial = _polar(*self._xy(hue, family, value, trial), centre)
            radii.append(r_trial)
            chromas.append(trial)

        order = np.argsort(radii, kind="stable")
        return float(np.interp(r_input, np.asarray(radii)[order], np.asarray(chromas)[order]))
